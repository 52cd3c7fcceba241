"""
feedshield/errors.py
Error kinds raised or reported by the scoring core.
"""


class FeedShieldError(Exception):
    """Base class for all FeedShield errors."""


class EngineNotInitialized(FeedShieldError):
    """assess() called before initialize() or after cleanup()."""


class UnknownCategory(FeedShieldError):
    """
    Trigger mutation addressed a category that does not exist.
    Reported through the log and never raised to callers.
    """

    def __init__(self, category: str):
        super().__init__(f"Unknown lexicon category: {category}")
        self.category = category


class PersistenceFailure(FeedShieldError):
    """Blob store read or write failed in synchronize()/restore(). Logged, never propagated."""
