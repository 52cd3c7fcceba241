"""
feedshield/cli.py
Command-line interface for FeedShield.

USAGE:
  python -m feedshield.cli --text "Minha vida é perfeita! #blessed" --app instagram
  python -m feedshield.cli --input captures.jsonl --output assessments.jsonl
  python -m feedshield.cli --stats

INPUT FORMAT (--input):
  One JSON object per line: {"text": "...", "app": "instagram"}
  Extra keys are carried through to the output under "meta".

Raw snippet text is never written to --output or to the log.
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path

from feedshield.config import apply_config, load_config
from feedshield.models.assessment import Assessment, RISK_CRITICAL, RISK_HIGH, RISK_MEDIUM
from feedshield.pipeline import (
    BlockedEventLog,
    JsonlCaptureSource,
    JsonlSink,
    ListCaptureSource,
    run_pipeline,
)
from feedshield.scorer.engine import ScoringEngine
from feedshield.storage.blob_store import SqliteBlobStore

logger = logging.getLogger(__name__)

# ANSI colors
GREEN  = '\033[92m'
YELLOW = '\033[93m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'
BOLD   = '\033[1m'

RISK_COLORS = {RISK_CRITICAL: RED, RISK_HIGH: RED, RISK_MEDIUM: YELLOW}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'feedshield',
        description = 'FeedShield — psychological risk scoring for social-media snippets',
        formatter_class = argparse.RawDescriptionHelpFormatter,
        epilog = """
NOTE:
  Scores are rule-based heuristics, not clinical assessments.
  All processing is local — no data leaves your device.
        """
    )

    src = parser.add_mutually_exclusive_group()
    src.add_argument(
        '--text', '-t',
        help    = 'Score a single snippet',
    )
    src.add_argument(
        '--input', '-i',
        type    = Path,
        help    = 'JSON-lines file of {"text", "app"} objects',
    )
    parser.add_argument(
        '--app', '-a',
        default = 'unknown',
        help    = 'App identifier for --text, or default for --input lines (default: unknown)',
    )
    parser.add_argument(
        '--output', '-o',
        type    = Path,
        help    = 'Write assessments as JSON lines to this file',
    )
    parser.add_argument(
        '--db',
        type    = Path,
        help    = 'Blob store path for stats persistence (default: from config)',
    )
    parser.add_argument(
        '--config', '-c',
        type    = Path,
        help    = 'Directory containing feedshield_config.json (default: cwd)',
    )
    parser.add_argument(
        '--stats',
        action  = 'store_true',
        help    = 'Print persisted analysis stats and lexicon info, then exit',
    )
    parser.add_argument(
        '--no-sync',
        action  = 'store_true',
        help    = 'Do not write stats back to the blob store',
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level   = log_level,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    # ── ENGINE ───────────────────────────────────────────────
    config = load_config(args.config)
    store  = SqliteBlobStore(args.db or Path(config['db_path']))
    engine = ScoringEngine(store=store)
    apply_config(engine, config)
    engine.restore()

    if args.stats:
        _print_stats(engine)
        return 0

    if args.text is not None:
        source = ListCaptureSource([(args.text, args.app)])
    elif args.input is not None:
        if not args.input.exists():
            _print(f"{RED}Error: File not found: {args.input}{RESET}")
            return 1
        source = JsonlCaptureSource(args.input, default_app=args.app)
    else:
        _print(f"{YELLOW}Nothing to do — pass --text, --input or --stats.{RESET}")
        return 2

    # ── RUN ──────────────────────────────────────────────────
    sinks = [BlockedEventLog(store=None if args.no_sync else store)]
    out_fh = None
    if args.output:
        out_fh = args.output.open('w', encoding='utf-8')
        sinks.append(JsonlSink(out_fh))

    sync_every = int(config.get('auto_sync_every') or 0)

    def progress(count: int, assessment: Assessment):
        _print_assessment(count, assessment)
        if sync_every and not args.no_sync and count % sync_every == 0:
            asyncio.run(engine.synchronize())

    t0 = time.time()
    try:
        summary = run_pipeline(source, engine, sinks, progress_cb=progress)
    finally:
        if out_fh:
            out_fh.close()

    if not args.no_sync:
        asyncio.run(engine.synchronize())

    # ── SUMMARY ──────────────────────────────────────────────
    _print(f"\n{BOLD}{GREEN}✓ Complete{RESET} in {_elapsed(t0)}")
    _print(f"  Analyzed : {summary.analyzed:,}")
    _print(f"  Blocked  : {summary.blocked:,}")
    for label, n in sorted(summary.by_type.items(), key=lambda kv: -kv[1]):
        _print(f"    {label:<24} {n}")
    if args.output:
        _print(f"  Output   : {args.output.resolve()}")
    return 0


# ── PRINT HELPERS ────────────────────────────────────────────

def _print_assessment(count: int, a: Assessment):
    color = RISK_COLORS.get(a.risk_level, GREEN)
    verdict = f"{RED}BLOCK{RESET}" if a.should_block else f"{GREEN}pass{RESET}"
    _print(
        f"  {count:>4}  {verdict}  {color}{a.risk_level:<8}{RESET} "
        f"score={a.toxicity_score:<3} conf={a.confidence:<3} "
        f"tone={a.emotional_tone:<8} {CYAN}{a.trigger_type or '-'}{RESET}"
    )
    if a.found_triggers:
        _print(f"        triggers: {', '.join(a.found_triggers[:8])}")
    if a.contextual_factors:
        _print(f"        context : {'; '.join(a.contextual_factors[:5])}")


def _print_stats(engine: ScoringEngine):
    stats = engine.get_analysis_stats()
    info  = engine.get_database_info()
    _print(f"\n{BOLD}Analysis stats{RESET}")
    for k, v in stats.items():
        _print(f"  {k:<24} {v}")
    _print(f"\n{BOLD}Lexicon v{info['version']}{RESET} — {info['total_triggers']} entries")
    for cat, n in info['category_counts'].items():
        _print(f"  {cat:<24} {n}")


def _print(msg): print(msg)

def _elapsed(t0: float) -> str:
    s = time.time() - t0
    return f"{s:.1f}s" if s < 60 else f"{int(s//60)}m {int(s%60)}s"


if __name__ == '__main__':
    sys.exit(main())
