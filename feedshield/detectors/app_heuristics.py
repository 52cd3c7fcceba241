"""
feedshield/detectors/app_heuristics.py
Per-app score boosts. Small fixed decision table keyed by app id.
Accepts short names ("instagram") and Android package names.
"""

from typing import Dict, List, Tuple

# Android package name → short app key
APP_ALIASES: Dict[str, str] = {
    'com.instagram.android':    'instagram',
    'com.zhiliaoapp.musically': 'tiktok',
    'com.ss.android.ugc.trill': 'tiktok',
    'com.facebook.katana':      'facebook',
    'com.twitter.android':      'twitter',
    'x':                        'twitter',
    'com.linkedin.android':     'linkedin',
}

# Each rule: (mode, markers, points). mode 'any' fires if one marker is
# present, 'all' only if every marker is present.
Rule = Tuple[str, Tuple[str, ...], int]

APP_RULES: Dict[str, List[Rule]] = {
    'instagram': [
        ('all', ('story', 'lifestyle'), 12),
        ('any', ('influencer', 'sponsored'), 10),
        ('any', ('swipe up', 'link in bio'), 8),
    ],
    'tiktok': [
        ('any', ('challenge', 'trend'), 15),
        ('any', ('transformation', 'glow up'), 18),
        ('any', ('viral', 'famous'), 10),
    ],
    'facebook': [
        ('any', ('life update', 'achievement'), 12),
        ('any', ('milestone', 'celebration'), 8),
    ],
    'twitter': [
        ('all', ('thread', 'success'), 10),
        ('any', ('hot take', 'unpopular opinion'), 8),
    ],
    'linkedin': [
        ('any', ('promoted', 'new job', 'new role'), 12),
        ('all', ('grateful', 'opportunity'), 10),
    ],
}


def normalize_app(app_context: str) -> str:
    key = (app_context or 'unknown').strip().lower()
    return APP_ALIASES.get(key, key)


def app_score(text: str, app_context: str) -> int:
    """Additive boost for the given app. Unknown apps contribute 0."""
    rules = APP_RULES.get(normalize_app(app_context))
    if not rules:
        return 0
    lower = (text or '').lower()
    score = 0
    for mode, markers, points in rules:
        hits = [m in lower for m in markers]
        if (all(hits) if mode == 'all' else any(hits)):
            score += points
    return score
