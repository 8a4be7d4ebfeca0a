"""
scoring/levels.py
-----------------
Maturity level definitions and display bands for 1.0–5.0 scores.

These are labels for reporting only; they never feed back into scoring.
"""

from __future__ import annotations

from typing import Dict, Optional

MATURITY_LEVELS: Dict[int, Dict[str, str]] = {
    1: {
        "label": "Critical Vulnerability",
        "description": "No DR capability exists. Complete failure of service is "
                       "inevitable in a disaster event.",
    },
    2: {
        "label": "Basic Capability",
        "description": "Basic DR documentation exists but implementation is "
                       "incomplete. Extended recovery time expected.",
    },
    3: {
        "label": "Standard Compliance",
        "description": "DR controls meet minimum requirements with documented "
                       "recovery procedures.",
    },
    4: {
        "label": "Advanced Capability",
        "description": "Comprehensive DR strategy with regular testing. Recovery "
                       "time objectives likely to be met.",
    },
    5: {
        "label": "Best Practice",
        "description": "Fully automated DR with redundant systems and continuous "
                       "testing. Recovery with negligible business impact.",
    },
}

NOT_RATED = "Not Rated"


def level_for_score(score: float) -> Optional[int]:
    """
    Map a score to the nearest maturity level (1-5).

    Returns ``None`` for a score of 0 (not rated).  Half-way scores round up,
    so ``3.5`` is level 4.
    """
    if score <= 0:
        return None
    return max(1, min(5, int(score + 0.5)))


def label_for_score(score: float) -> str:
    level = level_for_score(score)
    if level is None:
        return NOT_RATED
    return MATURITY_LEVELS[level]["label"]


def band_for_score(score: float) -> str:
    """
    Display band used when colouring scores.

    Thresholds: ``>= 4.5`` excellent, ``>= 3.5`` good, ``>= 2.5`` fair,
    ``>= 1.5`` weak, otherwise poor.
    """
    if score >= 4.5:
        return "excellent"
    if score >= 3.5:
        return "good"
    if score >= 2.5:
        return "fair"
    if score >= 1.5:
        return "weak"
    return "poor"
