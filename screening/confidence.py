"""Score → confidence bucket."""

from __future__ import annotations

from typing import Optional

from apis.models import Confidence

DEFAULT_GOOD_THRESHOLD = 0.80
DEFAULT_MED_THRESHOLD = 0.50


def classify(
    score: Optional[float],
    good: float = DEFAULT_GOOD_THRESHOLD,
    medium: float = DEFAULT_MED_THRESHOLD,
) -> Confidence:
    """Map a 0..1 score to a bucket; no score means ``unknown``."""
    if score is None:
        return Confidence.UNKNOWN
    if score >= good:
        return Confidence.GOOD
    if score >= medium:
        return Confidence.MEDIUM
    return Confidence.LOW


def coerce_score(raw) -> Optional[float]:
    """Provider scores arrive as numbers, strings or 0..100 percentages."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        score = float(raw)
    except (TypeError, ValueError):
        return None
    if score != score:  # NaN
        return None
    if score > 1:
        score = score / 100.0
    return min(1.0, max(0.0, score))
