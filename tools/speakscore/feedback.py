from __future__ import annotations

import math
from typing import Iterable, Literal, Optional, Sequence

PostureReading = Literal["good", "slouching"]

POSTURE_DISABLED = "Posture analysis was not enabled for this session."
POSTURE_NO_READINGS = "Could not analyze posture."
POSTURE_EXCELLENT = "Excellent posture! You maintained a confident posture for {pct}% of the session."
POSTURE_GOOD = "Good posture overall ({pct}%). Try to keep your back straight and shoulders relaxed."
POSTURE_SLOUCHING = (
    "You were slouching for a significant part of the session ({pct}%). "
    "Focus on sitting upright to project more confidence."
)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def good_posture_percentage(readings: Sequence[PostureReading]) -> Optional[int]:
    if not readings:
        return None
    good = sum(1 for r in readings if r == "good")
    return _round_half_up(good / len(readings) * 100)


def posture_feedback(readings: Optional[Sequence[PostureReading]]) -> str:
    """
    None means posture was never tracked; an empty sequence means tracking
    ran but produced nothing. Thresholds are on the rounded "good" share:
    above 85 excellent, above 60 good, else the slouching share is reported.
    """
    if readings is None:
        return POSTURE_DISABLED
    pct = good_posture_percentage(readings)
    if pct is None:
        return POSTURE_NO_READINGS
    if pct > 85:
        return POSTURE_EXCELLENT.format(pct=pct)
    if pct > 60:
        return POSTURE_GOOD.format(pct=pct)
    return POSTURE_SLOUCHING.format(pct=100 - pct)


def pronunciation_score(confidences: Iterable[float]) -> int:
    """Mean recognizer confidence (0..1) as 0..100; 0 without any results."""
    values = list(confidences)
    if not values:
        return 0
    return _round_half_up(sum(values) / len(values) * 100)
