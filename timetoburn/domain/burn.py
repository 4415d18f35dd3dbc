"""Burn budget — seconds of exposure before burn at a given UV index.

This is the one formula every caller shares (timer, snapshot readers,
notification text).  Keeping it in a single function is what guarantees
the countdown a user sees never drifts from the one the timer enforces.

    time_to_burn(uv) = 60 − round((uv − 1) × 55 / 11)   for 1 ≤ uv ≤ 11
    time_to_burn(uv) = 5                                 for uv ≥ 12
    time_to_burn(uv) = INFINITE_BURN_SECONDS             for uv ≤ 0
"""

from __future__ import annotations

import math
import sys

INFINITE_BURN_SECONDS: int = sys.maxsize

_MAX_BUDGET_SECONDS = 60
_MIN_BUDGET_SECONDS = 5


def round_half_up(value: float) -> int:
    """Round non-negative values to the nearest integer, halves upward."""
    return int(math.floor(value + 0.5))


def normalize_uv(uv: float) -> int:
    """Clamp a raw reading to a non-negative whole UV index."""
    if uv is None or math.isnan(uv) or uv <= 0:
        return 0
    if math.isinf(uv):
        return 12
    return round_half_up(uv)


def time_to_burn(uv: float) -> int:
    """Burn budget in seconds for *uv*; the infinite sentinel at UV 0."""
    index = normalize_uv(uv)
    if index <= 0:
        return INFINITE_BURN_SECONDS
    if index >= 12:
        return _MIN_BUDGET_SECONDS
    return _MAX_BUDGET_SECONDS - round_half_up((index - 1) * 55 / 11)


def is_infinite(seconds: int) -> bool:
    return seconds >= INFINITE_BURN_SECONDS


def uv_category(uv: float) -> str:
    index = normalize_uv(uv)
    if index <= 2:
        return "Low"
    if index <= 5:
        return "Moderate"
    if index <= 7:
        return "High"
    if index <= 10:
        return "Very High"
    return "Extreme"


def format_duration(seconds: float) -> str:
    """``h:mm:ss`` when an hour or more, otherwise ``m:ss``."""
    total = max(int(seconds), 0)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
