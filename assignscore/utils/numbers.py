"""Half-up rounding for surfaced scores and percentages."""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round ``value`` to ``digits`` decimals, ties toward positive infinity.

    Computed as ``floor(value * 10**digits + 0.5) / 10**digits`` on the
    float itself, so a value like 0.285 (stored as 0.28499...) rounds to
    0.28 exactly as previously persisted evaluations did. ``round()`` is
    not used because it rounds ties to even (``round(50.5) == 50``).
    """
    factor = 10 ** digits
    return math.floor(float(value) * factor + 0.5) / factor


def to_percent_label(value: float) -> str:
    """Render a 0-100 value as an integer percentage, e.g. ``"87%"``."""
    return f"{int(round_half_up(value))}%"
