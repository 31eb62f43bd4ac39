"""Relative (0-100) to absolute range mapping."""
from __future__ import annotations


def map_to_range(low: float, high: float, relative: float) -> float:
    """Pick the value at ``relative`` percent of ``[low, high]``.

    ``relative`` is clamped to ``[0, 100]``. The result is rounded to 4
    decimals so request bodies do not carry float noise.
    """
    pct = min(max(float(relative), 0.0), 100.0) / 100.0
    return round(low + (high - low) * pct, 4)


__all__ = ["map_to_range"]
