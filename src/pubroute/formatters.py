"""
Formatting helpers for addresses, distances and durations.
"""

from typing import Optional


def format_address(*parts: Optional[str]) -> str:
    """Join the non-empty address parts with commas."""
    return ", ".join(part for part in parts if part)


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"


def format_duration(seconds: float) -> str:
    minutes = int(round(seconds / 60))
    if minutes < 60:
        return f"{minutes} min"
    hours, minutes = divmod(minutes, 60)
    return f"{hours} h {minutes} min"
