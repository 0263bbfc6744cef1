"""Human-rounded display values for public copy.

Display rules never touch raw values:
- None (no data) stays None
- floors lift early under-tracked counters to a minimum estimate
- >= 1000 rounds down to the nearest 100, >= 100 to the nearest 10
- "+" marks a value that was rounded down or lifted by a floor
"""

from __future__ import annotations

from protostats.models.types import DisplayStats, RawStats

# Minimum estimates; event tracking started after launch so tracked
# totals under-count these.
DEFAULT_DISPLAY_FLOORS: dict[str, int] = {
    "quizzes_generated": 2500,
    "scenarios_completed": 600,
}

ROUND_HUNDREDS_FROM = 1000
ROUND_TENS_FROM = 100


def humanize_count(value: int | None, floor: int | None = None) -> str | None:
    """Format a counter for display.

    Args:
        value: Raw counter, or None when unknown.
        floor: Optional minimum estimate.

    Returns:
        Display string such as "2,500+", or None.
    """
    if value is None:
        return None

    estimated = floor is not None and value < floor
    shown = max(value, floor) if floor is not None else value

    if shown >= ROUND_HUNDREDS_FROM:
        rounded = shown // 100 * 100
    elif shown >= ROUND_TENS_FROM:
        rounded = shown // 10 * 10
    else:
        rounded = shown

    text = f"{rounded:,}"
    if estimated or rounded != shown:
        text += "+"
    return text


def format_percent(value: int | None) -> str | None:
    """Format a percentage, keeping None as None."""
    if value is None:
        return None
    return f"{value}%"


def build_display(raw: RawStats, floors: dict[str, int] | None = None) -> DisplayStats:
    """Derive display values from raw counters."""
    if floors is None:
        floors = DEFAULT_DISPLAY_FLOORS

    values: dict[str, str | None] = {}
    for name in RawStats.model_fields:
        value = getattr(raw, name)
        if name == "upload_success_rate":
            values[name] = format_percent(value)
        else:
            values[name] = humanize_count(value, floors.get(name))
    return DisplayStats(**values)
