"""
Date and quarter-hour slot helpers shared by the day record store, the
recurrence engine and the reporting aggregator.
"""

from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional, Tuple

SLOT_MINUTES = 15
SLOT_HOURS = SLOT_MINUTES / 60


def format_date(day: date) -> str:
    """Render a date as the ISO key used in ``timeBox`` maps."""
    return day.strftime("%Y-%m-%d")


def parse_date(value: str) -> Optional[date]:
    """Parse an ISO ``YYYY-MM-DD`` key, returning None when malformed."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def shift_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def shift_months(day: date, months: int) -> date:
    """Move ``day`` by a number of calendar months, clamping the day of
    month to the length of the target month."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    # Last day of the target month
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(day.day, last_day))


def quarter_hour_slots(
    start_hour: int, end_hour: int, include_end: bool = True
) -> List[Tuple[int, int]]:
    """
    Enumerate ``(hour, minute)`` pairs in 15 minute steps over
    ``[start_hour, end_hour)``.

    When ``include_end`` is set the closing ``(end_hour, 0)`` row shown at the
    bottom of a day is appended. An inverted or empty range yields no slots.
    """
    if start_hour >= end_hour:
        return []
    slots = [
        (hour, minute)
        for hour in range(start_hour, end_hour)
        for minute in range(0, 60, SLOT_MINUTES)
    ]
    if include_end:
        slots.append((end_hour, 0))
    return slots


def format_time_label(hour: int, minute: int) -> str:
    """
    Format a slot as a 12-hour label such as ``"9:15 AM"``.

    Hour 24 wraps to midnight and renders as ``"12:00 AM"``. Earlier
    planner clients labelled that closing row ``"12:00 PM"``, so a stored
    schedule may carry either key for it.
    """
    hour_of_day = hour % 24
    suffix = "AM" if hour_of_day < 12 else "PM"
    display_hour = hour_of_day % 12 or 12
    return f"{display_hour}:{minute:02d} {suffix}"


def slot_labels(
    start_hour: int, end_hour: int, include_end: bool = True
) -> Iterator[str]:
    for hour, minute in quarter_hour_slots(start_hour, end_hour, include_end):
        yield format_time_label(hour, minute)
