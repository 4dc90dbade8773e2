"""
Copies repeating schedule slots forward when a day is materialized.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from .domain import DayRecord, RepeatFrequency, ScheduleSlot
from .slots import format_date, shift_days, slot_labels

logger = logging.getLogger(__name__)


def _slot_at(
    time_box: Dict[str, DayRecord], day: date, label: str
) -> Optional[ScheduleSlot]:
    record = time_box.get(format_date(day))
    if record is None:
        return None
    return record.schedule.get(label)


def _repeats(slot: Optional[ScheduleSlot], frequency: RepeatFrequency) -> bool:
    return slot is not None and slot.repeat == frequency and bool(slot.text)


def propagate_repeating_slots(
    time_box: Dict[str, DayRecord], day: date
) -> List[str]:
    """
    Fill empty slots of ``day`` from repeating slots of the previous day
    (daily) or the same weekday one week earlier (weekly).

    Only labels in ``[start_hour, end_hour)`` of ``day`` are considered and a
    slot is eligible only while its text is empty, so running this again on
    the same day is a no-op. Daily wins over weekly; monthly slots are never
    copied.

    Returns:
        The labels that were filled.
    """
    today = time_box.get(format_date(day))
    if today is None:
        return []

    yesterday = shift_days(day, -1)
    week_ago = shift_days(day, -7)
    filled: List[str] = []

    for label in slot_labels(
        today.start_hour, today.end_hour, include_end=False
    ):
        current = today.schedule.get(label)
        if current is not None and current.text:
            continue

        source = _slot_at(time_box, yesterday, label)
        if not _repeats(source, RepeatFrequency.DAILY):
            source = _slot_at(time_box, week_ago, label)
            if not _repeats(source, RepeatFrequency.WEEKLY):
                continue

        assert source is not None  # For MyPy
        today.schedule[label] = ScheduleSlot(
            text=source.text, repeat=source.repeat
        )
        filled.append(label)

    if filled:
        logger.debug(
            "Propagated repeating slots",
            extra={"date": format_date(day), "labels": filled},
        )
    return filled
