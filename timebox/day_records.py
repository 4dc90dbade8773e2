"""
Per-principal day record store and the day-level editing operations.

A DayRecord is created lazily the first time its date is materialized.
Existing records are only ever mutated field by field, never replaced.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from .domain import (
    ChecklistItem,
    DayRecord,
    RepeatFrequency,
    ScheduleSlot,
    UserRecord,
)
from .recurrence import propagate_repeating_slots
from .slots import format_date, parse_date

logger = logging.getLogger(__name__)

MIN_HOUR = 0
MAX_HOUR = 24


class DayRecordStore:
    """Date-keyed access to a principal's ``time_box``."""

    def __init__(self, user: UserRecord):
        self._user = user

    @property
    def user(self) -> UserRecord:
        return self._user

    def new_day(self) -> DayRecord:
        """A fresh record using the principal's default hours."""
        return DayRecord(
            start_hour=self._user.default_start_hour,
            end_hour=self._user.default_end_hour,
        )

    def get(self, day: date) -> Optional[DayRecord]:
        return self._user.time_box.get(format_date(day))

    def peek(self, day: date) -> DayRecord:
        """The stored record, or a detached default that is not inserted.
        Used by read-only views so browsing never alters the record."""
        existing = self.get(day)
        if existing is not None:
            return existing
        return self.new_day()

    def ensure(self, day: date) -> Tuple[DayRecord, bool]:
        """Return the record for ``day``, creating it when absent.

        Returns:
            A tuple of (record, created)
        """
        key = format_date(day)
        existing = self._user.time_box.get(key)
        if existing is not None:
            return existing, False
        record = self.new_day()
        self._user.time_box[key] = record
        logger.debug(
            "Materialized day record",
            extra={"principal": self._user.document_key, "date": key},
        )
        return record, True

    def materialize(self, day: date) -> DayRecord:
        """Ensure the record exists and pull in repeating slots."""
        record, _ = self.ensure(day)
        propagate_repeating_slots(self._user.time_box, day)
        return record

    def dates(self) -> List[date]:
        """Stored dates in ascending order; malformed keys are skipped."""
        parsed = []
        for key in self._user.time_box:
            day = parse_date(key)
            if day is None:
                logger.debug(
                    "Skipping malformed date key",
                    extra={"principal": self._user.document_key, "key": key},
                )
                continue
            parsed.append(day)
        return sorted(parsed)


# --- Checklist operations (priorities and brain dump) ---


def add_item(items: List[ChecklistItem], text: str = "") -> ChecklistItem:
    item = ChecklistItem(text=text)
    items.append(item)
    return item


def toggle_item(items: List[ChecklistItem], index: int) -> ChecklistItem:
    item = items[index]
    item.completed = not item.completed
    return item


def set_item_text(
    items: List[ChecklistItem], index: int, text: str
) -> ChecklistItem:
    item = items[index]
    item.text = text
    return item


def remove_item(items: List[ChecklistItem], index: int) -> ChecklistItem:
    return items.pop(index)


# --- Schedule and day settings ---


def set_slot(
    record: DayRecord,
    label: str,
    text: Optional[str] = None,
    repeat: Optional[RepeatFrequency] = None,
) -> ScheduleSlot:
    """Update the text and/or repeat tag of one slot, keeping the other."""
    slot = record.schedule.get(label)
    if slot is None:
        slot = ScheduleSlot()
        record.schedule[label] = slot
    if text is not None:
        slot.text = text
    if repeat is not None:
        slot.repeat = RepeatFrequency(repeat)
    return slot


def _check_hour(hour: int) -> int:
    hour = int(hour)
    if not MIN_HOUR <= hour <= MAX_HOUR:
        raise ValueError(
            f"Hour must be between {MIN_HOUR} and {MAX_HOUR}, got {hour}"
        )
    return hour


def set_start_hour(record: DayRecord, hour: int) -> None:
    record.start_hour = _check_hour(hour)


def set_end_hour(record: DayRecord, hour: int) -> None:
    record.end_hour = _check_hour(hour)


def toggle_home_office(record: DayRecord) -> bool:
    record.home_office = not record.home_office
    return record.home_office


def mark_confetti_shown(record: DayRecord) -> bool:
    """Flag the day's all-done celebration as shown.

    Returns False when it had already been shown or items remain open.
    """
    has_items = bool(record.priorities or record.brain_dump)
    if record.confetti_shown or not has_items or record.incomplete_count:
        return False
    record.confetti_shown = True
    return True
