from datetime import date

import pytest

from timebox.day_records import (
    DayRecordStore,
    add_item,
    mark_confetti_shown,
    remove_item,
    set_end_hour,
    set_item_text,
    set_slot,
    set_start_hour,
    toggle_home_office,
    toggle_item,
)
from timebox.domain import DayRecord, RepeatFrequency
from timebox.slots import format_time_label, slot_labels
from timebox.tests.factories import minimal_day_record, minimal_user_record


class TestDayRecordStore:
    def test_new_day_uses_principal_default_hours(self) -> None:
        user = minimal_user_record()
        user.default_start_hour = 6
        user.default_end_hour = 14
        store = DayRecordStore(user)

        record, created = store.ensure(date(2024, 3, 5))

        assert created
        assert (record.start_hour, record.end_hour) == (6, 14)
        assert user.time_box["2024-03-05"] is record

    def test_ensure_returns_existing_record(self) -> None:
        existing = minimal_day_record(priorities=[("Ship", False)])
        user = minimal_user_record(time_box={"2024-03-05": existing})

        record, created = DayRecordStore(user).ensure(date(2024, 3, 5))

        assert not created
        assert record.priorities[0].text == "Ship"

    def test_materialize_twice_is_idempotent(self) -> None:
        user = minimal_user_record(
            time_box={
                "2024-03-04": minimal_day_record(
                    schedule={"9:00 AM": ("Standup", RepeatFrequency.DAILY)}
                )
            }
        )
        store = DayRecordStore(user)

        first = store.materialize(date(2024, 3, 5)).model_copy(deep=True)
        second = store.materialize(date(2024, 3, 5))

        assert first == second
        assert second.schedule["9:00 AM"].text == "Standup"

    def test_peek_never_inserts(self) -> None:
        user = minimal_user_record()

        record = DayRecordStore(user).peek(date(2024, 3, 5))

        assert record == DayRecord()
        assert user.time_box == {}

    def test_dates_are_sorted_and_skip_malformed_keys(self) -> None:
        user = minimal_user_record(
            time_box={
                "2024-03-05": DayRecord(),
                "garbage": DayRecord(),
                "2024-01-31": DayRecord(),
            }
        )

        assert DayRecordStore(user).dates() == [
            date(2024, 1, 31),
            date(2024, 3, 5),
        ]


class TestChecklistOperations:
    def test_add_toggle_edit_remove(self) -> None:
        items = []

        add_item(items, "Draft")
        add_item(items)
        toggle_item(items, 0)
        set_item_text(items, 1, "Review")

        assert [(i.text, i.completed) for i in items] == [
            ("Draft", True),
            ("Review", False),
        ]
        removed = remove_item(items, 0)
        assert removed.text == "Draft"
        assert len(items) == 1

    def test_bad_index_raises(self) -> None:
        with pytest.raises(IndexError):
            toggle_item([], 0)


class TestDaySettings:
    def test_set_slot_keeps_other_attribute(self) -> None:
        record = DayRecord()

        set_slot(record, "9:00 AM", text="Build")
        slot = set_slot(record, "9:00 AM", repeat=RepeatFrequency.WEEKLY)

        assert slot.text == "Build"
        assert slot.repeat == RepeatFrequency.WEEKLY

    @pytest.mark.parametrize("hour", [-1, 25])
    def test_hours_outside_day_are_rejected(self, hour) -> None:
        record = DayRecord()

        with pytest.raises(ValueError):
            set_start_hour(record, hour)
        with pytest.raises(ValueError):
            set_end_hour(record, hour)

    def test_hour_bounds_are_accepted(self) -> None:
        record = DayRecord()

        set_start_hour(record, 0)
        set_end_hour(record, 24)

        assert (record.start_hour, record.end_hour) == (0, 24)

    def test_toggle_home_office(self) -> None:
        record = DayRecord()

        assert toggle_home_office(record) is True
        assert toggle_home_office(record) is False

    def test_confetti_shown_once_when_all_done(self) -> None:
        record = minimal_day_record(priorities=[("Ship", True)])

        assert mark_confetti_shown(record) is True
        assert mark_confetti_shown(record) is False

    def test_confetti_requires_completed_items(self) -> None:
        assert mark_confetti_shown(DayRecord()) is False
        assert (
            mark_confetti_shown(
                minimal_day_record(priorities=[("Ship", False)])
            )
            is False
        )


class TestSlotLabels:
    def test_closing_row_is_included(self) -> None:
        assert list(slot_labels(11, 12)) == [
            "11:00 AM",
            "11:15 AM",
            "11:30 AM",
            "11:45 AM",
            "12:00 PM",
        ]

    def test_midnight_closing_row_renders_as_am(self) -> None:
        assert format_time_label(0, 0) == "12:00 AM"
        assert format_time_label(24, 0) == "12:00 AM"
        assert list(slot_labels(23, 24))[-1] == "12:00 AM"
