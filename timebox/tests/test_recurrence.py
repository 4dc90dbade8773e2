from datetime import date

from timebox.domain import RepeatFrequency, ScheduleSlot
from timebox.recurrence import propagate_repeating_slots
from timebox.tests.factories import minimal_day_record

DAILY = RepeatFrequency.DAILY
WEEKLY = RepeatFrequency.WEEKLY
MONTHLY = RepeatFrequency.MONTHLY
NONE = RepeatFrequency.NONE


class TestPropagateRepeatingSlots:
    def test_daily_slot_fills_next_day(self) -> None:
        time_box = {
            "2024-03-04": minimal_day_record(
                schedule={"9:00 AM": ("Standup", DAILY)}
            ),
            "2024-03-05": minimal_day_record(),
        }

        filled = propagate_repeating_slots(time_box, date(2024, 3, 5))

        assert filled == ["9:00 AM"]
        assert time_box["2024-03-05"].schedule["9:00 AM"] == ScheduleSlot(
            text="Standup", repeat=DAILY
        )

    def test_non_empty_slot_is_kept(self) -> None:
        time_box = {
            "2024-03-04": minimal_day_record(
                schedule={"9:00 AM": ("Standup", DAILY)}
            ),
            "2024-03-05": minimal_day_record(
                schedule={"9:00 AM": ("Dentist", NONE)}
            ),
        }

        assert propagate_repeating_slots(time_box, date(2024, 3, 5)) == []
        assert time_box["2024-03-05"].schedule["9:00 AM"].text == "Dentist"

    def test_weekly_slot_fills_same_weekday(self) -> None:
        time_box = {
            "2024-02-26": minimal_day_record(
                schedule={"9:30 AM": ("Review", WEEKLY)}
            ),
            "2024-03-04": minimal_day_record(),
        }

        filled = propagate_repeating_slots(time_box, date(2024, 3, 4))

        assert filled == ["9:30 AM"]
        assert time_box["2024-03-04"].schedule["9:30 AM"].repeat == WEEKLY

    def test_daily_wins_over_weekly(self) -> None:
        time_box = {
            "2024-02-26": minimal_day_record(
                schedule={"9:00 AM": ("Review", WEEKLY)}
            ),
            "2024-03-03": minimal_day_record(
                schedule={"9:00 AM": ("Standup", DAILY)}
            ),
            "2024-03-04": minimal_day_record(),
        }

        propagate_repeating_slots(time_box, date(2024, 3, 4))

        assert time_box["2024-03-04"].schedule["9:00 AM"].text == "Standup"

    def test_daily_tag_one_week_back_is_ignored(self) -> None:
        time_box = {
            "2024-02-26": minimal_day_record(
                schedule={"9:00 AM": ("Standup", DAILY)}
            ),
            "2024-03-04": minimal_day_record(),
        }

        assert propagate_repeating_slots(time_box, date(2024, 3, 4)) == []

    def test_monthly_and_untagged_slots_are_not_copied(self) -> None:
        time_box = {
            "2024-03-04": minimal_day_record(
                schedule={
                    "9:00 AM": ("Billing", MONTHLY),
                    "9:15 AM": ("One-off", NONE),
                }
            ),
            "2024-03-05": minimal_day_record(),
        }

        assert propagate_repeating_slots(time_box, date(2024, 3, 5)) == []

    def test_only_labels_inside_current_hours_are_filled(self) -> None:
        time_box = {
            "2024-03-04": minimal_day_record(
                start_hour=8,
                end_hour=11,
                schedule={
                    "8:00 AM": ("Early", DAILY),
                    "10:00 AM": ("Closing row", DAILY),
                },
            ),
            "2024-03-05": minimal_day_record(start_hour=9, end_hour=10),
        }

        filled = propagate_repeating_slots(time_box, date(2024, 3, 5))

        assert filled == []
        assert time_box["2024-03-05"].schedule == {}

    def test_second_run_is_a_no_op(self) -> None:
        time_box = {
            "2024-03-04": minimal_day_record(
                schedule={"9:00 AM": ("Standup", DAILY)}
            ),
            "2024-03-05": minimal_day_record(),
        }
        propagate_repeating_slots(time_box, date(2024, 3, 5))
        snapshot = time_box["2024-03-05"].model_copy(deep=True)

        assert propagate_repeating_slots(time_box, date(2024, 3, 5)) == []
        assert time_box["2024-03-05"] == snapshot

    def test_missing_day_is_not_created(self) -> None:
        time_box = {
            "2024-03-04": minimal_day_record(
                schedule={"9:00 AM": ("Standup", DAILY)}
            ),
        }

        assert propagate_repeating_slots(time_box, date(2024, 3, 5)) == []
        assert "2024-03-05" not in time_box
