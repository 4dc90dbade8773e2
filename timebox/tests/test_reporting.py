from datetime import date

import pytest

from timebox.domain import DayRecord, RepeatFrequency
from timebox.reporting import (
    HomeOfficeSummary,
    ReportRange,
    UsageReport,
    build_report,
    home_office_summary,
    sorted_usage,
    usage_for_day,
    usage_in_window,
)
from timebox.tests.factories import minimal_day_record

NONE = RepeatFrequency.NONE


def _time_box(*days: str, text: str = "Build"):
    return {
        day: minimal_day_record(schedule={"9:00 AM": (text, NONE)})
        for day in days
    }


class TestUsageReport:
    def test_single_day_counts_quarter_hours_with_closing_row(self) -> None:
        record = minimal_day_record(
            start_hour=9,
            end_hour=10,
            schedule={"9:00 AM": ("Build", NONE), "9:15 AM": ("", NONE)},
        )
        report = UsageReport()

        report.add_day(record)

        assert report.usage_map == {"Build": 0.25}
        assert report.free_hours == pytest.approx(1.0)
        assert report.total_hours == pytest.approx(1.25)
        assert report.busy_hours == pytest.approx(0.25)
        assert report.usage_share("Build") == pytest.approx(1.0)

    def test_inverted_hours_contribute_nothing(self) -> None:
        report = UsageReport()

        report.add_day(DayRecord(start_hour=12, end_hour=9))

        assert report.total_hours == 0
        assert report.day_count == 1

    def test_ratios_over_empty_denominator_are_none(self) -> None:
        report = UsageReport()

        assert report.free_ratio is None
        assert report.busy_ratio is None
        assert report.usage_share("Build") is None
        assert HomeOfficeSummary().home_office_ratio is None

    def test_usage_rolls_up_to_top_category(self) -> None:
        report = UsageReport(
            usage_map={
                "Prospecting / Calls": 0.5,
                "Prospecting / Email": 0.25,
                "Admin": 1.0,
            }
        )

        assert report.usage_by_top_category() == {
            "Prospecting": 0.75,
            "Admin": 1.0,
        }

    def test_sorted_usage_largest_first(self) -> None:
        assert sorted_usage({"b": 0.5, "a": 0.5, "c": 1.0}) == [
            ("c", 1.0),
            ("a", 0.5),
            ("b", 0.5),
        ]


class TestWindows:
    def test_missing_day_yields_empty_daily_report(self) -> None:
        report = usage_for_day({}, date(2024, 3, 5))

        assert report.day_count == 0
        assert report.free_ratio is None

    def test_weekly_window_excludes_boundary_day(self) -> None:
        time_box = _time_box("2024-03-03", "2024-03-04", "2024-03-10")

        report = usage_in_window(time_box, date(2024, 3, 10), days=7)

        assert report.day_count == 2
        assert report.usage_map["Build"] == pytest.approx(0.5)

    def test_monthly_window_clamps_month_end(self) -> None:
        time_box = _time_box("2024-02-29", "2024-03-01")

        report = usage_in_window(time_box, date(2024, 3, 31), months=1)

        assert report.day_count == 1

    def test_malformed_keys_are_skipped(self) -> None:
        time_box = _time_box("2024-03-05", "not-a-date")

        report = usage_in_window(time_box, date(2024, 3, 5))

        assert report.day_count == 1

    def test_home_office_counts_full_history(self) -> None:
        time_box = {
            "2020-01-01": DayRecord(home_office=True),
            "2024-03-04": DayRecord(home_office=True),
            "2024-03-05": DayRecord(),
        }

        summary = home_office_summary(time_box)

        assert (summary.home_office_days, summary.office_days) == (2, 1)
        assert summary.home_office_ratio == pytest.approx(2 / 3)

    def test_build_report_daily_uses_viewed_day(self) -> None:
        time_box = _time_box("2024-03-01", "2024-03-05")
        time_box["2020-01-01"] = DayRecord(home_office=True)

        report = build_report(
            time_box,
            ReportRange.DAILY,
            current_day=date(2024, 3, 1),
            today=date(2024, 3, 5),
        )

        assert report.usage.day_count == 1
        assert report.home_office.total_days == 3

    def test_build_report_yearly_and_all_time(self) -> None:
        time_box = _time_box("2022-01-01", "2023-06-01", "2024-03-05")
        today = date(2024, 3, 5)

        yearly = build_report(
            time_box, ReportRange.YEARLY, current_day=today, today=today
        )
        all_time = build_report(
            time_box, "alltime", current_day=today, today=today
        )

        assert yearly.usage.day_count == 2
        assert all_time.usage.day_count == 3
