"""
Free/busy time, per-category usage and home-office reporting over a
principal's time box.

Every ratio is reported as None when its denominator is empty, so callers
can tell "no data" apart from a genuine zero.
"""

import logging
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .domain import DayRecord
from .path_selector import PATH_SEPARATOR
from .slots import (
    SLOT_HOURS,
    format_date,
    format_time_label,
    parse_date,
    quarter_hour_slots,
    shift_days,
    shift_months,
)

logger = logging.getLogger(__name__)


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    if not denominator:
        return None
    return numerator / denominator


class ReportRange(str, Enum):
    """Report window choices."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ALL_TIME = "alltime"


class UsageReport(BaseModel):
    """Slot usage over a set of days, in hours."""

    usage_map: Dict[str, float] = Field(default_factory=dict)
    free_hours: float = 0.0
    total_hours: float = 0.0
    day_count: int = 0

    @property
    def busy_hours(self) -> float:
        return self.total_hours - self.free_hours

    @property
    def free_ratio(self) -> Optional[float]:
        return _ratio(self.free_hours, self.total_hours)

    @property
    def busy_ratio(self) -> Optional[float]:
        return _ratio(self.busy_hours, self.total_hours)

    def usage_share(self, text: str) -> Optional[float]:
        """Share of busy time spent on ``text``."""
        return _ratio(self.usage_map.get(text, 0.0), self.busy_hours)

    def usage_by_top_category(
        self, separator: str = PATH_SEPARATOR
    ) -> Dict[str, float]:
        """Roll the usage map up to the first segment of each path."""
        rollup: Dict[str, float] = {}
        for text, hours in self.usage_map.items():
            top = text.split(separator, 1)[0]
            rollup[top] = rollup.get(top, 0.0) + hours
        return rollup

    def add_day(self, record: DayRecord) -> None:
        self.day_count += 1
        for hour, minute in quarter_hour_slots(
            record.start_hour, record.end_hour
        ):
            self.total_hours += SLOT_HOURS
            slot = record.schedule.get(format_time_label(hour, minute))
            if slot is None or not slot.text:
                self.free_hours += SLOT_HOURS
            else:
                self.usage_map[slot.text] = (
                    self.usage_map.get(slot.text, 0.0) + SLOT_HOURS
                )


class HomeOfficeSummary(BaseModel):
    home_office_days: int = 0
    office_days: int = 0

    @property
    def total_days(self) -> int:
        return self.home_office_days + self.office_days

    @property
    def home_office_ratio(self) -> Optional[float]:
        return _ratio(self.home_office_days, self.total_days)


class PlannerReport(BaseModel):
    report_range: ReportRange
    usage: UsageReport
    home_office: HomeOfficeSummary


def usage_for_day(time_box: Dict[str, DayRecord], day: date) -> UsageReport:
    """Usage of a single day; a missing day yields an empty report."""
    report = UsageReport()
    record = time_box.get(format_date(day))
    if record is not None:
        report.add_day(record)
    return report


def usage_in_window(
    time_box: Dict[str, DayRecord],
    today: date,
    days: Optional[int] = None,
    months: Optional[int] = None,
    years: Optional[int] = None,
) -> UsageReport:
    """
    Usage over a trailing window ending at ``today``.

    A date is included when it falls strictly after ``today`` minus the
    window; with no window every stored date is included. Dates after
    ``today`` are included too. Malformed date keys are skipped.
    """
    boundary: Optional[date] = None
    if days:
        boundary = shift_days(today, -days)
    elif months:
        boundary = shift_months(today, -months)
    elif years:
        boundary = shift_months(today, -12 * years)

    report = UsageReport()
    for key, record in time_box.items():
        day = parse_date(key)
        if day is None:
            logger.debug("Skipping malformed date key", extra={"key": key})
            continue
        if boundary is not None and day <= boundary:
            continue
        report.add_day(record)
    return report


def home_office_summary(time_box: Dict[str, DayRecord]) -> HomeOfficeSummary:
    """Count home-office days across the entire history, whatever the
    selected report range."""
    summary = HomeOfficeSummary()
    for record in time_box.values():
        if record.home_office:
            summary.home_office_days += 1
        else:
            summary.office_days += 1
    return summary


def build_report(
    time_box: Dict[str, DayRecord],
    report_range: ReportRange,
    current_day: date,
    today: date,
) -> PlannerReport:
    """
    Assemble the usage and home-office figures for ``report_range``.

    ``current_day`` is the date being viewed (used by DAILY); ``today``
    anchors the trailing windows.
    """
    report_range = ReportRange(report_range)
    if report_range == ReportRange.DAILY:
        usage = usage_for_day(time_box, current_day)
    elif report_range == ReportRange.WEEKLY:
        usage = usage_in_window(time_box, today, days=7)
    elif report_range == ReportRange.MONTHLY:
        usage = usage_in_window(time_box, today, months=1)
    elif report_range == ReportRange.YEARLY:
        usage = usage_in_window(time_box, today, years=1)
    else:
        usage = usage_in_window(time_box, today)

    logger.debug(
        "Built planner report",
        extra={
            "range": report_range.value,
            "day_count": usage.day_count,
            "total_hours": usage.total_hours,
        },
    )
    return PlannerReport(
        report_range=report_range,
        usage=usage,
        home_office=home_office_summary(time_box),
    )


def sorted_usage(usage_map: Dict[str, float]) -> List[Tuple[str, float]]:
    """Usage entries, largest first, then by name."""
    return sorted(usage_map.items(), key=lambda item: (-item[1], item[0]))
