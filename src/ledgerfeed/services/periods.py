"""Resolve named report periods into concrete local-calendar date ranges."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Union

from ..errors import ValidationError
from .formatting import format_date

TODAY = "today"
THIS_WEEK = "this_week"
THIS_MONTH = "this_month"
LAST_MONTH = "last_month"
THIS_YEAR = "this_year"
CUSTOM = "custom"

PERIOD_LABELS = {
    TODAY: "Today",
    THIS_WEEK: "This Week",
    THIS_MONTH: "This Month",
    LAST_MONTH: "Last Month",
    THIS_YEAR: "This Year",
    CUSTOM: "Custom",
}

DateLike = Union[date, str, None]


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date
    label: str

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()


def _coerce_date(value: DateLike, name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"{name} date {value!r} is not a valid YYYY-MM-DD date.") from exc


def _label(period: str, start: date, end: date) -> str:
    name = PERIOD_LABELS[period]
    if period == TODAY:
        return f"{name} ({format_date(start)})"
    return f"{name} ({format_date(start)} to {format_date(end)})"


def resolve_period(
    period: str,
    *,
    today: Optional[date] = None,
    custom_start: DateLike = None,
    custom_end: DateLike = None,
) -> DateRange:
    """Return the inclusive range for ``period`` relative to ``today``.

    Raises:
        ValidationError: unknown period, or a custom period missing either bound.
    """

    today = today or date.today()

    if period == TODAY:
        start, end = today, today
    elif period == THIS_WEEK:
        start, end = today - timedelta(days=today.weekday()), today
    elif period == THIS_MONTH:
        start, end = today.replace(day=1), today
    elif period == LAST_MONTH:
        end = today.replace(day=1) - timedelta(days=1)
        start = end.replace(day=1)
    elif period == THIS_YEAR:
        start, end = today.replace(month=1, day=1), today
    elif period == CUSTOM:
        start_date = _coerce_date(custom_start, "From")
        end_date = _coerce_date(custom_end, "To")
        if start_date is None or end_date is None:
            raise ValidationError("Please select From and To dates for custom range.")
        if start_date > end_date:
            raise ValidationError("The From date must not be after the To date.")
        start, end = start_date, end_date
    else:
        raise ValidationError(f"Unknown report period: {period!r}")

    return DateRange(start=start, end=end, label=_label(period, start, end))
