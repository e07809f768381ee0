"""
Report range resolution.

Turns a ReportQuery's symbolic period (or explicit bounds) into one
concrete window, and lists the bucket labels for that window.

Resolution order:
1. explicit from          -> [from, to or now]
2. known data bounds      -> [first record day 00:00, last record day 23:59:59.999]
3. symbolic period        -> fixed calendar window around now

All arithmetic is in UTC.
"""

import calendar
from collections.abc import Iterator
from datetime import datetime, time, timedelta, timezone
from typing import Optional

from family_finance.models.finance import DateRange, ReportPeriod, ReportQuery
from family_finance.timestamps import parse_timestamp, utc_now

DataBounds = tuple[datetime, datetime]

END_OF_DAY = time(23, 59, 59, 999000)


def _day_start(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min, tzinfo=timezone.utc)


def _day_end(value: datetime) -> datetime:
    return datetime.combine(value.date(), END_OF_DAY, tzinfo=timezone.utc)


def _period_window(period: Optional[str], now: datetime) -> DataBounds:
    if period == ReportPeriod.YEAR.value:
        start = datetime(now.year - 2, 1, 1, tzinfo=timezone.utc)
        end = datetime(now.year, 12, 31, tzinfo=timezone.utc)
    elif period in (ReportPeriod.DAY.value, ReportPeriod.WEEK.value):
        last_day = calendar.monthrange(now.year, now.month)[1]
        start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)
        end = datetime(now.year, now.month, last_day, tzinfo=timezone.utc)
    else:
        start = datetime(now.year, 1, 1, tzinfo=timezone.utc)
        end = datetime(now.year, 12, 31, tzinfo=timezone.utc)
    return _day_start(start), _day_end(end)


def resolve_report_range(
    query: ReportQuery,
    now: Optional[datetime] = None,
    data_bounds: Optional[DataBounds] = None,
) -> DateRange:
    """
    Resolve the concrete window a report covers.

    Args:
        query: Built report query
        now: Reference instant. Defaults to UTC now.
        data_bounds: (earliest, latest) record dates, if any records exist

    Raises:
        ValueError: If an explicit from/to cannot be parsed
    """
    now = parse_timestamp(now) if now else utc_now()

    if query.from_:
        start = parse_timestamp(query.from_)
        end = parse_timestamp(query.to) if query.to else now
        return DateRange(start=start, end=end)

    if data_bounds:
        earliest, latest = (parse_timestamp(bound) for bound in data_bounds)
        return DateRange(start=_day_start(earliest), end=_day_end(latest))

    start, end = _period_window(query.period, now)
    return DateRange(start=start, end=end)


def _add_months(value: datetime, months: int) -> datetime:
    index = value.month - 1 + months
    return value.replace(year=value.year + index // 12, month=index % 12 + 1, day=1)


def _iter_buckets(date_range: DateRange, period: Optional[str]) -> Iterator[datetime]:
    start, end = date_range.start, date_range.end

    if period == ReportPeriod.MONTH.value:
        current = _day_start(start).replace(day=1)
        last = _day_start(end).replace(day=1)
        while current <= last:
            yield current
            current = _add_months(current, 1)
        return

    if period == ReportPeriod.YEAR.value:
        for year in range(start.year, end.year + 1):
            yield datetime(year, 1, 1, tzinfo=timezone.utc)
        return

    step = timedelta(days=7 if period == ReportPeriod.WEEK.value else 1)
    current = _day_start(start)
    while current <= end:
        yield current
        current += step


def period_labels(date_range: DateRange, period: Optional[str]) -> list[str]:
    """
    YYYY-MM-DD bucket labels covering the range.

    week -> every 7 days from the start day; month -> first of each
    month; year -> Jan 1 of each year; anything else -> every day.
    """
    return [bucket.strftime("%Y-%m-%d") for bucket in _iter_buckets(date_range, period)]
