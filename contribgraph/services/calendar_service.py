from dataclasses import dataclass
from datetime import date
from datetime import datetime
from datetime import timedelta

from contribgraph.services.contribution_service import NormalizedResponse


SUNDAY = 6
DAYS_PER_WEEK = 7
MONTH_LABELS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


@dataclass(frozen=True)
class GridConfig:
    """Shape of the trailing calendar window."""

    window_weeks: int = 39
    week_start: int = SUNDAY


@dataclass(frozen=True)
class CalendarDay:
    date: date
    count: int
    is_future: bool
    level: int


@dataclass(frozen=True)
class MonthLabelSpan:
    label: str
    column_span: int


@dataclass(frozen=True)
class CalendarGrid:
    weeks: tuple[tuple[CalendarDay, ...], ...]
    month_labels: tuple[MonthLabelSpan, ...]
    max_count: int
    total: int


def level_for_count(count: int, max_count: int) -> int:
    """Map a daily count to a heatmap level in range 0..4 relative to max."""

    if count <= 0 or max_count <= 0:
        return 0

    ratio = count / max_count
    if ratio <= 0.25:
        return 1
    if ratio <= 0.5:
        return 2
    if ratio <= 0.75:
        return 3
    return 4


def window_bounds(today: date, config: GridConfig) -> tuple[date, date]:
    """Return the first and last day of the trailing window ending today."""

    start = today - timedelta(days=config.window_weeks * DAYS_PER_WEEK)
    start -= timedelta(days=(start.weekday() - config.week_start) % DAYS_PER_WEEK)
    return start, today


def build_month_labels(
    weeks: tuple[tuple[CalendarDay, ...], ...],
) -> tuple[MonthLabelSpan, ...]:
    """Collapse consecutive weeks whose first day shares a month into spans."""

    spans: list[MonthLabelSpan] = []
    current_month: tuple[int, int] | None = None
    for week in weeks:
        first_day = week[0].date
        month = (first_day.year, first_day.month)
        if month == current_month:
            last = spans[-1]
            spans[-1] = MonthLabelSpan(
                label=last.label, column_span=last.column_span + 1
            )
            continue

        current_month = month
        spans.append(
            MonthLabelSpan(label=MONTH_LABELS[first_day.month - 1], column_span=1)
        )

    return tuple(spans)


def build_calendar_grid(
    response: NormalizedResponse | None,
    now: datetime | date,
    config: GridConfig = GridConfig(),
) -> CalendarGrid:
    """Lay out a trailing window of daily counts as week columns.

    A missing response or one without records yields an empty grid that
    still reports the upstream total.
    """

    if response is None or not response.records:
        return CalendarGrid(
            weeks=(),
            month_labels=(),
            max_count=0,
            total=response.total if response is not None else 0,
        )

    today = now.date() if isinstance(now, datetime) else now
    counts_by_date = {record.date: record.count for record in response.records}
    start, end = window_bounds(today, config)

    days: list[tuple[date, int, bool]] = []
    max_count = 0
    total = 0
    current_day = start
    while current_day <= end:
        is_future = current_day > today
        count = counts_by_date.get(current_day, 0)
        if not is_future:
            max_count = max(max_count, count)
            total += count
        days.append((current_day, count, is_future))
        current_day += timedelta(days=1)

    while len(days) % DAYS_PER_WEEK:
        days.append((current_day, 0, True))
        current_day += timedelta(days=1)

    calendar_days = [
        CalendarDay(
            date=day,
            count=0 if is_future else count,
            is_future=is_future,
            level=0 if is_future else level_for_count(count, max_count),
        )
        for day, count, is_future in days
    ]
    weeks = tuple(
        tuple(calendar_days[index : index + DAYS_PER_WEEK])
        for index in range(0, len(calendar_days), DAYS_PER_WEEK)
    )

    return CalendarGrid(
        weeks=weeks,
        month_labels=build_month_labels(weeks),
        max_count=max_count,
        total=total,
    )
