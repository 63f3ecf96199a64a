"""Dashboard counts and chart series over a memo list."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from memoledger.formatting import department_color, short_day_label
from memoledger.models import Memo

logger = logging.getLogger(__name__)

DEPARTMENT_SERIES_LABEL = "จำนวนบันทึกข้อความ"
PERIOD_SERIES_LABEL = "สถิติบันทึกข้อความ"


class Granularity(str, enum.Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class DashboardStats:
    total: int
    by_department: dict[str, int]


@dataclass(frozen=True)
class ChartSeries:
    """Plain label/value series handed to the chart renderer."""

    label: str
    labels: list[str]
    values: list[int]
    colors: list[str] = field(default_factory=list)


def count_by_department(memos: Iterable[Memo], departments: Sequence[str]) -> dict[str, int]:
    """Count per known department. Unused departments report 0; stale ones are not counted."""
    counts = {dept: 0 for dept in departments}
    for memo in memos:
        if memo.department in counts:
            counts[memo.department] += 1
    return counts


def dashboard(memos: Sequence[Memo], departments: Sequence[str]) -> DashboardStats:
    return DashboardStats(total=len(memos), by_department=count_by_department(memos, departments))


def bucket_key(memo: Memo, granularity: Granularity | str, locale: str = "th-TH") -> str | None:
    """Time bucket for a memo, or None if its date cannot be parsed."""
    day = memo.parsed_date
    if day is None:
        return None
    granularity = Granularity(granularity)
    if granularity == Granularity.DAY:
        return short_day_label(day, locale)
    if granularity == Granularity.MONTH:
        return f"{day.year:04d}-{day.month:02d}"
    return f"{day.year:04d}"


def count_by_period(
    memos: Iterable[Memo],
    granularity: Granularity | str = Granularity.MONTH,
    locale: str = "th-TH",
) -> dict[str, int]:
    """Counts per bucket, keyed in chronological order of first occurrence."""
    granularity = Granularity(granularity)
    dated = []
    for memo in memos:
        day = memo.parsed_date
        if day is None:
            logger.debug("Memo %s has unparseable date %r, not bucketed", memo.id, memo.date)
            continue
        dated.append((day, memo))
    dated.sort(key=lambda pair: pair[0])

    counts: dict[str, int] = {}
    for _, memo in dated:
        key = bucket_key(memo, granularity, locale)
        counts[key] = counts.get(key, 0) + 1
    return counts


def department_series(memos: Iterable[Memo], departments: Sequence[str]) -> ChartSeries:
    counts = count_by_department(memos, departments)
    return ChartSeries(
        label=DEPARTMENT_SERIES_LABEL,
        labels=list(counts),
        values=list(counts.values()),
        colors=[department_color(d) for d in counts],
    )


def period_series(
    memos: Iterable[Memo],
    granularity: Granularity | str = Granularity.MONTH,
    locale: str = "th-TH",
) -> ChartSeries:
    counts = count_by_period(memos, granularity, locale)
    return ChartSeries(label=PERIOD_SERIES_LABEL, labels=list(counts), values=list(counts.values()))
