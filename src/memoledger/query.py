"""Filter, sort and paginate memo lists. Pure functions over tuples of Memo."""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Callable, Iterable, Sequence

from memoledger.models import Memo, parse_iso_date

logger = logging.getLogger(__name__)

PAGE_SIZE = 10


@dataclass(frozen=True)
class MemoFilters:
    """Active filters. Empty or None values impose no constraint."""

    subject: str = ""
    teacher: str | None = None
    department: str | None = None
    start_date: date | str | None = None
    end_date: date | str | None = None


def _as_date(value: date | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(f"invalid date filter: {value!r}")
    return parsed


def _predicate(filters: MemoFilters) -> Callable[[Memo], bool]:
    needle = (filters.subject or "").casefold()
    teacher = filters.teacher or None
    department = filters.department or None
    try:
        start = _as_date(filters.start_date)
        end = _as_date(filters.end_date)
    except ValueError as e:
        # An unreadable bound matches nothing
        logger.debug("%s", e)
        return lambda memo: False
    # Bounds cover whole calendar days
    start_at = datetime.combine(start, time.min) if start else None
    end_at = datetime.combine(end, time.max) if end else None

    def matches(memo: Memo) -> bool:
        if needle and needle not in memo.subject.casefold():
            return False
        if teacher is not None and memo.teacher != teacher:
            return False
        if department is not None and memo.department != department:
            return False
        if start_at or end_at:
            memo_date = memo.parsed_date
            if memo_date is None:
                return False
            memo_at = datetime.combine(memo_date, time.min)
            if start_at and memo_at < start_at:
                return False
            if end_at and memo_at > end_at:
                return False
        return True

    return matches


def filter_memos(memos: Iterable[Memo], filters: MemoFilters) -> tuple[Memo, ...]:
    """All memos matching every active filter, in input order."""
    matches = _predicate(filters)
    return tuple(m for m in memos if matches(m))


# ── Sorting ───────────────────────────────────────────────


class SortField(str, enum.Enum):
    MEMO_NUMBER = "memo_number"
    DATE = "date"
    TEACHER = "teacher"
    SUBJECT = "subject"
    DEPARTMENT = "department"
    FILE_NAME = "file_name"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


def _date_key(memo: Memo) -> tuple:
    parsed = memo.parsed_date
    # Unparseable dates after valid ones when ascending
    return (parsed is None, parsed or date.min, memo.date)


SORT_KEYS: dict[SortField, Callable[[Memo], object]] = {
    SortField.MEMO_NUMBER: lambda m: m.memo_number,
    SortField.DATE: _date_key,
    SortField.TEACHER: lambda m: m.teacher,
    SortField.SUBJECT: lambda m: m.subject,
    SortField.DEPARTMENT: lambda m: m.department,
    SortField.FILE_NAME: lambda m: m.file_name or "",
}


@dataclass(frozen=True)
class SortSpec:
    field: SortField = SortField.DATE
    direction: SortDirection = SortDirection.DESC

    def toggled(self, field: SortField | str) -> SortSpec:
        """Header click: same field flips direction, a new field starts ascending."""
        field = SortField(field)
        if field == self.field:
            flipped = SortDirection.DESC if self.direction == SortDirection.ASC else SortDirection.ASC
            return replace(self, direction=flipped)
        return SortSpec(field, SortDirection.ASC)


def sort_memos(memos: Iterable[Memo], sort: SortSpec | None) -> tuple[Memo, ...]:
    """Stable sort on the chosen field; None keeps input order."""
    if sort is None:
        return tuple(memos)
    key = SORT_KEYS[SortField(sort.field)]
    return tuple(sorted(memos, key=key, reverse=sort.direction == SortDirection.DESC))


# ── Pagination ────────────────────────────────────────────


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    """Number of pages for count items; never less than one."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, pages: int) -> int:
    return min(max(1, page), pages)


def paginate(memos: Sequence[Memo], page: int, page_size: int = PAGE_SIZE) -> tuple[Memo, ...]:
    """The 1-based page of memos; out-of-range pages clamp to the first/last page."""
    page = clamp_page(page, total_pages(len(memos), page_size))
    start = (page - 1) * page_size
    return tuple(memos[start : start + page_size])


@dataclass(frozen=True)
class QueryResult:
    memos: tuple[Memo, ...]
    total_pages: int
    page: int
    total: int
    matched: tuple[Memo, ...] = ()


def query(
    memos: Iterable[Memo],
    filters: MemoFilters | None = None,
    sort: SortSpec | None = None,
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> QueryResult:
    """Filter, then sort, then cut out one page."""
    matched = filter_memos(memos, filters or MemoFilters())
    ordered = sort_memos(matched, sort)
    pages = total_pages(len(ordered), page_size)
    current = clamp_page(page, pages)
    return QueryResult(
        memos=paginate(ordered, current, page_size),
        total_pages=pages,
        page=current,
        total=len(ordered),
        matched=ordered,
    )


def distinct_teachers(memos: Iterable[Memo]) -> list[str]:
    """Teacher names in first-seen order, for the teacher filter options."""
    seen: dict[str, None] = {}
    for memo in memos:
        seen.setdefault(memo.teacher, None)
    return list(seen)
