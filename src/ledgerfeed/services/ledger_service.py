"""Feed helpers for filtering, sorting, and pagination."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..models.transaction import Transaction

ALL_ACCOUNTS = "all"
TEXT_SORT_FIELDS = {"description", "counterparty_name"}
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class LedgerFilters:
    """Filters applied to feed listings."""

    search: str = ""
    account: str = ALL_ACCOUNTS
    start_date: Optional[str] = None  # YYYY-MM-DD, inclusive
    end_date: Optional[str] = None  # YYYY-MM-DD, inclusive

    @property
    def is_active(self) -> bool:
        return bool(
            self.search.strip()
            or self.account != ALL_ACCOUNTS
            or self.start_date
            or self.end_date
        )


@dataclass(frozen=True)
class SortSpec:
    field: str = "date"
    direction: str = "desc"  # asc | desc

    def toggle(self, field: str) -> "SortSpec":
        """Same field flips direction; a new field starts ascending."""

        if field == self.field:
            return replace(self, direction="desc" if self.direction == "asc" else "asc")
        return SortSpec(field=field, direction="asc")


@dataclass(frozen=True)
class Pagination:
    """Simple pagination parameters."""

    page: int = 1
    per_page: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class PageMeta:
    current_page: int
    last_page: int
    total: int
    from_: int
    to: int


@dataclass(frozen=True)
class FeedPage:
    rows: list[Transaction]
    meta: PageMeta


def normalize_account_value(raw_value: Optional[str]) -> str:
    """Return an account code filter, treating falsy/'all' as no filter."""

    if not raw_value:
        return ALL_ACCOUNTS
    value = str(raw_value).strip()
    if value.lower() in {"all", "any", ""}:
        return ALL_ACCOUNTS
    return value


def filter_transactions(
    transactions: Iterable[Transaction], filters: LedgerFilters
) -> list[Transaction]:
    """Apply account, date-range and text filters.

    Dates compare on their ``YYYY-MM-DD`` prefix as strings, which matches
    chronological order for ISO-8601 values.
    """

    filtered = list(transactions)

    if filters.account != ALL_ACCOUNTS:
        wanted = str(filters.account)
        filtered = [t for t in filtered if str(t.account_code or "") == wanted]

    if filters.start_date:
        filtered = [t for t in filtered if t.date_prefix >= filters.start_date]

    if filters.end_date:
        filtered = [t for t in filtered if t.date_prefix <= filters.end_date]

    needle = filters.search.strip().lower()
    if needle:
        filtered = [
            t
            for t in filtered
            if needle in str(t.counterparty_name or "").lower()
            or needle in str(t.description or "").lower()
            or needle in ("" if t.reference is None else str(t.reference)).lower()
        ]

    return filtered


def filter_by_date_range(
    transactions: Iterable[Transaction], start_date: str, end_date: str
) -> list[Transaction]:
    """Inclusive date-prefix range used by report generation."""

    return filter_transactions(
        transactions, LedgerFilters(start_date=start_date, end_date=end_date)
    )


def _timestamp(value: Optional[str]) -> float:
    if not value:
        return 0.0
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).timestamp()
    except (TypeError, ValueError, OverflowError, OSError):
        return 0.0


def _number(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def sort_key(field: str):
    """Key function for ``field``: timestamps for dates, folded text, numbers otherwise."""

    if field == "date":
        return lambda t: _timestamp(t.date)
    if field in TEXT_SORT_FIELDS:
        return lambda t: str(getattr(t, field, "") or "").lower()
    return lambda t: _number(getattr(t, field, None))


def sort_transactions(transactions: Iterable[Transaction], sort: SortSpec) -> list[Transaction]:
    return sorted(transactions, key=sort_key(sort.field), reverse=sort.direction == "desc")


def paginate_transactions(
    txs: Sequence[Transaction], pagination: Pagination
) -> tuple[list[Transaction], PageMeta]:
    """Return the current page of transactions and its metadata."""

    total = len(txs)
    page = max(1, pagination.page)
    per_page = max(1, pagination.per_page)
    start = (page - 1) * per_page
    end = start + per_page
    meta = PageMeta(
        current_page=page,
        last_page=math.ceil(total / per_page),
        total=total,
        from_=start + 1 if total > 0 else 0,
        to=min(end, total),
    )
    return list(txs[start:end]), meta


def apply(
    transactions: Iterable[Transaction],
    filters: LedgerFilters = LedgerFilters(),
    sort: SortSpec = SortSpec(),
    pagination: Pagination = Pagination(),
) -> FeedPage:
    """Filter, sort and slice the reconciled feed for display."""

    ordered = sort_transactions(filter_transactions(transactions, filters), sort)
    rows, meta = paginate_transactions(ordered, pagination)
    return FeedPage(rows=rows, meta=meta)


def page_window(current: int, last: int, max_visible: int = 5) -> list[Optional[int]]:
    """Page numbers to show in a pager; ``None`` marks an elided gap."""

    if last <= max_visible:
        return list(range(1, last + 1))

    pages: list[Optional[int]] = [1]
    start = max(2, current - 1)
    end = min(last - 1, current + 1)
    if current <= 2:
        end = 4
    elif current >= last - 1:
        start = last - 3
    if start > 2:
        pages.append(None)
    pages.extend(range(start, end + 1))
    if end < last - 1:
        pages.append(None)
    pages.append(last)
    return pages
