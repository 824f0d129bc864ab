"""Stateful feed controller consumed by the income and expense screens.

Holds the last reconciled feed, the live filter/sort/page state and the
action lock that keeps a second reconciliation or export from starting while
one is running.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Iterator, Optional

from ..config import BaseConfig
from ..domain.repositories.ledger import LedgerRepository
from ..errors import ExportBlocked, FetchFailure, ValidationError
from ..models.account import Account
from ..models.journal import JournalEntry
from ..models.transaction import INCOME, FeedKind, Transaction
from .accounts import AccountOption, account_filter_options, accounts_for_feed
from .aggregates import EMPTY_STATS, AccountSummary, FeedAggregate, FeedStats, aggregate, compute_stats
from .export_csv import export_report_csv
from .fetcher import FetchResult, fetch_feed_sources
from .ledger_service import (
    FeedPage,
    LedgerFilters,
    Pagination,
    SortSpec,
    apply,
    filter_transactions,
    normalize_account_value,
)
from .periods import DateLike
from .reconciler import ReferencePrefixRule, reconcile
from .reports import BrowserPrintTarget, PrintTarget, Report, generate_report, open_report_for_print

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """User-facing outcome of the last action (rendered as a toast)."""

    level: str  # success | error | warning
    message: str


class FeedController:
    """One income or expense screen's worth of state."""

    def __init__(
        self,
        feed: FeedKind,
        repository: LedgerRepository,
        *,
        config: Optional[BaseConfig] = None,
        prefix_rule: Optional[ReferencePrefixRule] = None,
    ):
        self.feed = feed
        self.repository = repository
        self.config = config or BaseConfig()
        self.prefix_rule = prefix_rule or ReferencePrefixRule(tuple(self.config.REFERENCE_PREFIXES))

        self.transactions: tuple[Transaction, ...] = ()
        self.stats: FeedStats = EMPTY_STATS
        self.last_fetch: Optional[FetchResult] = None
        self.notice: Optional[Notice] = None

        self.filters = LedgerFilters()
        self.sort = SortSpec()
        self.pagination = Pagination()

        self._action_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Action lock
    # ------------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        return self._action_lock.locked()

    @contextmanager
    def _action(self, name: str) -> Iterator[bool]:
        acquired = self._action_lock.acquire(blocking=False)
        if not acquired:
            logger.warning("Action refused while another is running", extra={"action": name})
            self.notice = Notice("warning", "Please wait for the current action to finish.")
        try:
            yield acquired
        finally:
            if acquired:
                self._action_lock.release()

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def refresh(self) -> bool:
        """Fetch and reconcile the feed; returns False when nothing was replaced."""

        with self._action("refresh") as acquired:
            if not acquired:
                return False
            return self._refresh()

    def _refresh(self) -> bool:
        try:
            fetched = fetch_feed_sources(
                self.repository,
                self.feed,
                source_page_size=self.config.SOURCE_PAGE_SIZE,
                journal_page_size=self.config.JOURNAL_PAGE_SIZE,
                journal_page_limit=self.config.JOURNAL_PAGE_LIMIT,
            )
        except FetchFailure:
            logger.error("Failed to load %s transactions", self.feed, exc_info=True)
            self.stats = EMPTY_STATS
            self.notice = Notice("error", f"Failed to load {self.feed} transactions")
            return False

        transactions = reconcile(
            self.feed, fetched.documents, fetched.journal_entries, prefix_rule=self.prefix_rule
        )
        self.transactions = tuple(transactions)
        self.stats = compute_stats(transactions)
        self.last_fetch = fetched
        self.pagination = replace(self.pagination, page=1)
        logger.info(
            "Loaded %s feed",
            self.feed,
            extra={
                "transactions": self.stats.total_transactions,
                "journal_pages": fetched.pages_fetched,
                "truncated": fetched.truncated,
            },
        )
        return True

    # ------------------------------------------------------------------
    # Filter / sort / page state
    # ------------------------------------------------------------------

    def _set_view(self, *, filters: Optional[LedgerFilters] = None, sort: Optional[SortSpec] = None) -> None:
        if filters is not None:
            self.filters = filters
        if sort is not None:
            self.sort = sort
        self.pagination = replace(self.pagination, page=1)

    def set_search(self, text: str) -> None:
        self._set_view(filters=replace(self.filters, search=text or ""))

    def set_account_filter(self, account_code: Optional[str]) -> None:
        self._set_view(filters=replace(self.filters, account=normalize_account_value(account_code)))

    def set_date_range(self, start_date: Optional[str], end_date: Optional[str]) -> None:
        self._set_view(
            filters=replace(self.filters, start_date=start_date or None, end_date=end_date or None)
        )

    def sort_by(self, field: str) -> None:
        if self.is_busy:
            return
        self._set_view(sort=self.sort.toggle(field))

    def clear_filters(self) -> None:
        self._set_view(filters=LedgerFilters(), sort=SortSpec())

    @property
    def has_active_filters(self) -> bool:
        return self.filters.is_active

    def set_page_size(self, per_page: int) -> None:
        self.pagination = Pagination(page=1, per_page=max(1, int(per_page)))

    def go_to_page(self, page: int) -> None:
        last_page = max(1, self.current_page().meta.last_page)
        self.pagination = replace(self.pagination, page=min(max(1, int(page)), last_page))

    def current_page(self) -> FeedPage:
        return apply(self.transactions, self.filters, self.sort, self.pagination)

    def filtered_transactions(self) -> list[Transaction]:
        return filter_transactions(self.transactions, self.filters)

    def filtered_summary(self) -> FeedAggregate:
        return aggregate(self.filtered_transactions())

    def by_account_rows(self) -> list[AccountSummary]:
        """Per-account totals of the filtered feed, largest first."""
        return self.filtered_summary().rows_by_total()

    # ------------------------------------------------------------------
    # Chart of accounts
    # ------------------------------------------------------------------

    def load_accounts(self) -> list[Account]:
        try:
            return self.repository.list_accounts()
        except FetchFailure:
            logger.error("Error fetching chart of accounts", exc_info=True)
            return []

    def account_options(self, accounts: list[Account]) -> list[AccountOption]:
        return account_filter_options(accounts_for_feed(accounts, self.feed), self.transactions)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def generate_report(
        self,
        period: str,
        custom_range: Optional[tuple[DateLike, DateLike]] = None,
        *,
        today: Optional[date] = None,
    ) -> Report:
        """Report over the already reconciled feed; never re-fetches."""

        return generate_report(self.feed, self.transactions, period, custom_range, today=today)

    def export_html(
        self,
        period: str,
        custom_range: Optional[tuple[DateLike, DateLike]] = None,
        *,
        target: Optional[PrintTarget] = None,
        today: Optional[date] = None,
    ) -> Optional[str]:
        """Open the printable report. Returns the HTML, or None with ``notice`` set."""

        with self._action("export_html") as acquired:
            if not acquired:
                return None
            try:
                report = self.generate_report(period, custom_range, today=today)
                html = open_report_for_print(
                    report,
                    target or BrowserPrintTarget(self.config.exports_dir),
                    currency_symbol=self.config.CURRENCY_SYMBOL,
                    organization=self.config.ORGANIZATION_NAME,
                )
            except (ValidationError, ExportBlocked) as exc:
                logger.warning("Report export refused: %s", exc)
                self.notice = Notice("error", str(exc))
                return None
            except OSError:
                logger.error("Report export error", exc_info=True)
                self.notice = Notice("error", "Failed to generate report.")
                return None

        self.notice = Notice("success", "Report opened for printing or save as PDF.")
        return html

    def export_csv(
        self,
        period: str,
        custom_range: Optional[tuple[DateLike, DateLike]] = None,
        *,
        output_dir: Optional[Path] = None,
        today: Optional[date] = None,
    ) -> Optional[Path]:
        """Write the CSV report. Returns its path, or None with ``notice`` set."""

        with self._action("export_csv") as acquired:
            if not acquired:
                return None
            try:
                report = self.generate_report(period, custom_range, today=today)
                path = export_report_csv(report=report, output_dir=output_dir or self.config.exports_dir)
            except ValidationError as exc:
                logger.warning("CSV export refused: %s", exc)
                self.notice = Notice("error", str(exc))
                return None
            except OSError:
                logger.error("CSV export error", exc_info=True)
                self.notice = Notice("error", "Failed to export CSV.")
                return None

        self.notice = Notice("success", "CSV report downloaded.")
        return path

    # ------------------------------------------------------------------
    # Manual entries
    # ------------------------------------------------------------------

    def build_manual_entry(
        self,
        *,
        account_id: Optional[int],
        cash_account_id: Optional[int],
        amount: float,
        entry_date: Optional[str] = None,
        description: str = "",
        reference_number: Optional[str] = None,
    ) -> dict:
        """Balanced two-line payload: cash against the revenue or expense account.

        Raises:
            ValidationError: missing accounts or a non-positive amount.
        """

        if not account_id or not cash_account_id:
            raise ValidationError("Select both the account and the cash account.")
        try:
            value = float(amount)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Amount {amount!r} is not a number.") from exc
        if value <= 0:
            raise ValidationError("Amount must be greater than zero.")

        if self.feed == INCOME:
            line_text = description or "Income received"
            debit_id, credit_id = cash_account_id, account_id
            entry_text = description or f"Income: {account_id}"
        else:
            line_text = description or "Expense paid"
            debit_id, credit_id = account_id, cash_account_id
            entry_text = description or f"Expense: {account_id}"

        return {
            "entry_date": entry_date or date.today().isoformat(),
            "description": entry_text,
            "reference_number": reference_number or None,
            "lines": [
                {"account_id": int(debit_id), "debit_amount": value, "credit_amount": 0, "description": line_text},
                {"account_id": int(credit_id), "debit_amount": 0, "credit_amount": value, "description": line_text},
            ],
        }

    def record_manual_entry(self, **fields) -> Optional[JournalEntry]:
        """Post a manual journal entry and reload the feed."""

        with self._action("record_manual_entry") as acquired:
            if not acquired:
                return None
            try:
                payload = self.build_manual_entry(**fields)
                entry = self.repository.create_journal_entry(payload)
            except ValidationError as exc:
                self.notice = Notice("error", str(exc))
                return None
            except FetchFailure:
                logger.error("Failed to record %s entry", self.feed, exc_info=True)
                self.notice = Notice("error", f"Failed to record {'income' if self.feed == INCOME else 'expense'}")
                return None

            refreshed = self._refresh()

        if refreshed:
            side = "Income" if self.feed == INCOME else "Expense"
            self.notice = Notice("success", f"{side} recorded successfully")
        return entry
