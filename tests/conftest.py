"""Pytest configuration and shared fixtures for ledgerfeed tests.

Provides factories for ledger records and feed transactions plus an in-memory
ledger repository, so reconciliation and reporting can be tested without a
live ledger API.
"""

from __future__ import annotations

import itertools
from typing import Optional

import matplotlib

matplotlib.use("Agg")

import pytest

from ledgerfeed.config import BaseConfig
from ledgerfeed.domain.repositories.ledger import Page
from ledgerfeed.errors import FetchFailure
from ledgerfeed.models import (
    Account,
    Audit,
    Bill,
    Counterparty,
    Invoice,
    JournalEntry,
    JournalLine,
    Transaction,
)

# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> BaseConfig:
    """Config isolated from the developer's environment and .env file."""

    for name in (
        "LEDGERFEED_API_BASE_URL",
        "LEDGERFEED_API_TOKEN",
        "LEDGERFEED_JOURNAL_PAGE_LIMIT",
        "LEDGERFEED_REFERENCE_PREFIXES",
        "LEDGERFEED_CASH_ACCOUNT_CODES",
        "LEDGERFEED_CURRENCY_SYMBOL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LEDGERFEED_DATA_DIR", str(tmp_path / "instance"))
    return BaseConfig()


# =============================================================================
# Ledger Record Factories
# =============================================================================


@pytest.fixture
def account_factory():
    """Factory for chart-of-accounts entries."""

    def _create_account(
        code: str = "4000",
        name: str = "Service Revenue",
        category: Optional[str] = "revenue",
        id: Optional[int] = None,
    ) -> Account:
        return Account(id=id, code=code, name=name, category=category)

    return _create_account


@pytest.fixture
def line_factory():
    """Factory for journal lines with auto-incrementing ids."""

    counter = itertools.count(1)

    def _create_line(
        account: Optional[Account],
        *,
        debit: float = 0.0,
        credit: float = 0.0,
        description: Optional[str] = None,
        id: Optional[int] = None,
    ) -> JournalLine:
        return JournalLine(
            id=id if id is not None else next(counter),
            account=account,
            debit_amount=debit,
            credit_amount=credit,
            description=description,
        )

    return _create_line


@pytest.fixture
def entry_factory():
    """Factory for journal entries."""

    def _create_entry(
        id: int,
        *,
        lines: Optional[list[JournalLine]],
        reference: Optional[str] = None,
        entry_number: Optional[str] = None,
        entry_date: str = "2024-01-15",
        description: Optional[str] = None,
    ) -> JournalEntry:
        return JournalEntry(
            id=id,
            entry_number=entry_number or f"JE-{id:05d}",
            entry_date=entry_date,
            description=description,
            reference_number=reference,
            lines=lines,
            created_by_name="Admin",
            created_at="2024-01-15T08:00:00",
        )

    return _create_entry


@pytest.fixture
def invoice_factory(account_factory):
    """Factory for invoices linked to an income account."""

    def _create_invoice(
        id: int,
        *,
        number: str,
        amount: float,
        account: Optional[Account] = None,
        journal_entry_id: Optional[int] = None,
        invoice_date: str = "2024-01-10",
        client: str = "Acme Corp",
        description: Optional[str] = None,
        status: str = "sent",
    ) -> Invoice:
        return Invoice(
            id=id,
            invoice_number=number,
            invoice_date=invoice_date,
            total_amount=amount,
            description=description,
            status=status,
            journal_entry_id=journal_entry_id,
            income_account=account or account_factory(),
            client=Counterparty(id=1, name=client),
            created_by_name="Clerk",
        )

    return _create_invoice


@pytest.fixture
def bill_factory(account_factory):
    """Factory for bills linked to an expense account."""

    def _create_bill(
        id: int,
        *,
        number: str,
        amount: float,
        account: Optional[Account] = None,
        journal_entry_id: Optional[int] = None,
        bill_date: str = "2024-01-12",
        supplier: str = "Paper Supply Co",
        description: Optional[str] = None,
        status: str = "open",
    ) -> Bill:
        return Bill(
            id=id,
            bill_number=number,
            bill_date=bill_date,
            total_amount=amount,
            description=description,
            status=status,
            journal_entry_id=journal_entry_id,
            expense_account=account or account_factory("5000", "Office Supplies", "expense"),
            supplier=Counterparty(id=2, name=supplier),
        )

    return _create_bill


@pytest.fixture
def transaction_factory():
    """Factory for already reconciled feed rows."""

    counter = itertools.count(1)

    def _create_transaction(
        *,
        amount: float = 100.0,
        date: Optional[str] = "2024-01-01",
        account_code: str = "5000",
        account_name: str = "Office Supplies",
        counterparty_name: str = "",
        description: str = "Test transaction",
        reference: Optional[str] = None,
        kind: str = "manual",
        journal_entry_id: Optional[int] = None,
        id: Optional[str] = None,
    ) -> Transaction:
        return Transaction(
            id=id or f"journal-{next(counter)}-1",
            kind=kind,  # type: ignore[arg-type]
            date=date,
            account_code=account_code,
            account_name=account_name,
            counterparty_name=counterparty_name,
            amount=amount,
            description=description,
            reference=reference,
            journal_entry_id=journal_entry_id,
            audit=Audit(),
        )

    return _create_transaction


# =============================================================================
# Fake Repository
# =============================================================================


class FakeLedgerRepository:
    """In-memory ledger; journal pages are served exactly as given."""

    def __init__(
        self,
        *,
        invoices: Optional[list[Invoice]] = None,
        bills: Optional[list[Bill]] = None,
        pages: Optional[list[list[JournalEntry]]] = None,
        report_last_page: bool = True,
        failing_pages: Optional[set[int]] = None,
        fail_documents: bool = False,
        accounts: Optional[list[Account]] = None,
    ):
        self.invoices = list(invoices or [])
        self.bills = list(bills or [])
        self.pages = [list(page) for page in (pages or [])]
        self.report_last_page = report_last_page
        self.failing_pages = set(failing_pages or ())
        self.fail_documents = fail_documents
        self.accounts = list(accounts or [])
        self.calls: list[tuple] = []
        self.created: list[dict] = []

    def list_invoices(self, *, per_page: int) -> Page[Invoice]:
        self.calls.append(("invoices", per_page))
        if self.fail_documents:
            raise FetchFailure("invoices unavailable", path="/accounting/invoices", status_code=500)
        return Page(items=list(self.invoices))

    def list_bills(self, *, per_page: int) -> Page[Bill]:
        self.calls.append(("bills", per_page))
        if self.fail_documents:
            raise FetchFailure("bills unavailable", path="/accounting/bills", status_code=500)
        return Page(items=list(self.bills))

    def list_journal_entries(self, *, page: int, per_page: int) -> Page[JournalEntry]:
        self.calls.append(("journal-entries", page, per_page))
        if page in self.failing_pages:
            raise FetchFailure(f"page {page} failed", path="/accounting/journal-entries", status_code=502)
        items = self.pages[page - 1] if page <= len(self.pages) else []
        last_page = len(self.pages) if self.report_last_page else None
        return Page(items=list(items), page=page, last_page=last_page)

    def list_accounts(self, *, category: Optional[str] = None) -> list[Account]:
        self.calls.append(("accounts", category))
        return [a for a in self.accounts if category is None or a.category == category]

    def create_journal_entry(self, payload: dict) -> JournalEntry:
        self.calls.append(("create-journal-entry",))
        self.created.append(payload)
        return JournalEntry(id=1000 + len(self.created), entry_date=payload.get("entry_date"))

    def journal_calls(self) -> list[tuple]:
        return [call for call in self.calls if call[0] == "journal-entries"]


@pytest.fixture
def ledger_repo_factory():
    """Factory for FakeLedgerRepository instances."""

    def _create_repo(**kwargs) -> FakeLedgerRepository:
        return FakeLedgerRepository(**kwargs)

    return _create_repo
