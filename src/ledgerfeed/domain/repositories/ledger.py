"""Ledger API repository protocol and the normalized page shape."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, Protocol, TypeVar

from ...models.account import Account
from ...models.documents import Bill, Invoice
from ...models.journal import JournalEntry

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a listing, whatever shape the API answered with."""

    items: list[T] = field(default_factory=list)
    page: int = 1
    last_page: Optional[int] = None

    @property
    def is_last(self) -> bool:
        if not self.items:
            return True
        return self.last_page is not None and self.page >= self.last_page


class LedgerRepository(Protocol):
    """Read (and minimal write) access to the external ledger."""

    def list_invoices(self, *, per_page: int) -> Page[Invoice]:
        """Fetch invoices in a single request."""
        ...

    def list_bills(self, *, per_page: int) -> Page[Bill]:
        """Fetch bills in a single request."""
        ...

    def list_journal_entries(self, *, page: int, per_page: int) -> Page[JournalEntry]:
        """Fetch one page of journal entries."""
        ...

    def list_accounts(self, *, category: Optional[str] = None) -> list[Account]:
        """Fetch active chart-of-accounts entries, optionally by category."""
        ...

    def create_journal_entry(self, payload: dict) -> JournalEntry:
        """Record a new journal entry."""
        ...
