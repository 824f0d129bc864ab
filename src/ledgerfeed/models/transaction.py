"""Unified feed record produced by reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

FeedKind = Literal["income", "expenses"]
TransactionKind = Literal["invoice", "bill", "manual"]

INCOME: FeedKind = "income"
EXPENSES: FeedKind = "expenses"
FEED_KINDS: tuple[str, ...] = (INCOME, EXPENSES)


@dataclass(frozen=True)
class Audit:
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_by: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """One row of the income or expense feed.

    Rebuilt from scratch on every reconciliation run and never mutated.
    ``id`` is ``"invoice-{id}"``, ``"bill-{id}"`` or ``"journal-{entry}-{line}"``.
    """

    id: str
    kind: TransactionKind
    date: Optional[str]
    account_code: str
    account_name: str
    counterparty_name: str
    amount: float
    description: str
    reference: Optional[str]
    status: Optional[str] = None
    journal_entry_id: Optional[int] = None
    audit: Audit = field(default_factory=Audit)

    @property
    def date_prefix(self) -> str:
        """``YYYY-MM-DD`` part of ``date``; empty when the date is missing."""
        return str(self.date)[:10] if self.date else ""

    @property
    def account_label(self) -> str:
        return f"{self.account_code} {self.account_name}".strip()
