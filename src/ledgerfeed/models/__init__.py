"""Ledger record and feed model exports."""

from .account import EXPENSE, REVENUE, Account
from .documents import Bill, Counterparty, Invoice
from .journal import JournalEntry, JournalLine
from .transaction import EXPENSES, FEED_KINDS, INCOME, Audit, FeedKind, Transaction

__all__ = [
    "Account",
    "Audit",
    "Bill",
    "Counterparty",
    "EXPENSE",
    "EXPENSES",
    "FEED_KINDS",
    "FeedKind",
    "INCOME",
    "Invoice",
    "JournalEntry",
    "JournalLine",
    "REVENUE",
    "Transaction",
]
