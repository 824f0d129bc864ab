"""Totals and per-account roll-ups over a feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..models.transaction import Transaction

OTHER_ACCOUNT = "Other"


@dataclass
class AccountSummary:
    account_code: str
    account_name: str
    count: int = 0
    total: float = 0.0


@dataclass
class FeedAggregate:
    count: int = 0
    total: float = 0.0
    by_account: dict[str, AccountSummary] = field(default_factory=dict)

    def rows_by_code(self) -> list[AccountSummary]:
        """Account code ascending, as printed in report summary tables."""
        return sorted(self.by_account.values(), key=lambda row: str(row.account_code))

    def rows_by_total(self) -> list[AccountSummary]:
        """Largest total first, as shown in the on-screen by-account panel."""
        return sorted(self.by_account.values(), key=lambda row: row.total, reverse=True)


@dataclass(frozen=True)
class FeedStats:
    total_transactions: int = 0
    total_amount: float = 0.0
    account_count: int = 0


EMPTY_STATS = FeedStats()


def aggregate(transactions: Iterable[Transaction]) -> FeedAggregate:
    """Count and sum the feed, overall and per account code."""

    result = FeedAggregate()
    for tx in transactions:
        amount = float(tx.amount or 0)
        result.count += 1
        result.total += amount

        key = tx.account_code or OTHER_ACCOUNT
        row = result.by_account.get(key)
        if row is None:
            name = tx.account_name or (OTHER_ACCOUNT if key == OTHER_ACCOUNT else "")
            row = result.by_account[key] = AccountSummary(account_code=key, account_name=name)
        row.count += 1
        row.total += amount
    return result


def compute_stats(transactions: Iterable[Transaction]) -> FeedStats:
    summary = aggregate(transactions)
    return FeedStats(
        total_transactions=summary.count,
        total_amount=summary.total,
        account_count=len(summary.by_account),
    )
