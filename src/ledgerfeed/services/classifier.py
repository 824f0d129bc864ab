"""Decide which ledger side a journal line belongs to."""

from __future__ import annotations

from typing import NamedTuple

from ..models.account import EXPENSE, REVENUE
from ..models.journal import JournalLine
from ..models.transaction import INCOME, FeedKind


class LineClassification(NamedTuple):
    is_revenue: bool
    is_expense: bool


def classify(line: JournalLine) -> LineClassification:
    """Revenue lines are credited revenue accounts; expense lines are debited expense accounts."""

    category = line.account.category if line.account is not None else None
    return LineClassification(
        is_revenue=category == REVENUE and (line.credit_amount or 0) > 0,
        is_expense=category == EXPENSE and (line.debit_amount or 0) > 0,
    )


def is_relevant(line: JournalLine, feed: FeedKind) -> bool:
    result = classify(line)
    return result.is_revenue if feed == INCOME else result.is_expense


def classified_amount(line: JournalLine, feed: FeedKind) -> float:
    """Credit value for the income feed, debit value for the expense feed."""

    return float(line.credit_amount if feed == INCOME else line.debit_amount) or 0.0
