"""Chart-of-accounts helpers used to build pickers and filter options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from ..models.account import EXPENSE, REVENUE, Account
from ..models.transaction import INCOME, FeedKind, Transaction


@dataclass(frozen=True)
class AccountOption:
    account_code: str
    account_name: str


def feed_category(feed: FeedKind) -> str:
    return REVENUE if feed == INCOME else EXPENSE


def accounts_for_feed(accounts: Iterable[Account], feed: FeedKind) -> list[Account]:
    category = feed_category(feed)
    return [account for account in accounts if account.category == category]


def cash_accounts(accounts: Iterable[Account], codes: Sequence[str]) -> list[Account]:
    wanted = set(codes)
    return [account for account in accounts if account.code in wanted]


def account_filter_options(
    accounts: Iterable[Account], transactions: Iterable[Transaction]
) -> list[AccountOption]:
    """Chart-of-accounts entries plus any code seen in the feed, one per code, sorted by code."""

    by_code: dict[str, AccountOption] = {}
    for account in accounts:
        code = str(account.code or "")
        if code:
            by_code[code] = AccountOption(code, account.name or code)
    for tx in transactions:
        code = str(tx.account_code or "")
        if code and code not in by_code:
            by_code[code] = AccountOption(code, tx.account_name or code)
    return sorted(by_code.values(), key=lambda option: option.account_code)
