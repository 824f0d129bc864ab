"""Tests for the stateful income/expense feed controller."""

from __future__ import annotations

from datetime import date

import pytest

from ledgerfeed.config import BaseConfig
from ledgerfeed.infra.repositories.ledger_api import parse_invoice
from ledgerfeed.models import EXPENSES, INCOME
from ledgerfeed.services.aggregates import EMPTY_STATS
from ledgerfeed.services.feed import FeedController, Notice
from ledgerfeed.services.ledger_service import LedgerFilters, SortSpec


class RecordingTarget:
    def __init__(self, allow: bool = True):
        self.allow = allow
        self.opened: list[str] = []

    def open(self, html: str, *, filename: str) -> bool:
        self.opened.append(filename)
        return self.allow


@pytest.fixture
def revenue(account_factory):
    return account_factory("4000", "Service Revenue", "revenue", id=40)


@pytest.fixture
def cash(account_factory):
    return account_factory("1010", "Cash on Hand", "asset", id=10)


@pytest.fixture
def income_repo(ledger_repo_factory, invoice_factory, entry_factory, line_factory, revenue, cash):
    invoice = invoice_factory(1, number="INV-100", amount=5000, account=revenue, journal_entry_id=7)
    posting = entry_factory(
        7, reference="INV-100", lines=[line_factory(cash, debit=5000), line_factory(revenue, credit=5000)]
    )
    manual = entry_factory(
        9,
        reference="ADJ-1",
        entry_date="2024-01-20",
        lines=[line_factory(cash, debit=1200), line_factory(revenue, credit=1200)],
    )
    return ledger_repo_factory(invoices=[invoice], pages=[[posting, manual]], accounts=[revenue, cash])


@pytest.fixture
def controller(income_repo, config):
    return FeedController(INCOME, income_repo, config=config)


def _seed(controller, transaction_factory, count: int) -> None:
    controller.transactions = tuple(
        transaction_factory(amount=i, date=f"2024-01-{i:02d}", description=f"row {i}")
        for i in range(1, count + 1)
    )


def test_refresh_builds_feed_and_stats(controller):
    assert controller.refresh() is True

    assert [t.id for t in controller.transactions] == ["invoice-1", "journal-9-4"]
    assert controller.stats.total_transactions == 2
    assert controller.stats.total_amount == 6200
    assert controller.stats.account_count == 1
    assert controller.last_fetch.pages_fetched == 1
    assert controller.last_fetch.truncated is False


def test_failed_refresh_keeps_previous_rows(controller, income_repo):
    controller.refresh()
    previous = controller.transactions

    income_repo.fail_documents = True
    assert controller.refresh() is False

    assert controller.transactions == previous
    assert controller.stats == EMPTY_STATS
    assert controller.notice == Notice("error", "Failed to load income transactions")


def test_refresh_is_refused_while_another_action_runs(controller, income_repo):
    controller._action_lock.acquire()
    try:
        assert controller.is_busy
        assert controller.refresh() is False
    finally:
        controller._action_lock.release()

    assert income_repo.calls == []
    assert controller.notice.level == "warning"
    assert not controller.is_busy


def test_prefixes_come_from_config(monkeypatch, tmp_path, ledger_repo_factory, entry_factory, line_factory, revenue):
    monkeypatch.setenv("LEDGERFEED_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LEDGERFEED_REFERENCE_PREFIXES", "SI-")
    entry = entry_factory(3, reference="INV-3", lines=[line_factory(revenue, credit=30)])
    repo = ledger_repo_factory(pages=[[entry]])

    controller = FeedController(INCOME, repo, config=BaseConfig())
    controller.refresh()

    assert len(controller.transactions) == 1


def test_view_changes_reset_to_first_page(controller, transaction_factory):
    _seed(controller, transaction_factory, 23)

    controller.go_to_page(3)
    assert controller.current_page().meta.current_page == 3
    assert len(controller.current_page().rows) == 3

    controller.set_search("row")
    assert controller.pagination.page == 1

    controller.go_to_page(2)
    controller.sort_by("amount")
    assert controller.pagination.page == 1

    controller.go_to_page(2)
    controller.set_page_size(5)
    assert controller.pagination.page == 1
    assert controller.current_page().meta.last_page == 5


def test_go_to_page_is_clamped(controller, transaction_factory):
    _seed(controller, transaction_factory, 23)

    controller.go_to_page(99)
    assert controller.pagination.page == 3

    controller.go_to_page(-4)
    assert controller.pagination.page == 1


def test_sort_by_toggles_and_ignores_clicks_while_busy(controller):
    controller.sort_by("amount")
    assert controller.sort == SortSpec("amount", "asc")

    controller.sort_by("amount")
    assert controller.sort == SortSpec("amount", "desc")

    controller._action_lock.acquire()
    try:
        controller.sort_by("description")
    finally:
        controller._action_lock.release()
    assert controller.sort == SortSpec("amount", "desc")


def test_clear_filters(controller, transaction_factory):
    _seed(controller, transaction_factory, 5)
    controller.set_search("row 1")
    controller.set_account_filter("5000")
    controller.set_date_range("2024-01-01", "")
    assert controller.has_active_filters
    assert controller.filters.end_date is None

    controller.clear_filters()

    assert controller.filters == LedgerFilters()
    assert controller.sort == SortSpec()
    assert not controller.has_active_filters
    assert controller.current_page().meta.total == 5


def test_summary_follows_filters(controller, transaction_factory):
    _seed(controller, transaction_factory, 4)

    controller.set_date_range("2024-01-03", None)

    assert controller.filtered_summary().count == 2
    assert controller.filtered_summary().total == 7
    assert controller.by_account_rows()[0].account_code == "5000"


def test_export_csv_writes_report(controller, tmp_path):
    controller.refresh()

    path = controller.export_csv("custom", ("2024-01-01", "2024-01-31"), output_dir=tmp_path)

    assert path == tmp_path / "Income_Report_2024-01-01_to_2024-01-31.csv"
    assert path.exists()
    assert controller.notice == Notice("success", "CSV report downloaded.")


def test_export_csv_defaults_to_exports_dir(controller, config):
    controller.refresh()

    path = controller.export_csv("this_month", today=date(2024, 1, 25))

    assert path.parent == config.exports_dir


def test_export_csv_rejects_incomplete_custom_range(controller, tmp_path):
    path = controller.export_csv("custom", ("2024-01-01", None), output_dir=tmp_path)

    assert path is None
    assert controller.notice == Notice("error", "Please select From and To dates for custom range.")
    assert list(tmp_path.iterdir()) == []


def test_export_html_blocked(controller):
    controller.refresh()
    target = RecordingTarget(allow=False)

    html = controller.export_html("custom", ("2024-01-01", "2024-01-31"), target=target)

    assert html is None
    assert controller.notice == Notice("error", "Please allow pop-ups to open the report.")
    assert target.opened == ["Income_Report_2024-01-01_to_2024-01-31.html"]


def test_export_html_success(controller):
    controller.refresh()

    html = controller.export_html("custom", ("2024-01-01", "2024-01-31"), target=RecordingTarget())

    assert "Income Report" in html
    assert controller.notice == Notice("success", "Report opened for printing or save as PDF.")
    assert not controller.is_busy


def test_expense_entry_debits_expense_and_credits_cash(ledger_repo_factory, config):
    repo = ledger_repo_factory()
    controller = FeedController(EXPENSES, repo, config=config)

    entry = controller.record_manual_entry(
        account_id=50, cash_account_id=10, amount="250.75", entry_date="2024-03-01"
    )

    assert entry is not None
    payload = repo.created[0]
    assert payload["entry_date"] == "2024-03-01"
    assert payload["description"] == "Expense: 50"
    debit, credit = payload["lines"]
    assert (debit["account_id"], debit["debit_amount"], debit["credit_amount"]) == (50, 250.75, 0)
    assert (credit["account_id"], credit["debit_amount"], credit["credit_amount"]) == (10, 0, 250.75)
    assert debit["description"] == "Expense paid"
    assert controller.notice == Notice("success", "Expense recorded successfully")
    assert ("bills", config.SOURCE_PAGE_SIZE) in repo.calls


def test_income_entry_debits_cash_and_credits_revenue(controller):
    payload = controller.build_manual_entry(
        account_id=40, cash_account_id=10, amount=99, description="Walk-in sale", reference_number="OR-1"
    )

    debit, credit = payload["lines"]
    assert debit["account_id"] == 10
    assert credit["account_id"] == 40
    assert payload["description"] == "Walk-in sale"
    assert payload["reference_number"] == "OR-1"


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"account_id": None, "cash_account_id": 10, "amount": 5}, "Select both"),
        ({"account_id": 40, "cash_account_id": 10, "amount": "abc"}, "not a number"),
        ({"account_id": 40, "cash_account_id": 10, "amount": 0}, "greater than zero"),
    ],
)
def test_invalid_manual_entry_is_not_posted(controller, income_repo, fields, message):
    assert controller.record_manual_entry(**fields) is None

    assert income_repo.created == []
    assert controller.notice.level == "error"
    assert message in controller.notice.message


def test_account_options_use_feed_accounts(controller):
    controller.refresh()

    options = controller.account_options(controller.load_accounts())

    assert [o.account_code for o in options] == ["4000"]


def test_refresh_accepts_long_account_names(ledger_repo_factory, config):
    invoice = parse_invoice(
        {
            "id": 5,
            "invoice_number": "INV-5",
            "invoice_date": "2024-01-10",
            "total_amount": "450.00",
            "income_account": {
                "account_code": "4" * 40,
                "account_name": "x" * 200,
                "account_type": "REVENUE",
            },
        }
    )
    controller = FeedController(INCOME, ledger_repo_factory(invoices=[invoice]), config=config)

    assert controller.refresh() is True

    assert controller.transactions[0].account_name == "x" * 200
    assert controller.stats.total_transactions == 1
