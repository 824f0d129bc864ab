"""Merge source documents and journal entries into one de-duplicated feed.

Invoices and bills auto-generate journal entries in the ledger, so the same
economic event shows up twice: once as the document and once as its posting.
The reconciler keeps the document and only surfaces journal lines that no
document accounts for ("manual" entries).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..models.documents import Bill, Invoice
from ..models.journal import JournalEntry, JournalLine
from ..models.transaction import INCOME, Audit, FeedKind, Transaction
from .classifier import classified_amount, is_relevant
from .fetcher import SourceDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferencePrefixRule:
    """Treat journal entries whose reference starts with a document prefix as document postings.

    Entries generated by invoices or bills do not always carry a back-reference
    from the document, but their reference number follows the document
    numbering (``INV-...``, ``BILL-...``). Both prefixes apply to both feeds.
    """

    prefixes: tuple[str, ...] = ("INV-", "BILL-")

    def matches(self, reference: Optional[str]) -> bool:
        if not reference:
            return False
        return any(reference.startswith(prefix) for prefix in self.prefixes)


DEFAULT_PREFIX_RULE = ReferencePrefixRule()


def _document_audit(doc: SourceDocument) -> Audit:
    return Audit(
        created_by=doc.created_by_name,
        created_at=doc.created_at,
        updated_by=doc.updated_by_name,
        updated_at=doc.updated_at,
    )


def invoice_to_transaction(invoice: Invoice) -> Transaction:
    account = invoice.income_account
    return Transaction(
        id=f"invoice-{invoice.id}",
        kind="invoice",
        date=invoice.invoice_date,
        account_code=account.code if account else "",
        account_name=account.name if account else "",
        counterparty_name=invoice.client.name if invoice.client else "",
        amount=float(invoice.total_amount or 0),
        description=invoice.description or f"Invoice {invoice.invoice_number}",
        reference=invoice.invoice_number,
        status=invoice.status,
        journal_entry_id=invoice.journal_entry_id,
        audit=_document_audit(invoice),
    )


def bill_to_transaction(bill: Bill) -> Transaction:
    account = bill.expense_account
    return Transaction(
        id=f"bill-{bill.id}",
        kind="bill",
        date=bill.bill_date,
        account_code=account.code if account else "",
        account_name=account.name if account else "",
        counterparty_name=bill.supplier.name if bill.supplier else "",
        amount=float(bill.total_amount or 0),
        description=bill.description or f"Bill {bill.bill_number}",
        reference=bill.bill_number,
        status=bill.status,
        journal_entry_id=bill.journal_entry_id,
        audit=_document_audit(bill),
    )


def document_to_transaction(doc: SourceDocument) -> Transaction:
    if isinstance(doc, Invoice):
        return invoice_to_transaction(doc)
    if isinstance(doc, Bill):
        return bill_to_transaction(doc)
    raise TypeError(f"Unsupported source document: {type(doc).__name__}")


def manual_transaction(entry: JournalEntry, line: JournalLine, feed: FeedKind) -> Transaction:
    account = line.account
    side = "income" if feed == INCOME else "expense"
    return Transaction(
        id=f"journal-{entry.id}-{line.id}",
        kind="manual",
        date=entry.entry_date,
        account_code=account.code if account else "",
        account_name=account.name if account else "",
        counterparty_name="",
        amount=classified_amount(line, feed),
        description=line.description or entry.description or f"Manual {side} entry",
        reference=entry.reference_number or entry.entry_number,
        status=None,
        journal_entry_id=entry.id,
        audit=Audit(
            created_by=entry.created_by_name,
            created_at=entry.created_at,
            updated_by=entry.updated_by_name,
            updated_at=entry.updated_at,
        ),
    )


def reconcile(
    feed: FeedKind,
    documents: Sequence[SourceDocument],
    journal_entries: Iterable[JournalEntry],
    *,
    prefix_rule: ReferencePrefixRule = DEFAULT_PREFIX_RULE,
) -> list[Transaction]:
    """Build the income or expense feed: document rows first, then manual journal lines.

    Pure function of its inputs; reconciling the same data twice yields equal lists.
    """

    transactions = [document_to_transaction(doc) for doc in documents]
    documented_entries = {t.journal_entry_id for t in transactions if t.journal_entry_id is not None}
    seen_pairs = {(t.journal_entry_id, t.account_code) for t in transactions}

    manual: list[Transaction] = []
    skipped = 0
    for entry in journal_entries:
        if entry.lines is None:
            continue
        for line in entry.lines:
            if not is_relevant(line, feed):
                continue
            if entry.id in documented_entries or prefix_rule.matches(entry.reference_number):
                skipped += 1
                continue
            pair = (entry.id, line.account.code if line.account else "")
            if pair in seen_pairs:
                skipped += 1
                continue
            seen_pairs.add(pair)
            manual.append(manual_transaction(entry, line, feed))

    logger.info(
        "Reconciled %s feed",
        feed,
        extra={
            "documents": len(transactions),
            "manual": len(manual),
            "represented_lines": skipped,
        },
    )
    return transactions + manual
