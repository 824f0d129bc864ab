"""Bounded retrieval of source documents and journal entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from ..domain.repositories.ledger import LedgerRepository
from ..errors import FetchFailure, PartialFetch
from ..models.documents import Bill, Invoice
from ..models.journal import JournalEntry
from ..models.transaction import INCOME, FeedKind

logger = logging.getLogger(__name__)

SourceDocument = Union[Invoice, Bill]

DEFAULT_SOURCE_PAGE_SIZE = 100
DEFAULT_JOURNAL_PAGE_SIZE = 50
DEFAULT_JOURNAL_PAGE_LIMIT = 10


@dataclass
class FetchResult:
    """Everything one reconciliation run needs from the ledger."""

    documents: list[SourceDocument] = field(default_factory=list)
    journal_entries: list[JournalEntry] = field(default_factory=list)
    pages_fetched: int = 0
    truncated: bool = False
    partial_failure: PartialFetch | None = None


def fetch_source_documents(
    repo: LedgerRepository, feed: FeedKind, *, per_page: int = DEFAULT_SOURCE_PAGE_SIZE
) -> list[SourceDocument]:
    """Fetch invoices (income) or bills (expenses). Failures propagate as FetchFailure."""

    if feed == INCOME:
        page = repo.list_invoices(per_page=per_page)
    else:
        page = repo.list_bills(per_page=per_page)
    return list(page.items)


def fetch_journal_entries(
    repo: LedgerRepository,
    *,
    per_page: int = DEFAULT_JOURNAL_PAGE_SIZE,
    page_limit: int = DEFAULT_JOURNAL_PAGE_LIMIT,
) -> FetchResult:
    """Walk journal-entry pages one at a time, stopping at ``page_limit``.

    A failed page is treated as the end of pagination. Entries past the limit
    are never requested.
    """

    result = FetchResult()
    page_number = 1
    while page_number <= page_limit:
        try:
            page = repo.list_journal_entries(page=page_number, per_page=per_page)
        except FetchFailure as exc:
            result.partial_failure = PartialFetch(
                f"Journal entries page {page_number} failed: {exc}",
                page=page_number,
                path=exc.path,
                status_code=exc.status_code,
            )
            logger.warning(
                "Journal entry pagination stopped early",
                extra={"page": page_number, "error": str(exc)},
            )
            break

        result.pages_fetched += 1
        result.journal_entries.extend(page.items)
        if page.is_last:
            break
        page_number += 1
    else:
        result.truncated = True
        logger.info(
            "Journal entry page limit reached; later entries excluded",
            extra={"page_limit": page_limit},
        )

    return result


def fetch_feed_sources(
    repo: LedgerRepository,
    feed: FeedKind,
    *,
    source_page_size: int = DEFAULT_SOURCE_PAGE_SIZE,
    journal_page_size: int = DEFAULT_JOURNAL_PAGE_SIZE,
    journal_page_limit: int = DEFAULT_JOURNAL_PAGE_LIMIT,
) -> FetchResult:
    """Documents first (fatal on failure), then the bounded journal walk."""

    documents = fetch_source_documents(repo, feed, per_page=source_page_size)
    result = fetch_journal_entries(repo, per_page=journal_page_size, page_limit=journal_page_limit)
    result.documents = documents
    return result
