"""Error taxonomy for reconciliation and report export."""

from __future__ import annotations


class LedgerFeedError(Exception):
    """Base class for every error raised by ledgerfeed."""


class FetchFailure(LedgerFeedError, RuntimeError):
    """The ledger API could not be reached or returned an unusable response."""

    def __init__(self, message: str, *, path: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class PartialFetch(FetchFailure):
    """A journal-entry page failed; pagination ends early instead of aborting."""

    def __init__(self, message: str, *, page: int, path: str | None = None, status_code: int | None = None):
        super().__init__(message, path=path, status_code=status_code)
        self.page = page


class ValidationError(LedgerFeedError, ValueError):
    """User-supplied input (report period, manual entry) is incomplete or invalid."""


class ExportBlocked(LedgerFeedError, RuntimeError):
    """The printable report could not be opened by the host environment."""
