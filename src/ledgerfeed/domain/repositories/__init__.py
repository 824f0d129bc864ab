"""Repository protocol definitions for domain layer."""

from .ledger import LedgerRepository, Page

__all__ = ["LedgerRepository", "Page"]
