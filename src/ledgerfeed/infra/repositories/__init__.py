"""Concrete repository implementations."""

from .ledger_api import HTTPLedgerRepository

__all__ = ["HTTPLedgerRepository"]
