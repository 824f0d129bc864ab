"""Service module exports."""

from . import (
    accounts,
    aggregates,
    classifier,
    export_csv,
    feed,
    fetcher,
    formatting,
    ledger_service,
    periods,
    reconciler,
    reports,
)

__all__ = [
    "accounts",
    "aggregates",
    "classifier",
    "export_csv",
    "feed",
    "fetcher",
    "formatting",
    "ledger_service",
    "periods",
    "reconciler",
    "reports",
]
