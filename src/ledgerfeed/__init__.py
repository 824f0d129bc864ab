"""Income/expense reconciliation and reporting over a double-entry ledger API."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .infra.repositories import HTTPLedgerRepository
from .services.aggregates import aggregate
from .services.feed import FeedController
from .services.ledger_service import apply
from .services.reconciler import ReferencePrefixRule, reconcile
from .services.reports import generate_report, render_report_html
from .services.export_csv import render_report_csv

__all__ = [
    "BaseConfig",
    "DevConfig",
    "FeedController",
    "HTTPLedgerRepository",
    "ReferencePrefixRule",
    "aggregate",
    "apply",
    "generate_report",
    "reconcile",
    "render_report_csv",
    "render_report_html",
]
