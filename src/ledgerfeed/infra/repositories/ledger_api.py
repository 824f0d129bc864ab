"""HTTP implementation of the ledger repository backed by ``requests``."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Optional, TypeVar

import requests
from pydantic import ValidationError as RecordValidationError

from ...config import BaseConfig
from ...domain.repositories.ledger import Page
from ...errors import FetchFailure
from ...models.account import Account
from ...models.documents import Bill, Counterparty, Invoice
from ...models.journal import JournalEntry, JournalLine

logger = logging.getLogger(__name__)

T = TypeVar("T")

_AUDIT_KEYS = ("created_by_name", "updated_by_name", "created_at", "updated_at")


def _to_float(value: Any) -> float:
    """Parse API money values leniently; anything unusable counts as zero."""

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).replace(",", "").strip())
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _audit(raw: dict) -> dict[str, Optional[str]]:
    return {key: _to_str(raw.get(key)) for key in _AUDIT_KEYS}


def _category(raw: dict) -> Optional[str]:
    # Older endpoints expose the category as account_type ("REVENUE"), sometimes nested.
    value = raw.get("account_type_category") or raw.get("category")
    if not value:
        account_type = raw.get("account_type")
        if isinstance(account_type, dict):
            value = account_type.get("category") or account_type.get("name")
        else:
            value = account_type
    return str(value).strip().lower() if value else None


def parse_account(raw: Any) -> Optional[Account]:
    if not isinstance(raw, dict):
        return None
    return Account(
        id=_to_int(raw.get("id")),
        code=str(raw.get("account_code") or raw.get("code") or ""),
        name=str(raw.get("account_name") or raw.get("name") or ""),
        category=_category(raw),
        is_active=bool(raw.get("is_active", True)),
    )


def parse_counterparty(raw: Any) -> Optional[Counterparty]:
    if not isinstance(raw, dict):
        return None
    return Counterparty(id=_to_int(raw.get("id")), name=str(raw.get("name") or ""))


def parse_journal_line(raw: dict) -> JournalLine:
    return JournalLine(
        id=_to_int(raw.get("id")),
        account=parse_account(raw.get("account")),
        debit_amount=_to_float(raw.get("debit_amount")),
        credit_amount=_to_float(raw.get("credit_amount")),
        description=_to_str(raw.get("description")),
    )


def parse_journal_entry(raw: dict) -> JournalEntry:
    raw_lines = raw.get("lines")
    lines = (
        [parse_journal_line(line) for line in raw_lines if isinstance(line, dict)]
        if isinstance(raw_lines, list)
        else None
    )
    return JournalEntry(
        id=_to_int(raw.get("id")),
        entry_number=_to_str(raw.get("entry_number")),
        entry_date=_to_str(raw.get("entry_date")),
        description=_to_str(raw.get("description")),
        reference_number=_to_str(raw.get("reference_number")),
        lines=lines,
        **_audit(raw),
    )


def parse_invoice(raw: dict) -> Invoice:
    return Invoice(
        id=_to_int(raw.get("id")),
        invoice_number=str(raw.get("invoice_number") or ""),
        invoice_date=_to_str(raw.get("invoice_date")),
        total_amount=_to_float(raw.get("total_amount")),
        description=_to_str(raw.get("description")),
        status=_to_str(raw.get("status")),
        journal_entry_id=_to_int(raw.get("journal_entry_id")),
        income_account=parse_account(raw.get("income_account")),
        client=parse_counterparty(raw.get("client")),
        **_audit(raw),
    )


def parse_bill(raw: dict) -> Bill:
    return Bill(
        id=_to_int(raw.get("id")),
        bill_number=str(raw.get("bill_number") or ""),
        bill_date=_to_str(raw.get("bill_date")),
        total_amount=_to_float(raw.get("total_amount")),
        description=_to_str(raw.get("description")),
        status=_to_str(raw.get("status")),
        journal_entry_id=_to_int(raw.get("journal_entry_id")),
        expense_account=parse_account(raw.get("expense_account")),
        supplier=parse_counterparty(raw.get("supplier")),
        **_audit(raw),
    )


def extract_items(payload: Any, *, path: str) -> list[dict]:
    """Return the record list from either a bare array or a ``{"data": [...]}`` envelope."""

    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get("data") or []
    if not isinstance(payload, list):
        raise FetchFailure(f"Unexpected response shape from {path}", path=path)
    return [item for item in payload if isinstance(item, dict)]


def parse_records(payload: Any, parser: Callable[[dict], T], *, path: str) -> list[T]:
    """Parse every record in ``payload``; a record the models reject fails the whole fetch."""

    try:
        return [parser(raw) for raw in extract_items(payload, path=path)]
    except RecordValidationError as exc:
        raise FetchFailure(f"Invalid record in response from {path}: {exc}", path=path) from exc


class HTTPLedgerRepository:
    """Ledger repository talking to the JSON API with an explicit bearer token."""

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(
        cls, config: BaseConfig, *, session: Optional[requests.Session] = None
    ) -> "HTTPLedgerRepository":
        return cls(
            config.API_BASE_URL,
            token=config.API_TOKEN,
            timeout=config.REQUEST_TIMEOUT,
            session=session,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise FetchFailure(
                f"{method} {path} failed with HTTP {status}", path=path, status_code=status
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise FetchFailure(f"{method} {path} failed: {exc}", path=path) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise FetchFailure(f"{method} {path} returned invalid JSON", path=path) from exc

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        logger.debug("GET %s", path, extra={"params": params})
        return self._request("GET", path, params=params)

    def list_invoices(self, *, per_page: int) -> Page[Invoice]:
        path = "/accounting/invoices"
        payload = self._get(path, {"per_page": per_page})
        return Page(items=parse_records(payload, parse_invoice, path=path))

    def list_bills(self, *, per_page: int) -> Page[Bill]:
        path = "/accounting/bills"
        payload = self._get(path, {"per_page": per_page})
        return Page(items=parse_records(payload, parse_bill, path=path))

    def list_journal_entries(self, *, page: int, per_page: int) -> Page[JournalEntry]:
        path = "/accounting/journal-entries"
        payload = self._get(path, {"per_page": per_page, "page": page})
        last_page = _to_int(payload.get("last_page")) if isinstance(payload, dict) else None
        return Page(
            items=parse_records(payload, parse_journal_entry, path=path),
            page=page,
            last_page=last_page,
        )

    def list_accounts(self, *, category: Optional[str] = None) -> list[Account]:
        path = "/accounting/chart-of-accounts"
        params: dict[str, Any] = {"active_only": "true"}
        if category:
            params["category"] = category
        payload = self._get(path, params)
        accounts = parse_records(payload, parse_account, path=path)
        return [account for account in accounts if account is not None]

    def create_journal_entry(self, payload: dict) -> JournalEntry:
        path = "/accounting/journal-entries"
        logger.info(
            "Recording journal entry",
            extra={"entry_date": payload.get("entry_date"), "lines": len(payload.get("lines", []))},
        )
        body = self._request("POST", path, json=payload)
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        if not isinstance(body, dict):
            raise FetchFailure(f"Unexpected response shape from {path}", path=path)
        return parse_records([body], parse_journal_entry, path=path)[0]
