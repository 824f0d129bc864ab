"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, failing loudly on junk."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "ledgerfeed"
    DEFAULT_API_BASE_URL = "http://localhost:8000/api"
    DEFAULT_REFERENCE_PREFIXES = ("INV-", "BILL-")
    DEFAULT_CASH_ACCOUNT_CODES = ("1010", "1020", "1030")

    def __init__(self) -> None:
        self.API_BASE_URL = os.getenv("LEDGERFEED_API_BASE_URL", self.DEFAULT_API_BASE_URL).rstrip("/")
        self.API_TOKEN = os.getenv("LEDGERFEED_API_TOKEN") or None
        self.REQUEST_TIMEOUT = _env_int("LEDGERFEED_REQUEST_TIMEOUT", 30)
        self.SOURCE_PAGE_SIZE = _env_int("LEDGERFEED_SOURCE_PAGE_SIZE", 100)
        self.JOURNAL_PAGE_SIZE = _env_int("LEDGERFEED_JOURNAL_PAGE_SIZE", 50)
        self.JOURNAL_PAGE_LIMIT = _env_int("LEDGERFEED_JOURNAL_PAGE_LIMIT", 10)
        self.REFERENCE_PREFIXES = _env_list(
            "LEDGERFEED_REFERENCE_PREFIXES", self.DEFAULT_REFERENCE_PREFIXES
        )
        self.CASH_ACCOUNT_CODES = _env_list(
            "LEDGERFEED_CASH_ACCOUNT_CODES", self.DEFAULT_CASH_ACCOUNT_CODES
        )
        self.CURRENCY_SYMBOL = os.getenv("LEDGERFEED_CURRENCY_SYMBOL", "₱")
        self.ORGANIZATION_NAME = os.getenv("LEDGERFEED_ORGANIZATION_NAME", "Accounting System")
        self.DEV_MODE = _env_bool("LEDGERFEED_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()

        if self.JOURNAL_PAGE_LIMIT < 1:
            raise ValueError("LEDGERFEED_JOURNAL_PAGE_LIMIT must be at least 1.")
        if self.SOURCE_PAGE_SIZE < 1 or self.JOURNAL_PAGE_SIZE < 1:
            raise ValueError("Page sizes must be at least 1.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where logs and exported reports live."""

        data_root = os.getenv("LEDGERFEED_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def exports_dir(self) -> Path:
        return Path(self.DATA_DIR) / "exports"


class DevConfig(BaseConfig):
    """Development configuration against a local ledger API."""

    DEBUG = True
    TESTING = False
