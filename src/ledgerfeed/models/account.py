"""Chart-of-accounts record as returned by the ledger API."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field, SQLModel

REVENUE = "revenue"
EXPENSE = "expense"


class Account(SQLModel):
    """A financial account; identity is ``code``."""

    id: Optional[int] = Field(default=None)
    code: str = Field(default="")
    name: str = Field(default="")
    category: Optional[str] = Field(
        default=None, description="revenue, expense, asset, liability, equity, ..."
    )
    is_active: bool = Field(default=True)

    @property
    def label(self) -> str:
        return f"{self.code} {self.name}".strip()
