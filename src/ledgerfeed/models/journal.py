"""Journal entries and their debit/credit lines."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field, SQLModel

from .account import Account


class JournalLine(SQLModel):
    """One debit or credit movement against an account."""

    id: Optional[int] = Field(default=None)
    account: Optional[Account] = Field(default=None)
    debit_amount: float = Field(default=0.0)
    credit_amount: float = Field(default=0.0)
    description: Optional[str] = Field(default=None)


class JournalEntry(SQLModel):
    """A dated set of lines. Balance (debits == credits) is not verified here."""

    id: Optional[int] = Field(default=None)
    entry_number: Optional[str] = Field(default=None)
    entry_date: Optional[str] = Field(default=None, description="ISO-8601 date or datetime")
    description: Optional[str] = Field(default=None)
    reference_number: Optional[str] = Field(default=None)
    # None means the API omitted the lines entirely; such entries are skipped.
    lines: Optional[list[JournalLine]] = Field(default=None)

    created_by_name: Optional[str] = Field(default=None)
    updated_by_name: Optional[str] = Field(default=None)
    created_at: Optional[str] = Field(default=None)
    updated_at: Optional[str] = Field(default=None)
