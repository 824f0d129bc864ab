"""Source documents: invoices (accounts receivable) and bills (accounts payable)."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field, SQLModel

from .account import Account


class Counterparty(SQLModel):
    """Client or supplier attached to a document."""

    id: Optional[int] = Field(default=None)
    name: str = Field(default="")


class _SourceDocument(SQLModel):
    id: Optional[int] = Field(default=None)
    total_amount: float = Field(default=0.0)
    description: Optional[str] = Field(default=None)
    status: Optional[str] = Field(default=None)
    journal_entry_id: Optional[int] = Field(default=None)

    created_by_name: Optional[str] = Field(default=None)
    updated_by_name: Optional[str] = Field(default=None)
    created_at: Optional[str] = Field(default=None)
    updated_at: Optional[str] = Field(default=None)


class Invoice(_SourceDocument):
    """Money owed to the business; feeds the income side."""

    invoice_number: str = Field(default="")
    invoice_date: Optional[str] = Field(default=None)
    income_account: Optional[Account] = Field(default=None)
    client: Optional[Counterparty] = Field(default=None)


class Bill(_SourceDocument):
    """Money owed by the business; feeds the expense side."""

    bill_number: str = Field(default="")
    bill_date: Optional[str] = Field(default=None)
    expense_account: Optional[Account] = Field(default=None)
    supplier: Optional[Counterparty] = Field(default=None)
