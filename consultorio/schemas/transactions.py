"""Ledger transaction schemas."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from consultorio.schemas.appointments import DATE_PATTERN, new_id


class TransactionType(str, Enum):
    """Transaction type enumeration."""

    INCOME = "income"
    EXPENSE = "expense"


class Transaction(BaseModel):
    """Ledger entry."""

    id: str = Field(default_factory=new_id)
    description: str
    amount: Decimal
    type: TransactionType
    date: str = Field(..., pattern=DATE_PATTERN)
    patient_id: str | None = None
