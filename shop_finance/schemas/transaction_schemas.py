from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import Optional

from shop_finance.models.transaction import TransactionType


class TransactionCreate(BaseModel):
    """Schema for creating a new transaction"""

    date: date
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0, description="Always positive; type gives direction")
    note: Optional[str] = Field(None, max_length=1000)


class TransactionAmountUpdate(BaseModel):
    """Inline amount edit"""

    amount: float = Field(..., gt=0)


class TransactionResponse(BaseModel):
    """Schema for transaction response"""

    model_config = {"from_attributes": True}

    id: str
    date: date
    type: TransactionType
    category: str
    amount: float
    note: Optional[str]
    created_at: datetime


class TransactionListResponse(BaseModel):
    """Schema for list of transactions"""

    transactions: list[TransactionResponse]
    total: int
