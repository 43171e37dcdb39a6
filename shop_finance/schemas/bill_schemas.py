from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from typing import Optional


class BillCreate(BaseModel):
    """Schema for creating a bill"""

    due_date: date
    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0)
    recurring: bool = False
    recur_day: Optional[int] = Field(None, ge=1, le=31)

    @model_validator(mode="after")
    def drop_recur_day_when_not_recurring(self) -> "BillCreate":
        if not self.recurring:
            self.recur_day = None
        return self


class BillResponse(BaseModel):
    """Schema for bill response"""

    model_config = {"from_attributes": True}

    id: str
    due_date: date
    category: str
    amount: float
    paid: bool
    paid_at: Optional[datetime]
    recurring: bool
    recur_day: Optional[int]
    transaction_id: Optional[str]
