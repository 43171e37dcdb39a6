from datetime import date
from pydantic import BaseModel, Field
from typing import Optional


class SavingsGoalCreate(BaseModel):
    """Schema for creating a savings goal"""

    name: str = Field(..., min_length=1, max_length=100)
    target: float = Field(0, ge=0)


class SavingsGoalResponse(BaseModel):
    """Savings goal with its running total"""

    id: str
    name: str
    target: float
    saved: float
    percent: int = Field(..., description="Progress towards target, capped at 100")

    @classmethod
    def from_goal(cls, goal, saved: float) -> "SavingsGoalResponse":
        target = float(goal.target)
        percent = min(100, round(saved / (target or 1) * 100))
        return cls(id=goal.id, name=goal.name, target=target, saved=saved, percent=percent)


class SavingsContributionCreate(BaseModel):
    """Schema for adding money to a goal"""

    goal_id: str
    date: date
    amount: float = Field(..., gt=0)
    note: Optional[str] = None


class SavingsContributionResponse(BaseModel):
    """Schema for contribution response"""

    model_config = {"from_attributes": True}

    id: str
    goal_id: str
    date: date
    amount: float
    note: Optional[str]
    transaction_id: Optional[str]
