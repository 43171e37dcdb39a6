from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shop_finance.database import get_db
from shop_finance.dependencies import require_capability
from shop_finance.services.capability_resolver import SessionContext
from shop_finance.services.savings_service import SavingsService
from shop_finance.schemas.savings_schemas import (
    SavingsContributionCreate,
    SavingsContributionResponse,
    SavingsGoalCreate,
    SavingsGoalResponse,
)

router = APIRouter()


@router.get("/goals", response_model=list[SavingsGoalResponse])
def list_goals(
    context: SessionContext = Depends(require_capability("read")),
    db: Session = Depends(get_db),
):
    """List savings goals with saved totals and progress. Any role."""
    return SavingsService(db).list_goals()


@router.post("/goals", response_model=SavingsGoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    goal_data: SavingsGoalCreate,
    context: SessionContext = Depends(require_capability("write")),
    db: Session = Depends(get_db),
):
    """Create a savings goal. Requires EDITOR or ADMIN."""
    return SavingsService(db).create_goal(goal_data, context)


@router.get("/contributions", response_model=list[SavingsContributionResponse])
def list_contributions(
    goal_id: Optional[str] = Query(None),
    context: SessionContext = Depends(require_capability("read")),
    db: Session = Depends(get_db),
):
    """List contributions, most recent first. Any role."""
    return SavingsService(db).list_contributions(goal_id)


@router.post(
    "/contributions",
    response_model=SavingsContributionResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_contribution(
    contribution_data: SavingsContributionCreate,
    context: SessionContext = Depends(require_capability("write")),
    db: Session = Depends(get_db),
):
    """
    Add a contribution to a goal.

    - Also books a `savings` transaction under the goal's name
    - 404 if the goal doesn't exist
    - Requires EDITOR or ADMIN
    """
    return SavingsService(db).add_contribution(contribution_data, context)
