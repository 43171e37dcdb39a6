from sqlalchemy import func
from sqlalchemy.orm import Session
from shop_finance.models.savings import SavingsContribution, SavingsGoal


class SavingsGoalRepository:
    """Repository for SavingsGoal model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> list[SavingsGoal]:
        """All goals, newest first"""
        return self.db.query(SavingsGoal).order_by(SavingsGoal.created_at.desc()).all()

    def get_by_id(self, goal_id: str) -> SavingsGoal | None:
        return self.db.query(SavingsGoal).filter(SavingsGoal.id == goal_id).first()

    def saved_totals(self) -> dict[str, float]:
        """Sum of contributions per goal id; goals without any are absent"""
        rows = (
            self.db.query(SavingsContribution.goal_id, func.sum(SavingsContribution.amount))
            .group_by(SavingsContribution.goal_id)
            .all()
        )
        return {goal_id: float(total or 0) for goal_id, total in rows}

    def create_no_commit(self, goal: SavingsGoal) -> SavingsGoal:
        self.db.add(goal)
        self.db.flush()
        return goal
