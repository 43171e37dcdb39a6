from sqlalchemy.orm import Session
from shop_finance.models.savings import SavingsContribution


class SavingsContributionRepository:
    """Repository for SavingsContribution model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self, goal_id: str | None = None) -> list[SavingsContribution]:
        """Contributions, most recent date first, optionally for one goal"""
        query = self.db.query(SavingsContribution)
        if goal_id is not None:
            query = query.filter(SavingsContribution.goal_id == goal_id)
        return query.order_by(
            SavingsContribution.date.desc(), SavingsContribution.created_at.desc()
        ).all()

    def create_no_commit(self, contribution: SavingsContribution) -> SavingsContribution:
        self.db.add(contribution)
        self.db.flush()
        return contribution
