from sqlalchemy.orm import Session

from shop_finance.models.savings import SavingsContribution, SavingsGoal
from shop_finance.models.transaction import Transaction, TransactionType
from shop_finance.models.audit_log import AuditAction
from shop_finance.repositories.savings_goal_repository import SavingsGoalRepository
from shop_finance.repositories.savings_contribution_repository import SavingsContributionRepository
from shop_finance.repositories.transaction_repository import TransactionRepository
from shop_finance.repositories.audit_log_repository import AuditLogRepository
from shop_finance.schemas.savings_schemas import (
    SavingsContributionCreate,
    SavingsGoalCreate,
    SavingsGoalResponse,
)
from shop_finance.services.capability_resolver import SessionContext
from shop_finance.services.transaction_service import transaction_snapshot
from shop_finance.core.exceptions import NotFoundException


class SavingsService:
    """Service layer for savings goals and contributions"""

    def __init__(self, db: Session):
        self.db = db
        self.goal_repo = SavingsGoalRepository(db)
        self.contribution_repo = SavingsContributionRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.audit_repo = AuditLogRepository(db)

    def list_goals(self) -> list[SavingsGoalResponse]:
        """Goals, newest first, each with its saved total"""
        totals = self.goal_repo.saved_totals()
        return [
            SavingsGoalResponse.from_goal(goal, totals.get(goal.id, 0.0))
            for goal in self.goal_repo.get_all()
        ]

    def create_goal(self, goal_data: SavingsGoalCreate, context: SessionContext) -> SavingsGoalResponse:
        goal = self.goal_repo.create_no_commit(
            SavingsGoal(name=goal_data.name, target=goal_data.target)
        )
        self.audit_repo.record(
            "savings_goals",
            AuditAction.INSERT,
            goal.id,
            context.actor_email,
            {"name": {"new": goal.name}, "target": {"new": float(goal.target)}},
        )
        self.db.commit()
        self.db.refresh(goal)
        return SavingsGoalResponse.from_goal(goal, 0.0)

    def list_contributions(self, goal_id: str | None = None) -> list[SavingsContribution]:
        return self.contribution_repo.get_all(goal_id)

    def add_contribution(
        self, contribution_data: SavingsContributionCreate, context: SessionContext
    ) -> SavingsContribution:
        """
        Put money towards a goal.

        Books a `savings` transaction categorised under the goal's name and
        links it to the contribution; both rows land in one commit.

        Raises:
            NotFoundException: If the goal doesn't exist
        """
        goal = self.goal_repo.get_by_id(contribution_data.goal_id)
        if goal is None:
            raise NotFoundException(f"Savings goal {contribution_data.goal_id} not found")

        note = contribution_data.note or None
        booked = self.transaction_repo.create_no_commit(
            Transaction(
                date=contribution_data.date,
                type=TransactionType.SAVINGS,
                category=goal.name,
                amount=contribution_data.amount,
                note=f"Contribution: {note}" if note else "Savings contribution",
            )
        )
        self.audit_repo.record(
            "transactions",
            AuditAction.INSERT,
            booked.id,
            context.actor_email,
            {k: {"new": v} for k, v in transaction_snapshot(booked).items()},
        )

        contribution = self.contribution_repo.create_no_commit(
            SavingsContribution(
                goal_id=goal.id,
                date=contribution_data.date,
                amount=contribution_data.amount,
                note=note,
                transaction_id=booked.id,
            )
        )
        self.audit_repo.record(
            "savings_contributions",
            AuditAction.INSERT,
            contribution.id,
            context.actor_email,
            {
                "goal_id": {"new": goal.id},
                "date": {"new": contribution.date.isoformat()},
                "amount": {"new": float(contribution.amount)},
            },
        )

        self.db.commit()
        self.db.refresh(contribution)
        return contribution
