from datetime import date, datetime, UTC
from sqlalchemy.orm import Session

from shop_finance.models.bill import Bill
from shop_finance.models.transaction import Transaction, TransactionType
from shop_finance.models.audit_log import AuditAction
from shop_finance.repositories.bill_repository import BillRepository
from shop_finance.repositories.transaction_repository import TransactionRepository
from shop_finance.repositories.audit_log_repository import AuditLogRepository
from shop_finance.schemas.bill_schemas import BillCreate
from shop_finance.services.capability_resolver import SessionContext
from shop_finance.services.transaction_service import TransactionService, transaction_snapshot
from shop_finance.core.exceptions import NotFoundException


class BillService:
    """Service layer for bills and their linked expense transactions"""

    def __init__(self, db: Session):
        self.db = db
        self.bill_repo = BillRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.transaction_service = TransactionService(db)
        self.audit_repo = AuditLogRepository(db)

    def list_bills(self) -> list[Bill]:
        return self.bill_repo.get_all()

    def create_bill(self, bill_data: BillCreate, context: SessionContext) -> Bill:
        """Create an unpaid bill"""
        bill = Bill(
            due_date=bill_data.due_date,
            category=bill_data.category,
            amount=bill_data.amount,
            recurring=bill_data.recurring,
            recur_day=bill_data.recur_day,
            paid=False,
        )
        bill = self.bill_repo.create_no_commit(bill)
        self.audit_repo.record(
            "bills",
            AuditAction.INSERT,
            bill.id,
            context.actor_email,
            {
                "due_date": {"new": bill.due_date.isoformat()},
                "category": {"new": bill.category},
                "amount": {"new": float(bill.amount)},
            },
        )
        self.db.commit()
        self.db.refresh(bill)
        return bill

    def toggle_paid(self, bill_id: str, context: SessionContext) -> Bill:
        """
        Flip a bill between paid and unpaid.

        Paying books an expense dated today (unless one is already linked);
        unpaying deletes the linked expense. Both happen in one commit.

        Raises:
            NotFoundException: If bill doesn't exist
        """
        bill = self._get(bill_id)

        if not bill.paid:
            if bill.transaction_id is None:
                expense = Transaction(
                    date=date.today(),
                    type=TransactionType.EXPENSE,
                    category=bill.category,
                    amount=bill.amount,
                    note=f"Bill paid: {bill.category}",
                )
                expense = self.transaction_repo.create_no_commit(expense)
                self.audit_repo.record(
                    "transactions",
                    AuditAction.INSERT,
                    expense.id,
                    context.actor_email,
                    {k: {"new": v} for k, v in transaction_snapshot(expense).items()},
                )
                bill.transaction_id = expense.id
            bill.paid = True
            bill.paid_at = datetime.now(UTC)
            changes = {"paid": {"old": False, "new": True}}
        else:
            if bill.transaction_id is not None:
                linked = self.transaction_repo.get_by_id(bill.transaction_id)
                bill.transaction_id = None
                if linked is not None:
                    self.transaction_service.delete_no_commit(linked, context)
            bill.paid = False
            bill.paid_at = None
            changes = {"paid": {"old": True, "new": False}}

        self.audit_repo.record("bills", AuditAction.UPDATE, bill.id, context.actor_email, changes)
        self.db.commit()
        self.db.refresh(bill)
        return bill

    def delete_bill(self, bill_id: str, context: SessionContext) -> None:
        """
        Delete a bill together with its linked expense, if any.

        Raises:
            NotFoundException: If bill doesn't exist
        """
        bill = self._get(bill_id)

        linked = (
            self.transaction_repo.get_by_id(bill.transaction_id)
            if bill.transaction_id is not None
            else None
        )

        self.bill_repo.delete_no_commit(bill)
        self.audit_repo.record(
            "bills",
            AuditAction.DELETE,
            bill.id,
            context.actor_email,
            {"category": {"old": bill.category}, "amount": {"old": float(bill.amount)}},
        )
        if linked is not None:
            self.transaction_service.delete_no_commit(linked, context)

        self.db.commit()

    def _get(self, bill_id: str) -> Bill:
        bill = self.bill_repo.get_by_id(bill_id)
        if not bill:
            raise NotFoundException(f"Bill {bill_id} not found")
        return bill
