from typing import Optional
from sqlalchemy.orm import Session

from shop_finance.models.transaction import Transaction
from shop_finance.models.audit_log import AuditAction
from shop_finance.repositories.transaction_repository import TransactionRepository
from shop_finance.repositories.audit_log_repository import AuditLogRepository
from shop_finance.schemas.transaction_schemas import TransactionCreate, TransactionAmountUpdate
from shop_finance.services.capability_resolver import SessionContext
from shop_finance.core.exceptions import NotFoundException


def transaction_snapshot(transaction: Transaction) -> dict:
    """Plain-JSON view of a transaction for audit entries"""
    return {
        "date": transaction.date.isoformat(),
        "type": transaction.type.value,
        "category": transaction.category,
        "amount": float(transaction.amount),
        "note": transaction.note,
    }


class TransactionService:
    """Service layer for transaction business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.transaction_repo = TransactionRepository(db)
        self.audit_repo = AuditLogRepository(db)

    def create_transaction(
        self, transaction_data: TransactionCreate, context: SessionContext
    ) -> Transaction:
        """
        Create a new transaction.

        Args:
            transaction_data: Transaction creation data
            context: Session of the acting user (for the audit trail)

        Returns:
            Created transaction
        """
        transaction = Transaction(
            date=transaction_data.date,
            type=transaction_data.type,
            category=transaction_data.category,
            amount=transaction_data.amount,
            note=transaction_data.note,
        )
        transaction = self.transaction_repo.create_no_commit(transaction)
        self._audit(AuditAction.INSERT, transaction, context, new=transaction_snapshot(transaction))

        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def get_transactions(self, q: Optional[str] = None, limit: int = 200) -> list[Transaction]:
        """
        Latest transactions, newest first.

        Args:
            q: Optional search over category, note and type
            limit: Max results to return
        """
        return self.transaction_repo.search(q=q, limit=limit)

    def update_amount(
        self, transaction_id: str, update: TransactionAmountUpdate, context: SessionContext
    ) -> Transaction:
        """
        Change a transaction's amount.

        Raises:
            NotFoundException: If transaction doesn't exist
        """
        transaction = self.transaction_repo.get_by_id(transaction_id)
        if not transaction:
            raise NotFoundException(f"Transaction {transaction_id} not found")

        old_amount = float(transaction.amount)
        transaction.amount = update.amount
        if old_amount != update.amount:
            self.audit_repo.record(
                "transactions",
                AuditAction.UPDATE,
                transaction.id,
                context.actor_email,
                {"amount": {"old": old_amount, "new": update.amount}},
            )

        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def delete_transaction(self, transaction_id: str, context: SessionContext) -> None:
        """
        Delete a transaction.

        Raises:
            NotFoundException: If transaction doesn't exist
        """
        transaction = self.transaction_repo.get_by_id(transaction_id)
        if not transaction:
            raise NotFoundException(f"Transaction {transaction_id} not found")

        self.delete_no_commit(transaction, context)
        self.db.commit()

    def delete_no_commit(self, transaction: Transaction, context: SessionContext) -> None:
        """Delete and audit without committing (used when deleting a paid bill)"""
        old = transaction_snapshot(transaction)
        self.transaction_repo.delete_no_commit(transaction)
        self._audit(AuditAction.DELETE, transaction, context, old=old)

    def _audit(
        self,
        action: AuditAction,
        transaction: Transaction,
        context: SessionContext,
        old: Optional[dict] = None,
        new: Optional[dict] = None,
    ) -> None:
        changes = {}
        for field in (new or old or {}):
            entry = {}
            if old is not None:
                entry["old"] = old[field]
            if new is not None:
                entry["new"] = new[field]
            changes[field] = entry
        self.audit_repo.record(
            "transactions", action, transaction.id, context.actor_email, changes
        )
