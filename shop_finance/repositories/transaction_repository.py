from datetime import date
from typing import Optional
from sqlalchemy import or_, cast, String
from sqlalchemy.orm import Session

from shop_finance.models.transaction import Transaction


class TransactionRepository:
    """Repository for Transaction data access"""

    def __init__(self, db: Session):
        self.db = db

    def create_no_commit(self, transaction: Transaction) -> Transaction:
        """Create transaction without committing (for atomic ops)"""
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID"""
        return self.db.query(Transaction).filter(Transaction.id == transaction_id).first()

    def search(self, q: Optional[str] = None, limit: int = 200) -> list[Transaction]:
        """
        Latest transactions, optionally filtered by a search term.

        Args:
            q: Case-insensitive match against category, note or type
            limit: Maximum number of results

        Returns:
            Transactions, newest first
        """
        query = self.db.query(Transaction)

        term = (q or "").strip()
        if term:
            pattern = f"%{term}%"
            query = query.filter(
                or_(
                    Transaction.category.ilike(pattern),
                    Transaction.note.ilike(pattern),
                    cast(Transaction.type, String).ilike(pattern),
                )
            )

        return (
            query.order_by(Transaction.date.desc(), Transaction.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_in_range(self, start_date: date, end_date: date) -> list[Transaction]:
        """All transactions with start_date <= date <= end_date, oldest first"""
        return (
            self.db.query(Transaction)
            .filter(Transaction.date >= start_date, Transaction.date <= end_date)
            .order_by(Transaction.date.asc())
            .all()
        )

    def delete_no_commit(self, transaction: Transaction) -> None:
        """Delete transaction without committing"""
        self.db.delete(transaction)
        self.db.flush()
