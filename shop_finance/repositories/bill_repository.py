from sqlalchemy.orm import Session
from shop_finance.models.bill import Bill


class BillRepository:
    """Repository for Bill model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> list[Bill]:
        """All bills, soonest due first"""
        return self.db.query(Bill).order_by(Bill.due_date.asc()).all()

    def get_by_id(self, bill_id: str) -> Bill | None:
        return self.db.query(Bill).filter(Bill.id == bill_id).first()

    def create_no_commit(self, bill: Bill) -> Bill:
        self.db.add(bill)
        self.db.flush()
        return bill

    def delete_no_commit(self, bill: Bill) -> None:
        self.db.delete(bill)
        self.db.flush()
