from collections import OrderedDict
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from shop_finance.models.transaction import TransactionType
from shop_finance.repositories.transaction_repository import TransactionRepository
from shop_finance.schemas.report_schemas import (
    DashboardResponse,
    MonthlyReportResponse,
    MonthlyRow,
    MonthlyTotals,
)
from shop_finance.core.exceptions import InvalidInputException


class ReportService:
    """Read-only aggregations over transactions"""

    def __init__(self, db: Session):
        self.db = db
        self.transaction_repo = TransactionRepository(db)

    def monthly_profit(
        self, from_date: Optional[date] = None, to_date: Optional[date] = None
    ) -> MonthlyReportResponse:
        """
        Income, expenses and profit per calendar month.

        Savings contributions are neither income nor expense. Months with no
        income or expense do not appear.

        Args:
            from_date: Inclusive start (default: January 1st of this year)
            to_date: Inclusive end (default: today)

        Raises:
            InvalidInputException: If from_date is after to_date
        """
        today = date.today()
        from_date = from_date or date(today.year, 1, 1)
        to_date = to_date or today
        if from_date > to_date:
            raise InvalidInputException("from_date must not be after to_date")

        buckets: "OrderedDict[str, dict[str, float]]" = OrderedDict()
        for txn in self.transaction_repo.get_in_range(from_date, to_date):
            if txn.type == TransactionType.SAVINGS:
                continue
            month = txn.date.strftime("%Y-%m")
            bucket = buckets.setdefault(month, {"income": 0.0, "expenses": 0.0})
            if txn.type == TransactionType.INCOME:
                bucket["income"] += float(txn.amount)
            else:
                bucket["expenses"] += float(txn.amount)

        rows = [
            MonthlyRow(
                month=month,
                income=round(b["income"], 2),
                expenses=round(b["expenses"], 2),
                profit=round(b["income"] - b["expenses"], 2),
            )
            for month, b in buckets.items()
        ]

        income = round(sum(r.income for r in rows), 2)
        expenses = round(sum(r.expenses for r in rows), 2)
        profit = round(income - expenses, 2)
        totals = MonthlyTotals(
            income=income,
            expenses=expenses,
            profit=profit,
            average_profit=round(profit / (len(rows) or 1), 2),
        )

        return MonthlyReportResponse(
            from_date=from_date.isoformat(),
            to_date=to_date.isoformat(),
            rows=rows,
            totals=totals,
        )

    def dashboard(self, limit: int = 100) -> DashboardResponse:
        """Income, expense and savings totals over the latest transactions"""
        transactions = self.transaction_repo.search(limit=limit)

        totals = {t: 0.0 for t in TransactionType}
        for txn in transactions:
            totals[txn.type] += float(txn.amount)

        income = round(totals[TransactionType.INCOME], 2)
        expense = round(totals[TransactionType.EXPENSE], 2)
        return DashboardResponse(
            income=income,
            expense=expense,
            savings=round(totals[TransactionType.SAVINGS], 2),
            net=round(income - expense, 2),
            count=len(transactions),
        )
