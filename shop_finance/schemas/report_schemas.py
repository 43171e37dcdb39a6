from datetime import datetime
from pydantic import BaseModel
from typing import Any, Optional

from shop_finance.models.audit_log import AuditAction


class MonthlyRow(BaseModel):
    month: str  # YYYY-MM
    income: float
    expenses: float
    profit: float


class MonthlyTotals(BaseModel):
    income: float
    expenses: float
    profit: float
    average_profit: float


class MonthlyReportResponse(BaseModel):
    from_date: str
    to_date: str
    rows: list[MonthlyRow]
    totals: MonthlyTotals


class DashboardResponse(BaseModel):
    """Totals over the latest transactions"""

    income: float
    expense: float
    savings: float
    net: float
    count: int


class AuditLogResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    created_at: datetime
    table_name: str
    action: AuditAction
    row_id: Optional[str]
    actor_email: Optional[str]
    changes: Optional[dict[str, Any]]
