from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shop_finance.database import get_db
from shop_finance.dependencies import require_capability
from shop_finance.services.capability_resolver import SessionContext
from shop_finance.services.report_service import ReportService
from shop_finance.schemas.report_schemas import DashboardResponse, MonthlyReportResponse

router = APIRouter()


@router.get("/monthly", response_model=MonthlyReportResponse)
def monthly_report(
    from_date: Optional[date] = Query(None, description="Start date (inclusive)"),
    to_date: Optional[date] = Query(None, description="End date (inclusive)"),
    context: SessionContext = Depends(require_capability("read")),
    db: Session = Depends(get_db),
):
    """Monthly income, expenses and profit. Defaults to year-to-date."""
    return ReportService(db).monthly_profit(from_date, to_date)


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    context: SessionContext = Depends(require_capability("read")),
    db: Session = Depends(get_db),
):
    """Totals over the latest 100 transactions."""
    return ReportService(db).dashboard()
