from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shop_finance.database import get_db
from shop_finance.dependencies import require_capability
from shop_finance.services.capability_resolver import SessionContext
from shop_finance.services.audit_log_service import AuditLogService
from shop_finance.schemas.report_schemas import AuditLogResponse

router = APIRouter()


@router.get("", response_model=list[AuditLogResponse])
def list_audit_logs(
    q: Optional[str] = Query(None, description="Search table, action or actor"),
    limit: int = Query(300, ge=1, le=1000),
    context: SessionContext = Depends(require_capability("provision")),
    db: Session = Depends(get_db),
):
    """Latest audit entries, newest first. **Requires ADMIN**."""
    return AuditLogService(db).list_entries(q=q, limit=limit)
