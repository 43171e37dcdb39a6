from typing import Optional
from sqlalchemy.orm import Session

from shop_finance.models.audit_log import AuditLog
from shop_finance.repositories.audit_log_repository import AuditLogRepository


class AuditLogService:
    """Read access to the audit trail (admins only, enforced by the route)"""

    def __init__(self, db: Session):
        self.db = db
        self.audit_repo = AuditLogRepository(db)

    def list_entries(self, q: Optional[str] = None, limit: int = 300) -> list[AuditLog]:
        return self.audit_repo.search(q=q, limit=limit)
