from typing import Any, Optional
from sqlalchemy import or_, cast, String
from sqlalchemy.orm import Session

from shop_finance.models.audit_log import AuditLog, AuditAction


class AuditLogRepository:
    """Repository for the append-only audit log"""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        table_name: str,
        action: AuditAction,
        row_id: Optional[str],
        actor_email: Optional[str],
        changes: Optional[dict[str, Any]] = None,
    ) -> AuditLog:
        """
        Append an entry without committing.

        The caller commits it in the same unit of work as the audited write.
        """
        entry = AuditLog(
            table_name=table_name,
            action=action,
            row_id=row_id,
            actor_email=actor_email,
            changes=changes or None,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def search(self, q: Optional[str] = None, limit: int = 300) -> list[AuditLog]:
        """Latest entries, optionally filtered by table, action or actor"""
        query = self.db.query(AuditLog)

        term = (q or "").strip()
        if term:
            pattern = f"%{term}%"
            query = query.filter(
                or_(
                    AuditLog.table_name.ilike(pattern),
                    cast(AuditLog.action, String).ilike(pattern),
                    AuditLog.actor_email.ilike(pattern),
                )
            )

        return query.order_by(AuditLog.created_at.desc()).limit(limit).all()
