"""Append-only audit trail of writes made through the API."""

import uuid
from enum import Enum as PyEnum
from sqlalchemy import String, Enum, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
from shop_finance.models.base import Base, TimestampMixin


class AuditAction(str, PyEnum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditLog(Base, TimestampMixin):
    """
    One row per write.

    changes maps field name to {"old": ..., "new": ...}; INSERT rows only
    carry "new", DELETE rows only "old".
    """

    __tablename__ = "audit_log"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    table_name: Mapped[str] = mapped_column(String(100), nullable=False)
    action: Mapped[AuditAction] = mapped_column(
        Enum(AuditAction, native_enum=False), nullable=False
    )
    row_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    actor_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    changes: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (Index("ix_audit_log_created_at", "created_at"),)
