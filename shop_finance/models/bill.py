import uuid
from datetime import date, datetime
from sqlalchemy import String, Numeric, Date, DateTime, Boolean, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from shop_finance.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from shop_finance.models.transaction import Transaction


class Bill(Base, TimestampMixin):
    """
    Payable bills (electricity, rent, ...).

    Paying a bill books a linked expense transaction; unpaying or deleting
    the bill removes that transaction again.
    """

    __tablename__ = "bills"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recur_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    transaction_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("transactions.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    transaction: Mapped["Transaction | None"] = relationship("Transaction")
