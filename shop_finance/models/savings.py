import uuid
from datetime import date
from sqlalchemy import String, Numeric, Date, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from shop_finance.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from shop_finance.models.transaction import Transaction


class SavingsGoal(Base, TimestampMixin):
    """Named savings target (emergency fund, new equipment, ...)"""

    __tablename__ = "savings_goals"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    target: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )

    # Relationships
    contributions: Mapped[list["SavingsContribution"]] = relationship(
        "SavingsContribution", back_populates="goal", cascade="all, delete-orphan"
    )


class SavingsContribution(Base, TimestampMixin):
    """
    Money put towards a goal.

    Each contribution also books a `savings` transaction so the ledger
    and the goal totals agree.
    """

    __tablename__ = "savings_contributions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    goal_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("savings_goals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    transaction_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("transactions.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    goal: Mapped["SavingsGoal"] = relationship("SavingsGoal", back_populates="contributions")
    transaction: Mapped["Transaction | None"] = relationship("Transaction")
