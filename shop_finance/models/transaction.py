import uuid
from datetime import date
from enum import Enum as PyEnum
from sqlalchemy import String, Numeric, Date, Text, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column
from shop_finance.models.base import Base, TimestampMixin


class TransactionType(str, PyEnum):
    """Transaction type enumeration"""

    INCOME = "income"
    EXPENSE = "expense"
    SAVINGS = "savings"


class Transaction(Base, TimestampMixin):
    """
    Shop income, expenses and savings contributions.

    Amount is always positive; the type says which way the money went.
    """

    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("ix_transactions_type_date", "type", "date"),)
