from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from shop_finance.database import get_db
from shop_finance.dependencies import require_capability
from shop_finance.services.capability_resolver import SessionContext
from shop_finance.services.transaction_service import TransactionService
from shop_finance.schemas.transaction_schemas import (
    TransactionCreate,
    TransactionAmountUpdate,
    TransactionResponse,
    TransactionListResponse,
)

router = APIRouter()


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction_data: TransactionCreate,
    context: SessionContext = Depends(require_capability("write")),
    db: Session = Depends(get_db),
):
    """
    Record income, an expense or a savings contribution.

    - Amount must be positive
    - Requires EDITOR or ADMIN
    """
    service = TransactionService(db)
    return service.create_transaction(transaction_data, context)


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    q: Optional[str] = Query(None, description="Search category, note or type"),
    limit: int = Query(200, ge=1, le=1000, description="Max results"),
    context: SessionContext = Depends(require_capability("read")),
    db: Session = Depends(get_db),
):
    """List latest transactions, newest first. Any role."""
    service = TransactionService(db)
    transactions = service.get_transactions(q=q, limit=limit)
    return {"transactions": transactions, "total": len(transactions)}


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def update_transaction_amount(
    transaction_id: str,
    update: TransactionAmountUpdate,
    context: SessionContext = Depends(require_capability("write")),
    db: Session = Depends(get_db),
):
    """Change a transaction's amount (must stay positive). Requires EDITOR or ADMIN."""
    service = TransactionService(db)
    return service.update_amount(transaction_id, update, context)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: str,
    context: SessionContext = Depends(require_capability("delete")),
    db: Session = Depends(get_db),
):
    """Delete a transaction. Requires EDITOR or ADMIN."""
    service = TransactionService(db)
    service.delete_transaction(transaction_id, context)
