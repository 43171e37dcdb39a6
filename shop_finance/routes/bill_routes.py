from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shop_finance.database import get_db
from shop_finance.dependencies import require_capability
from shop_finance.services.capability_resolver import SessionContext
from shop_finance.services.bill_service import BillService
from shop_finance.schemas.bill_schemas import BillCreate, BillResponse

router = APIRouter()


@router.get("", response_model=list[BillResponse])
def list_bills(
    context: SessionContext = Depends(require_capability("read")),
    db: Session = Depends(get_db),
):
    """List bills, soonest due first. Any role."""
    return BillService(db).list_bills()


@router.post("", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
def create_bill(
    bill_data: BillCreate,
    context: SessionContext = Depends(require_capability("write")),
    db: Session = Depends(get_db),
):
    """
    Create an unpaid bill.

    - recur_day is kept only for recurring bills
    - Requires EDITOR or ADMIN
    """
    return BillService(db).create_bill(bill_data, context)


@router.post("/{bill_id}/toggle-paid", response_model=BillResponse)
def toggle_bill_paid(
    bill_id: str,
    context: SessionContext = Depends(require_capability("write")),
    db: Session = Depends(get_db),
):
    """
    Mark a bill paid or unpaid.

    - Paid: books an expense transaction dated today and links it
    - Unpaid: deletes the linked expense
    - Requires EDITOR or ADMIN
    """
    return BillService(db).toggle_paid(bill_id, context)


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bill(
    bill_id: str,
    context: SessionContext = Depends(require_capability("delete")),
    db: Session = Depends(get_db),
):
    """Delete a bill and its linked expense. Requires EDITOR or ADMIN."""
    BillService(db).delete_bill(bill_id, context)
