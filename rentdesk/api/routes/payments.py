"""
Payment Routes
Handles payment rows, confirmation and the periodic status refresh
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from rentdesk.database import get_db
from rentdesk.core.deps import get_current_user_id, pagination
from rentdesk.models.contract import Contract
from rentdesk.models.payment import Payment, PaymentStatus
from rentdesk.schemas.payment import PaymentCreate, PaymentUpdate, PaymentResponse, StatusRefreshResponse
from rentdesk.services.exceptions import PaymentSumMismatch
from rentdesk.services.payment_service import apply_status_refresh, confirm_payment, update_payment
from rentdesk.services.reconciliation_service import normalize_date, sort_payments

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_payment(db: Session, payment_id: UUID, user_id: UUID) -> Payment:
    payment = db.query(Payment)\
        .filter(Payment.id == payment_id, Payment.user_id == user_id)\
        .first()
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


# ═══════════════════════════════════════════════════════════════════════
# PAYMENTS
# ═══════════════════════════════════════════════════════════════════════

@router.get("", response_model=List[PaymentResponse])
def list_payments(
    contract_id: Optional[UUID] = None,
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    page: dict = Depends(pagination),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Payments of the current user ordered by due date"""
    query = db.query(Payment).filter(Payment.user_id == user_id)
    if contract_id is not None:
        query = query.filter(Payment.contract_id == contract_id)
    if status_filter is not None:
        query = query.filter(Payment.status == status_filter.value)

    payments = sort_payments(query.all())
    return payments[page["skip"]:page["skip"] + page["limit"]]


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    payment_in: PaymentCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Record a payment against one of the user's contracts"""
    contract = db.query(Contract)\
        .filter(Contract.id == payment_in.contract_id, Contract.user_id == user_id)\
        .first()
    if not contract:
        raise HTTPException(status_code=404, detail="Contract not found")

    data = payment_in.model_dump()
    data["currency"] = data["currency"] or contract.currency
    data["due_date"] = normalize_date(data["due_date"]) or data["due_date"]

    payment = Payment(**data, user_id=user_id)
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info(f"Payment {payment.id} recorded for contract {contract.id}")
    return payment


@router.post("/refresh-statuses", response_model=StatusRefreshResponse)
def refresh_payment_statuses(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Run the status refresh now for the current user's payments"""
    return StatusRefreshResponse(updated=apply_status_refresh(db, user_id))


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return _get_payment(db, payment_id, user_id)


@router.put("/{payment_id}", response_model=PaymentResponse)
def edit_payment(
    payment_id: UUID,
    payment_update: PaymentUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Edit a payment.
    A new amount must keep the contract's payments adding up to its total (422 otherwise).
    """
    payment = _get_payment(db, payment_id, user_id)
    try:
        return update_payment(db, payment, payment_update.model_dump(exclude_unset=True))
    except PaymentSumMismatch as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e), "expected": e.expected, "actual": e.actual},
        )


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(
    payment_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    payment = _get_payment(db, payment_id, user_id)
    db.delete(payment)
    db.commit()
    return None


@router.post("/{payment_id}/confirm", response_model=PaymentResponse)
def confirm(
    payment_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Mark a payment paid today"""
    return confirm_payment(db, _get_payment(db, payment_id, user_id))
