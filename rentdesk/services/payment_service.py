"""
Payment lifecycle: status refresh, confirmation, guarded edits and
generation of payment rows from a contract schedule.

Status refresh rules (run on a timer, see status_refresher.py):
  scheduled -> pending   on the due date
  scheduled -> overdue   once the due date has passed
  pending   -> overdue   once the due date has passed
  paid is final; rows with an unreadable due date are left alone.
"""
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from rentdesk.core.config import settings
from rentdesk.models.contract import Contract
from rentdesk.models.payment import Payment, PaymentStatus
from rentdesk.services.exceptions import PaymentSumMismatch
from rentdesk.services.occupancy_service import as_date
from rentdesk.services.reconciliation_service import normalize_date, parse_schedule

logger = logging.getLogger(__name__)

OPEN_STATUSES = (PaymentStatus.SCHEDULED.value, PaymentStatus.PENDING.value)


# ── Status refresh ────────────────────────────────────────────────────────────

def next_status(payment, today: Optional[date] = None) -> Optional[str]:
    """The status ``payment`` should move to, or None if it stays put."""
    today = today or date.today()
    if payment.status not in OPEN_STATUSES:
        return None

    due = as_date(payment.due_date)
    if due is None:
        return None

    if due < today:
        return PaymentStatus.OVERDUE.value
    if payment.status == PaymentStatus.SCHEDULED.value and due == today:
        return PaymentStatus.PENDING.value
    return None


def refresh_statuses(payments: Iterable, today: Optional[date] = None) -> List[Tuple[object, str]]:
    today = today or date.today()
    changes = []
    for payment in payments:
        new_status = next_status(payment, today)
        if new_status is not None:
            changes.append((payment, new_status))
    return changes


def apply_status_refresh(db: Session, user_id: Optional[uuid.UUID] = None, today: Optional[date] = None) -> int:
    """
    Persist status transitions for open payments.
    All users when ``user_id`` is None. Returns the number of rows changed.
    """
    query = db.query(Payment).filter(Payment.status.in_(OPEN_STATUSES))
    if user_id is not None:
        query = query.filter(Payment.user_id == user_id)

    changes = refresh_statuses(query.all(), today)
    if not changes:
        return 0

    try:
        for payment, new_status in changes:
            payment.status = new_status
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error(f"[status] Failed to persist {len(changes)} status change(s): {exc}", exc_info=True)
        raise

    logger.info(f"[status] Updated {len(changes)} payment status(es)")
    return len(changes)


# ── Single payment operations ─────────────────────────────────────────────────

def confirm_payment(db: Session, payment: Payment, today: Optional[date] = None) -> Payment:
    payment.status = PaymentStatus.PAID.value
    payment.paid_date = today or date.today()
    db.commit()
    db.refresh(payment)
    logger.info(f"[status] Payment {payment.id} confirmed as paid")
    return payment


def check_payment_sum(
    contract: Contract,
    payments: Iterable[Payment],
    payment_id: uuid.UUID,
    new_amount: float,
    tolerance: Optional[float] = None,
) -> float:
    """
    Sum of the contract's payments with ``payment_id`` set to ``new_amount``.
    Raises PaymentSumMismatch when it strays from the contract total.
    """
    tolerance = settings.PAYMENT_SUM_TOLERANCE if tolerance is None else tolerance
    total = sum(new_amount if p.id == payment_id else (p.amount or 0.0) for p in payments)
    if abs(total - contract.monthly_rent) > tolerance:
        raise PaymentSumMismatch(expected=contract.monthly_rent, actual=total)
    return total


def update_payment(
    db: Session,
    payment: Payment,
    changes: dict,
    tolerance: Optional[float] = None,
) -> Payment:
    """
    Apply ``changes`` to ``payment``. An amount change is validated against
    the contract total before anything is written.
    """
    new_amount = changes.get("amount")
    if new_amount is not None and new_amount != payment.amount:
        contract = payment.contract
        siblings = db.query(Payment).filter(Payment.contract_id == payment.contract_id).all()
        check_payment_sum(contract, siblings, payment.id, new_amount, tolerance)

    if "due_date" in changes and changes["due_date"]:
        changes["due_date"] = normalize_date(changes["due_date"]) or changes["due_date"]

    try:
        for key, value in changes.items():
            setattr(payment, key, value)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error(f"[payments] Failed to update payment {payment.id}: {exc}")
        raise

    db.refresh(payment)
    return payment


# ── Generation from a contract ────────────────────────────────────────────────

def generate_payments(contract: Contract, today: Optional[date] = None) -> List[Payment]:
    """
    Build (unsaved) payment rows for each slot of the contract schedule.

    Missing amounts get an even share of the contract total. Future slots
    start as "scheduled", the rest as "pending".
    """
    today = today or date.today()
    entries = parse_schedule(contract.payment_dates, contract.payment_amounts)
    if not entries:
        return []

    share = round(contract.monthly_rent / len(entries), 2)
    payments = []
    for entry in entries:
        due = as_date(entry.canonical)
        status = PaymentStatus.SCHEDULED if due is not None and due > today else PaymentStatus.PENDING
        payments.append(
            Payment(
                user_id=contract.user_id,
                contract_id=contract.id,
                amount=entry.amount if entry.amount is not None else share,
                currency=contract.currency,
                due_date=entry.canonical,
                status=status.value,
                payment_method=contract.payment_method,
                bank_name=contract.bank_name,
            )
        )

    _attach_check_numbers(contract, payments)
    return payments


def _attach_check_numbers(contract: Contract, payments: List[Payment]) -> None:
    numbers = [n.strip() for n in (contract.check_numbers or "").split(",")]
    for payment, number in zip(payments, numbers):
        if number:
            payment.check_number = number
