"""
Contract lifecycle: create, edit, terminate, renew, delete.

Multi-row changes (contract + unit flag + payment rows) run inside a single
session transaction: either everything is committed or the session is
rolled back.
"""
from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from rentdesk.models.client import Client
from rentdesk.models.contract import Contract, ContractStatus
from rentdesk.models.payment import Payment, PaymentStatus
from rentdesk.models.property import Property
from rentdesk.schemas.contract import ContractCreate
from rentdesk.services.exceptions import InvalidContractDates, NotFound, ReservationRejected
from rentdesk.services.occupancy_service import (
    UNIT_NOT_FOUND,
    check_reservation,
    is_contract_active,
    release_unit,
    sync_unit_flags,
)
from rentdesk.services.payment_service import OPEN_STATUSES, generate_payments

logger = logging.getLogger(__name__)


def list_contracts(
    db: Session,
    user_id: uuid.UUID,
    status_filter: Optional[str] = None,
    expiring_days: int = 30,
    today: Optional[date] = None,
) -> List[Contract]:
    """
    Contracts for ``user_id``, newest first.

    status_filter: active | expired | terminated | expiring (active, ends
    within ``expiring_days``).
    """
    today = today or date.today()
    contracts = (
        db.query(Contract)
        .filter(Contract.user_id == user_id)
        .order_by(Contract.created_at.desc())
        .all()
    )
    if status_filter == "active":
        return [c for c in contracts if is_contract_active(c, today)]
    if status_filter == "expired":
        return [
            c for c in contracts
            if c.status != ContractStatus.TERMINATED.value and not is_contract_active(c, today)
        ]
    if status_filter == "terminated":
        return [c for c in contracts if c.status == ContractStatus.TERMINATED.value]
    if status_filter == "expiring":
        horizon = today + timedelta(days=expiring_days)
        return [
            c for c in contracts
            if c.status != ContractStatus.TERMINATED.value and today <= c.end_date <= horizon
        ]
    return contracts


def create_contract(
    db: Session,
    user_id: uuid.UUID,
    data: ContractCreate,
    today: Optional[date] = None,
) -> Contract:
    """
    Create a contract, its payment rows and mark the unit taken.

    The reservation guard runs first; a missing unit record does not block
    the contract, every other rejection raises ReservationRejected.
    """
    today = today or date.today()

    client = db.query(Client).filter(Client.id == data.client_id, Client.user_id == user_id).first()
    if client is None:
        raise NotFound("Client", data.client_id)

    if data.property_id is not None:
        prop = db.query(Property).filter(Property.id == data.property_id, Property.user_id == user_id).first()
        if prop is None:
            raise NotFound("Property", data.property_id)

    unit = None
    if data.unit_number:
        result, unit = check_reservation(
            db, user_id, data.property_id, data.unit_number, data.client_id,
            override=data.override_reservation, today=today,
        )
        if not result.ok and result.reason != UNIT_NOT_FOUND:
            raise ReservationRejected(result)

    fields = data.model_dump(exclude={"generate_payments", "override_reservation"})
    contract = Contract(id=uuid.uuid4(), user_id=user_id, status=ContractStatus.ACTIVE.value, **fields)

    try:
        db.add(contract)
        if data.generate_payments:
            for payment in generate_payments(contract, today):
                db.add(payment)
        if unit is not None and contract.end_date >= today:
            unit.is_available = False
            unit.rented_by = contract.client_id
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error(f"Failed to create contract for client {data.client_id}: {exc}")
        raise

    db.refresh(contract)
    logger.info(f"Created contract {contract.id} (unit {contract.unit_number}) for user {user_id}")
    return contract


def _guard_unit(db: Session, contract: Contract, unit_number: str, today: date) -> None:
    result, _ = check_reservation(
        db, contract.user_id, contract.property_id, unit_number, contract.client_id,
        today=today, exclude_contract_id=contract.id,
    )
    if not result.ok and result.reason != UNIT_NOT_FOUND:
        raise ReservationRejected(result)


def update_contract(
    db: Session,
    contract: Contract,
    changes: dict,
    today: Optional[date] = None,
) -> Contract:
    """
    Apply field changes. Payment rows are not regenerated.

    Moving the contract to another unit, or extending an ended contract,
    goes through the reservation guard first. The unit left behind is freed
    and the unit flags are synced in the same commit.
    """
    today = today or date.today()
    start = changes.get("start_date") or contract.start_date
    end = changes.get("end_date") or contract.end_date
    if end <= start:
        raise InvalidContractDates("end_date must be after start_date")

    old_unit = contract.unit_number
    new_unit = changes.get("unit_number", old_unit)
    moving = new_unit != old_unit
    was_active = is_contract_active(contract, today)
    will_be_active = contract.status != ContractStatus.TERMINATED.value and end >= today

    if new_unit and will_be_active and (moving or not was_active):
        _guard_unit(db, contract, new_unit, today)

    try:
        if moving and was_active:
            release_unit(db, contract.user_id, contract.property_id, old_unit, commit=False)
        for key, value in changes.items():
            setattr(contract, key, value)
        db.flush()
        sync_unit_flags(db, contract.user_id, contract.property_id, today)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error(f"Failed to update contract {contract.id}: {exc}")
        raise

    db.refresh(contract)
    if moving:
        logger.info(f"Moved contract {contract.id} from unit {old_unit} to {new_unit}")
    return contract


def terminate_contract(db: Session, contract: Contract, today: Optional[date] = None) -> Contract:
    """
    End a contract now: mark it terminated, free the unit and flag every
    open payment as overdue. All in one commit.
    """
    today = today or date.today()
    try:
        contract.status = ContractStatus.TERMINATED.value
        contract.terminated_date = today

        release_unit(db, contract.user_id, contract.property_id, contract.unit_number, commit=False)

        open_payments = (
            db.query(Payment)
            .filter(Payment.contract_id == contract.id, Payment.status.in_(OPEN_STATUSES))
            .all()
        )
        for payment in open_payments:
            payment.status = PaymentStatus.OVERDUE.value

        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error(f"Failed to terminate contract {contract.id}: {exc}")
        raise

    db.refresh(contract)
    logger.info(f"Terminated contract {contract.id}; {len(open_payments)} open payment(s) marked overdue")
    return contract


def renew_contract(db: Session, contract: Contract, new_end_date: date, today: Optional[date] = None) -> Contract:
    today = today or date.today()
    if new_end_date <= contract.start_date:
        raise InvalidContractDates("end_date must be after start_date")

    reactivating = (
        contract.status != ContractStatus.TERMINATED.value
        and not is_contract_active(contract, today)
        and new_end_date >= today
    )
    if contract.unit_number and reactivating:
        _guard_unit(db, contract, contract.unit_number, today)

    try:
        contract.end_date = new_end_date
        db.flush()
        sync_unit_flags(db, contract.user_id, contract.property_id, today)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error(f"Failed to renew contract {contract.id}: {exc}")
        raise

    db.refresh(contract)
    logger.info(f"Renewed contract {contract.id} until {new_end_date}")
    return contract


def delete_contract(db: Session, contract: Contract) -> None:
    """Delete a contract with its payments and free its unit."""
    contract_id = contract.id
    try:
        release_unit(db, contract.user_id, contract.property_id, contract.unit_number, commit=False)
        db.delete(contract)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error(f"Failed to delete contract {contract_id}: {exc}")
        raise
    logger.info(f"Deleted contract {contract_id}")
