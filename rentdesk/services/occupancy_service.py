"""
Unit Occupancy & Reservation Guard

Occupancy is derived, never read from a stored column:
  a unit is occupied iff some contract on the same (property_id, unit_number)
  is not terminated and its end_date is today or later.

The stored ``Unit.is_available`` flag is a manual "reserved without
contract" marker. It is only consulted when no active contract exists and
never overrides a contract-derived "occupied". A flag still naming the
client of a contract that has since ended is stale and reads as available.

The reservation guard is advisory: check and commit are not locked, so two
concurrent sessions can both pass the check before either commits.
"""
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from rentdesk.models.contract import Contract, ContractStatus
from rentdesk.models.property import Unit
from rentdesk.schemas.property import Occupancy, ReservationResult
from rentdesk.services.reconciliation_service import normalize_date

logger = logging.getLogger(__name__)

DUPLICATE_RESERVATION = "duplicate_reservation"
CONFLICTING_RESERVATION = "conflicting_reservation"
UNIT_UNAVAILABLE = "unit_unavailable"
UNIT_NOT_FOUND = "unit_not_found"


# ── Derivation (pure) ─────────────────────────────────────────────────────────

def as_date(value) -> Optional[date]:
    """Coerce a date, datetime or date string to a calendar date (midnight)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    iso = normalize_date(str(value)[:10])
    if not iso:
        return None
    try:
        return date.fromisoformat(iso)
    except ValueError:
        return None


def is_contract_active(contract, today: Optional[date] = None) -> bool:
    """Not terminated and not yet past its end date."""
    today = today or date.today()
    if contract.status == ContractStatus.TERMINATED.value:
        return False
    end = as_date(contract.end_date)
    return end is not None and end >= today


def find_active_contract(
    contracts: Iterable,
    property_id,
    unit_number: str,
    today: Optional[date] = None,
    client_id=None,
):
    """First active contract on the unit in iteration order, or None."""
    today = today or date.today()
    for contract in contracts:
        if contract.property_id != property_id or contract.unit_number != unit_number:
            continue
        if client_id is not None and contract.client_id != client_id:
            continue
        if is_contract_active(contract, today):
            return contract
    return None


def is_stale_flag(unit, contracts: Iterable, today: Optional[date] = None) -> bool:
    """The unit is flagged for a client whose contract on it has ended."""
    if unit is None or unit.is_available or unit.rented_by is None:
        return False
    held = [
        c for c in contracts
        if c.property_id == unit.property_id
        and c.unit_number == unit.unit_number
        and c.client_id == unit.rented_by
    ]
    return bool(held) and not any(is_contract_active(c, today) for c in held)


def derive_occupancy(
    contracts: Iterable,
    property_id,
    unit_number: str,
    today: Optional[date] = None,
    unit=None,
) -> Occupancy:
    contracts = list(contracts)
    contract = find_active_contract(contracts, property_id, unit_number, today)
    if contract is not None:
        return Occupancy(
            occupied=True,
            available=False,
            source="contract",
            contract_id=contract.id,
            client_id=contract.client_id,
        )

    if unit is not None and not unit.is_available and not is_stale_flag(unit, contracts, today):
        return Occupancy(
            occupied=False,
            reserved=True,
            available=False,
            source="manual_flag",
            client_id=unit.rented_by,
        )

    return Occupancy(occupied=False, available=True, source="none")


def property_occupancy(
    units: Iterable,
    contracts: Iterable,
    today: Optional[date] = None,
) -> Tuple[List[Tuple[object, Occupancy]], dict]:
    """Per-unit occupancy plus rented/reserved/available counts."""
    today = today or date.today()
    contracts = list(contracts)
    rows = []
    counts = {"total_units": 0, "rented_units": 0, "reserved_units": 0, "available_units": 0}

    for unit in units:
        occupancy = derive_occupancy(contracts, unit.property_id, unit.unit_number, today, unit=unit)
        rows.append((unit, occupancy))
        counts["total_units"] += 1
        if occupancy.occupied:
            counts["rented_units"] += 1
        elif occupancy.reserved:
            counts["reserved_units"] += 1
        else:
            counts["available_units"] += 1

    return rows, counts


# ── Database helpers ──────────────────────────────────────────────────────────

def _unit_query(db: Session, user_id: uuid.UUID, property_id, unit_number: str):
    query = db.query(Unit).filter(Unit.user_id == user_id, Unit.unit_number == unit_number)
    if property_id is None:
        return query.filter(Unit.property_id.is_(None))
    return query.filter(Unit.property_id == property_id)


def _unit_contracts(db: Session, user_id: uuid.UUID, property_id, unit_number: str) -> List[Contract]:
    query = db.query(Contract).filter(Contract.user_id == user_id, Contract.unit_number == unit_number)
    if property_id is None:
        query = query.filter(Contract.property_id.is_(None))
    else:
        query = query.filter(Contract.property_id == property_id)
    return query.order_by(Contract.created_at).all()


def sync_unit_flags(db: Session, user_id: uuid.UUID, property_id=None, today: Optional[date] = None) -> int:
    """
    Mark units that carry an active contract as not available and free
    units whose flag was left behind by a contract that has ended.

    Other flags on units without a contract are left alone: they may be
    manual reservations. Returns the number of units changed (not committed).
    """
    today = today or date.today()
    units = db.query(Unit).filter(Unit.user_id == user_id)
    contracts = db.query(Contract).filter(Contract.user_id == user_id)
    if property_id is not None:
        units = units.filter(Unit.property_id == property_id)
        contracts = contracts.filter(Contract.property_id == property_id)
    contracts = contracts.order_by(Contract.created_at).all()

    changed = 0
    for unit in units.all():
        contract = find_active_contract(contracts, unit.property_id, unit.unit_number, today)
        if contract is not None and (unit.is_available or unit.rented_by != contract.client_id):
            unit.is_available = False
            unit.rented_by = contract.client_id
            changed += 1
        elif contract is None and is_stale_flag(unit, contracts, today):
            unit.is_available = True
            unit.rented_by = None
            changed += 1

    if changed:
        logger.info(f"[occupancy] Synced {changed} unit flag(s) with active contracts for user {user_id}")
    return changed


# ── Reservation guard ─────────────────────────────────────────────────────────

def check_reservation(
    db: Session,
    user_id: uuid.UUID,
    property_id,
    unit_number: str,
    client_id: uuid.UUID,
    override: bool = False,
    today: Optional[date] = None,
    exclude_contract_id: Optional[uuid.UUID] = None,
) -> Tuple[ReservationResult, Optional[Unit]]:
    """
    Run the guard without touching any row.

    ``exclude_contract_id`` leaves a contract out of the check, for a
    contract that is being moved or extended onto the unit.
    """
    today = today or date.today()
    unit_contracts = _unit_contracts(db, user_id, property_id, unit_number)
    contracts = [c for c in unit_contracts if c.id != exclude_contract_id]

    if find_active_contract(contracts, property_id, unit_number, today, client_id=client_id) is not None:
        return ReservationResult(ok=False, reason=DUPLICATE_RESERVATION), None

    active = find_active_contract(contracts, property_id, unit_number, today)
    if active is not None:
        return ReservationResult(ok=False, reason=CONFLICTING_RESERVATION, contract_id=active.id), None

    unit = _unit_query(db, user_id, property_id, unit_number).first()
    if unit is None:
        return ReservationResult(ok=False, reason=UNIT_NOT_FOUND), None

    if not unit.is_available and not override and not is_stale_flag(unit, unit_contracts, today):
        return ReservationResult(ok=False, reason=UNIT_UNAVAILABLE, unit_id=unit.id), unit

    return ReservationResult(ok=True, unit_id=unit.id), unit


def reserve_unit(
    db: Session,
    user_id: uuid.UUID,
    property_id,
    unit_number: str,
    client_id: uuid.UUID,
    override: bool = False,
    today: Optional[date] = None,
    commit: bool = True,
) -> ReservationResult:
    """
    Assign ``client_id`` to the unit if nothing else holds it.

    Rejections return ``ok=False`` with a reason and change nothing.
    """
    result, unit = check_reservation(db, user_id, property_id, unit_number, client_id, override, today)
    if not result.ok:
        logger.info(
            f"[occupancy] Reservation of unit {unit_number} (property {property_id}) "
            f"for client {client_id} rejected: {result.reason}"
        )
        return result

    unit.is_available = False
    unit.rented_by = client_id
    if commit:
        db.commit()
    logger.info(f"[occupancy] Unit {unit_number} (property {property_id}) reserved for client {client_id}")
    return result


def release_unit(
    db: Session,
    user_id: uuid.UUID,
    property_id,
    unit_number: Optional[str],
    commit: bool = True,
) -> bool:
    """Flip the stored flag back to available. Returns False if the unit doesn't exist."""
    if not unit_number:
        return False
    unit = _unit_query(db, user_id, property_id, unit_number).first()
    if unit is None:
        logger.warning(f"[occupancy] Release skipped, unit {unit_number} (property {property_id}) not found")
        return False

    unit.is_available = True
    unit.rented_by = None
    if commit:
        db.commit()
    logger.info(f"[occupancy] Unit {unit_number} (property {property_id}) released")
    return True
