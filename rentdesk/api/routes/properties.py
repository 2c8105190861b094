"""
Property Routes - buildings, their units and live occupancy
Occupancy counts are derived from contracts on every read
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from rentdesk.database import get_db
from rentdesk.core.deps import get_current_user_id, pagination
from rentdesk.models.client import Client
from rentdesk.models.contract import Contract
from rentdesk.models.property import Property, Unit
from rentdesk.schemas.property import (
    PropertyCreate, PropertyResponse, PropertyUpdate,
    UnitCreate, UnitOccupancyResponse, UnitResponse,
    PropertyOccupancyResponse, ReservationRequest, ReservationResult,
)
from rentdesk.services.occupancy_service import (
    property_occupancy, reserve_unit, release_unit, sync_unit_flags,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== HELPERS ====================

def generate_unit_numbers(floors: int, units_per_floor: int, unit_format: str) -> List[Tuple[int, str]]:
    """(floor, unit_number) for every unit of a building laid out floor by floor."""
    numbers = []
    for floor in range(1, floors + 1):
        for unit in range(1, units_per_floor + 1):
            running = (floor - 1) * units_per_floor + unit
            if unit_format == "101":
                number = f"{floor}{unit:02d}"
            elif unit_format == "01":
                number = f"{running:02d}"
            elif unit_format == "1":
                number = str(running)
            else:  # A1
                number = f"{chr(64 + floor)}{unit}"
            numbers.append((floor, number))
    return numbers


def _get_property(db: Session, property_id: UUID, user_id: UUID) -> Property:
    prop = db.query(Property)\
        .filter(Property.id == property_id, Property.user_id == user_id)\
        .first()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    return prop


def get_owned_client(db: Session, client_id: UUID, user_id: UUID) -> Client:
    client = db.query(Client)\
        .filter(Client.id == client_id, Client.user_id == user_id)\
        .first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


def _property_contracts(db: Session, user_id: UUID, property_id: Optional[UUID] = None) -> List[Contract]:
    query = db.query(Contract).filter(Contract.user_id == user_id)
    if property_id is not None:
        query = query.filter(Contract.property_id == property_id)
    return query.order_by(Contract.created_at).all()


def _property_out(prop: Property, contracts: List[Contract]) -> PropertyResponse:
    _, counts = property_occupancy(prop.units, contracts)
    return PropertyResponse.model_validate(prop).model_copy(update=counts)


def unit_out(unit: Unit, occupancy) -> UnitOccupancyResponse:
    data = UnitResponse.model_validate(unit).model_dump(exclude={"display_id"})
    return UnitOccupancyResponse(**data, occupancy=occupancy)


def _reservation_conflict(result: ReservationResult) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=result.model_dump(mode="json"),
    )


# ==================== PROPERTIES ====================

@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(
    property_in: PropertyCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Create a property; units are generated from the floor layout when none are given"""
    prop = Property(**property_in.model_dump(exclude={"units"}), user_id=user_id)

    if property_in.units:
        numbers = [u.unit_number for u in property_in.units]
        if len(set(numbers)) != len(numbers):
            raise HTTPException(status_code=409, detail="Unit number already exists in this property")
        for unit_in in property_in.units:
            prop.units.append(Unit(**unit_in.model_dump(), user_id=user_id))
    elif property_in.units_per_floor and property_in.unit_format:
        for floor, number in generate_unit_numbers(
            property_in.floors, property_in.units_per_floor, property_in.unit_format
        ):
            prop.units.append(
                Unit(user_id=user_id, unit_number=number, floor=floor, unit_type=prop.property_type)
            )

    db.add(prop)
    db.commit()
    db.refresh(prop)
    logger.info(f"Created property {prop.id} with {len(prop.units)} unit(s)")
    return _property_out(prop, [])


@router.get("", response_model=List[PropertyResponse])
def list_properties(
    page: dict = Depends(pagination),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Get all properties for current user with live occupancy counts"""
    properties = db.query(Property)\
        .filter(Property.user_id == user_id)\
        .order_by(Property.created_at.desc())\
        .offset(page["skip"])\
        .limit(page["limit"])\
        .all()
    contracts = _property_contracts(db, user_id)
    return [_property_out(p, contracts) for p in properties]


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(
    property_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    prop = _get_property(db, property_id, user_id)
    return _property_out(prop, _property_contracts(db, user_id, property_id))


@router.put("/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: UUID,
    property_update: PropertyUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Update property details. Existing units are left as they are."""
    prop = _get_property(db, property_id, user_id)

    for key, value in property_update.model_dump(exclude_unset=True).items():
        setattr(prop, key, value)

    db.commit()
    db.refresh(prop)
    return _property_out(prop, _property_contracts(db, user_id, property_id))


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
    property_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Delete a property together with its units"""
    prop = _get_property(db, property_id, user_id)
    db.delete(prop)
    db.commit()
    logger.info(f"Deleted property {property_id}")
    return None


# ==================== OCCUPANCY ====================

@router.get("/{property_id}/occupancy", response_model=PropertyOccupancyResponse)
def get_property_occupancy(
    property_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Per-unit occupancy derived from the property's contracts"""
    prop = _get_property(db, property_id, user_id)
    rows, counts = property_occupancy(prop.units, _property_contracts(db, user_id, property_id))
    return PropertyOccupancyResponse(
        property_id=prop.id,
        units=[unit_out(unit, occupancy) for unit, occupancy in rows],
        **counts,
    )


@router.post("/{property_id}/sync-units")
def sync_property_units(
    property_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Bring stored unit flags in line with active contracts"""
    _get_property(db, property_id, user_id)
    updated = sync_unit_flags(db, user_id, property_id)
    db.commit()
    return {"success": True, "updated": updated}


# ==================== UNITS ====================

@router.get("/{property_id}/units", response_model=List[UnitOccupancyResponse])
def list_units(
    property_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    prop = _get_property(db, property_id, user_id)
    rows, _ = property_occupancy(prop.units, _property_contracts(db, user_id, property_id))
    return [unit_out(unit, occupancy) for unit, occupancy in rows]


@router.post("/{property_id}/units", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
def create_unit(
    property_id: UUID,
    unit_in: UnitCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Add a unit to a property"""
    _get_property(db, property_id, user_id)

    existing = db.query(Unit).filter(
        Unit.property_id == property_id,
        Unit.unit_number == unit_in.unit_number
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail="Unit number already exists in this property")

    unit = Unit(**unit_in.model_dump(exclude={"property_id"}), property_id=property_id, user_id=user_id)
    db.add(unit)
    db.commit()
    db.refresh(unit)
    return unit


@router.post("/{property_id}/units/{unit_number}/reserve", response_model=ReservationResult)
def reserve_property_unit(
    property_id: UUID,
    unit_number: str,
    request: ReservationRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Assign a client to a unit. Rejections return 409 with the reason."""
    _get_property(db, property_id, user_id)
    get_owned_client(db, request.client_id, user_id)
    result = reserve_unit(db, user_id, property_id, unit_number, request.client_id, override=request.override)
    if not result.ok:
        raise _reservation_conflict(result)
    return result


@router.post("/{property_id}/units/{unit_number}/release")
def release_property_unit(
    property_id: UUID,
    unit_number: str,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    _get_property(db, property_id, user_id)
    if not release_unit(db, user_id, property_id, unit_number):
        raise HTTPException(status_code=404, detail="Unit not found")
    return {"success": True}
