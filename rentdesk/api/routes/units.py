"""
Unit Routes - every unit of the user, including standalone shops
that don't belong to a building (property_id is null)
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from rentdesk.database import get_db
from rentdesk.core.deps import get_current_user_id, pagination
from rentdesk.models.contract import Contract
from rentdesk.models.property import Property, Unit
from rentdesk.schemas.property import (
    UnitCreate, UnitUpdate, UnitResponse, UnitOccupancyResponse,
    ReservationRequest, ReservationResult,
)
from rentdesk.services.occupancy_service import derive_occupancy, reserve_unit, release_unit
from rentdesk.api.routes.properties import get_owned_client, unit_out

router = APIRouter()


def _get_unit(db: Session, unit_id: UUID, user_id: UUID) -> Unit:
    unit = db.query(Unit).filter(Unit.id == unit_id, Unit.user_id == user_id).first()
    if not unit:
        raise HTTPException(status_code=404, detail="Unit not found")
    return unit


def _unit_contracts(db: Session, user_id: UUID, unit: Unit) -> List[Contract]:
    query = db.query(Contract).filter(Contract.user_id == user_id, Contract.unit_number == unit.unit_number)
    return query.order_by(Contract.created_at).all()


@router.get("", response_model=List[UnitOccupancyResponse])
def list_units(
    standalone: bool = Query(False, description="Only shops without a building"),
    property_id: Optional[UUID] = None,
    available: Optional[bool] = Query(None, description="Filter on derived availability"),
    page: dict = Depends(pagination),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """List units with their derived occupancy"""
    query = db.query(Unit).filter(Unit.user_id == user_id)
    if standalone:
        query = query.filter(Unit.property_id.is_(None))
    elif property_id is not None:
        query = query.filter(Unit.property_id == property_id)

    units = query.order_by(Unit.unit_number).offset(page["skip"]).limit(page["limit"]).all()
    contracts = db.query(Contract).filter(Contract.user_id == user_id).order_by(Contract.created_at).all()

    results = []
    for unit in units:
        occupancy = derive_occupancy(contracts, unit.property_id, unit.unit_number, unit=unit)
        if available is not None and occupancy.available != available:
            continue
        results.append(unit_out(unit, occupancy))
    return results


@router.post("", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
def create_unit(
    unit_in: UnitCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Create a unit; leave property_id empty for a standalone shop"""
    if unit_in.property_id is not None:
        prop = db.query(Property).filter(
            Property.id == unit_in.property_id, Property.user_id == user_id
        ).first()
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")

    unit = Unit(**unit_in.model_dump(), user_id=user_id)
    db.add(unit)
    db.commit()
    db.refresh(unit)
    return unit


@router.get("/{unit_id}", response_model=UnitOccupancyResponse)
def get_unit(
    unit_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    unit = _get_unit(db, unit_id, user_id)
    occupancy = derive_occupancy(_unit_contracts(db, user_id, unit), unit.property_id, unit.unit_number, unit=unit)
    return unit_out(unit, occupancy)


@router.put("/{unit_id}", response_model=UnitResponse)
def update_unit(
    unit_id: UUID,
    unit_update: UnitUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Edit a unit. Setting is_available=false marks it reserved without a contract."""
    unit = _get_unit(db, unit_id, user_id)

    changes = unit_update.model_dump(exclude_unset=True)
    if changes.get("is_available"):
        changes["rented_by"] = None
    for key, value in changes.items():
        setattr(unit, key, value)

    db.commit()
    db.refresh(unit)
    return unit


@router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_unit(
    unit_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    unit = _get_unit(db, unit_id, user_id)
    db.delete(unit)
    db.commit()
    return None


@router.post("/{unit_id}/reserve", response_model=ReservationResult)
def reserve(
    unit_id: UUID,
    request: ReservationRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    unit = _get_unit(db, unit_id, user_id)
    get_owned_client(db, request.client_id, user_id)
    result = reserve_unit(
        db, user_id, unit.property_id, unit.unit_number, request.client_id, override=request.override
    )
    if not result.ok:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.model_dump(mode="json"))
    return result


@router.post("/{unit_id}/release")
def release(
    unit_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    unit = _get_unit(db, unit_id, user_id)
    release_unit(db, user_id, unit.property_id, unit.unit_number)
    return {"success": True}
