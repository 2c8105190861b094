from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from rentdesk.database import get_db
from rentdesk.core.deps import get_current_user_id, pagination
from rentdesk.models.maintenance import MaintenanceRequest, MaintenanceStatus
from rentdesk.models.property import Property
from rentdesk.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate, MaintenanceResponse

router = APIRouter()


def _get_request(db: Session, request_id: UUID, user_id: UUID) -> MaintenanceRequest:
    request = db.query(MaintenanceRequest)\
        .filter(MaintenanceRequest.id == request_id, MaintenanceRequest.user_id == user_id)\
        .first()
    if not request:
        raise HTTPException(status_code=404, detail="Maintenance request not found")
    return request


@router.get("", response_model=List[MaintenanceResponse])
def list_requests(
    property_id: Optional[UUID] = None,
    status_filter: Optional[MaintenanceStatus] = Query(None, alias="status"),
    page: dict = Depends(pagination),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    query = db.query(MaintenanceRequest).filter(MaintenanceRequest.user_id == user_id)
    if property_id is not None:
        query = query.filter(MaintenanceRequest.property_id == property_id)
    if status_filter is not None:
        query = query.filter(MaintenanceRequest.status == status_filter.value)
    return query.order_by(MaintenanceRequest.request_date.desc())\
        .offset(page["skip"])\
        .limit(page["limit"])\
        .all()


@router.post("", response_model=MaintenanceResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    request_in: MaintenanceCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    prop = db.query(Property)\
        .filter(Property.id == request_in.property_id, Property.user_id == user_id)\
        .first()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")

    data = request_in.model_dump()
    data["request_date"] = data["request_date"] or date.today()
    request = MaintenanceRequest(**data, user_id=user_id)
    db.add(request)
    db.commit()
    db.refresh(request)
    return request


@router.get("/{request_id}", response_model=MaintenanceResponse)
def get_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return _get_request(db, request_id, user_id)


@router.put("/{request_id}", response_model=MaintenanceResponse)
def update_request(
    request_id: UUID,
    request_update: MaintenanceUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Update a request; completing it stamps today's date unless one is given"""
    request = _get_request(db, request_id, user_id)

    changes = request_update.model_dump(exclude_unset=True)
    if changes.get("status") == MaintenanceStatus.COMPLETED.value and not changes.get("completed_date"):
        changes["completed_date"] = request.completed_date or date.today()
    for key, value in changes.items():
        setattr(request, key, value)

    db.commit()
    db.refresh(request)
    return request


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    request = _get_request(db, request_id, user_id)
    db.delete(request)
    db.commit()
    return None
