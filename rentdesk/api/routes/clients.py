from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from rentdesk.database import get_db
from rentdesk.core.deps import get_current_user_id, pagination
from rentdesk.models.client import Client
from rentdesk.models.contract import Contract
from rentdesk.schemas.client import ClientCreate, ClientUpdate, ClientResponse
from rentdesk.services.occupancy_service import is_contract_active

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_client(db: Session, client_id: UUID, user_id: UUID) -> Client:
    client = db.query(Client).filter(Client.id == client_id, Client.user_id == user_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("", response_model=List[ClientResponse])
def list_clients(
    search: Optional[str] = Query(None, description="Name, phone, email or ID number"),
    page: dict = Depends(pagination),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    query = db.query(Client).filter(Client.user_id == user_id)
    if search:
        term = f"%{search}%"
        query = query.filter(or_(
            Client.name.ilike(term),
            Client.phone.ilike(term),
            Client.email.ilike(term),
            Client.id_number.ilike(term),
        ))
    return query.order_by(Client.name).offset(page["skip"]).limit(page["limit"]).all()


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    client_in: ClientCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    client = Client(**client_in.model_dump(), user_id=user_id)
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return _get_client(db, client_id, user_id)


@router.put("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: UUID,
    client_update: ClientUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    client = _get_client(db, client_id, user_id)
    for key, value in client_update.model_dump(exclude_unset=True).items():
        setattr(client, key, value)
    db.commit()
    db.refresh(client)
    return client


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(
    client_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Delete a client and their finished contracts.
    Refused while any of the client's contracts is still active.
    """
    client = _get_client(db, client_id, user_id)
    contracts = db.query(Contract).filter(Contract.client_id == client_id, Contract.user_id == user_id).all()

    if any(is_contract_active(c) for c in contracts):
        raise HTTPException(status_code=409, detail="Client has active contracts")

    try:
        for contract in contracts:
            db.delete(contract)
        db.delete(client)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete client {client_id}: {e}")
        raise
    return None
