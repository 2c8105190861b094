"""
Contract Routes - lease lifecycle and the reconciled payment schedule
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from rentdesk.database import get_db
from rentdesk.core.config import settings
from rentdesk.core.deps import get_current_user_id, pagination
from rentdesk.models.contract import Contract
from rentdesk.models.payment import Payment
from rentdesk.schemas.contract import ContractCreate, ContractUpdate, ContractRenew, ContractResponse
from rentdesk.schemas.schedule import ContractScheduleOut
from rentdesk.services import contract_service
from rentdesk.services.exceptions import InvalidContractDates, NotFound, ReservationRejected
from rentdesk.services.occupancy_service import is_contract_active
from rentdesk.services.reconciliation_service import effective_payments, summarize

router = APIRouter()


def _get_contract(db: Session, contract_id: UUID, user_id: UUID) -> Contract:
    contract = db.query(Contract)\
        .filter(Contract.id == contract_id, Contract.user_id == user_id)\
        .first()
    if not contract:
        raise HTTPException(status_code=404, detail="Contract not found")
    return contract


def _contract_out(contract: Contract) -> ContractResponse:
    return ContractResponse.model_validate(contract).model_copy(
        update={"is_active": is_contract_active(contract)}
    )


# ==================== CONTRACTS ====================

@router.get("", response_model=List[ContractResponse])
def list_contracts(
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|expired|terminated|expiring)$"),
    client_id: Optional[UUID] = None,
    property_id: Optional[UUID] = None,
    page: dict = Depends(pagination),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Contracts of the current user, newest first"""
    contracts = contract_service.list_contracts(
        db, user_id, status_filter, expiring_days=settings.EXPIRING_WINDOW_DAYS
    )
    if client_id is not None:
        contracts = [c for c in contracts if c.client_id == client_id]
    if property_id is not None:
        contracts = [c for c in contracts if c.property_id == property_id]

    contracts = contracts[page["skip"]:page["skip"] + page["limit"]]
    return [_contract_out(c) for c in contracts]


@router.post("", response_model=ContractResponse, status_code=status.HTTP_201_CREATED)
def create_contract(
    contract_in: ContractCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Create a contract with its payment rows.

    The unit is reserved for the client in the same transaction; a unit
    already held by another active contract answers 409.
    """
    try:
        contract = contract_service.create_contract(db, user_id, contract_in)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ReservationRejected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.result.model_dump(mode="json"))
    return _contract_out(contract)


@router.get("/{contract_id}", response_model=ContractResponse)
def get_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return _contract_out(_get_contract(db, contract_id, user_id))


@router.put("/{contract_id}", response_model=ContractResponse)
def update_contract(
    contract_id: UUID,
    contract_update: ContractUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Edit contract fields. Existing payment rows are kept; the schedule view re-aligns them."""
    contract = _get_contract(db, contract_id, user_id)
    try:
        contract = contract_service.update_contract(db, contract, contract_update.model_dump(exclude_unset=True))
    except InvalidContractDates as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ReservationRejected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.result.model_dump(mode="json"))
    return _contract_out(contract)


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Delete a contract with its payments and free the unit"""
    contract = _get_contract(db, contract_id, user_id)
    contract_service.delete_contract(db, contract)
    return None


# ==================== LIFECYCLE ====================

@router.get("/{contract_id}/schedule", response_model=ContractScheduleOut)
def get_contract_schedule(
    contract_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Schedule slots from the contract aligned with its stored payments"""
    contract = _get_contract(db, contract_id, user_id)
    payments = db.query(Payment)\
        .filter(Payment.contract_id == contract.id, Payment.user_id == user_id)\
        .all()

    entries = effective_payments(contract, payments)
    return ContractScheduleOut(contract_id=contract.id, entries=entries, summary=summarize(entries))


@router.post("/{contract_id}/terminate", response_model=ContractResponse)
def terminate_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """End the contract today, free its unit and flag open payments overdue"""
    contract = _get_contract(db, contract_id, user_id)
    return _contract_out(contract_service.terminate_contract(db, contract))


@router.post("/{contract_id}/renew", response_model=ContractResponse)
def renew_contract(
    contract_id: UUID,
    renew_in: ContractRenew,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    contract = _get_contract(db, contract_id, user_id)
    try:
        contract = contract_service.renew_contract(db, contract, renew_in.end_date)
    except InvalidContractDates as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ReservationRejected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.result.model_dump(mode="json"))
    return _contract_out(contract)
