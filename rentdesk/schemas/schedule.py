"""
Payment schedule schemas
Value objects produced by the reconciliation engine. Never persisted.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class ScheduleEntry(BaseModel):
    """One slot parsed from a contract's payment_dates / payment_amounts."""
    index: int
    original: str                 # date token exactly as written on the contract
    canonical: str                # YYYY-MM-DD, or the original token when it can't be normalised
    amount: Optional[float] = None


class EffectivePayment(BaseModel):
    """A schedule slot combined with the payment row it was matched to, if any."""
    index: int
    payment_id: Optional[UUID] = None
    contract_id: UUID
    due_date: str
    amount: float
    currency: Optional[str] = None
    paid_date: Optional[date] = None
    payment_method: Optional[str] = None
    status: str
    matched_by: str               # date | index | none


class ScheduleSummary(BaseModel):
    total_entries: int
    total_amount: float
    paid_count: int
    paid_amount: float
    pending_count: int
    pending_amount: float
    scheduled_count: int
    scheduled_amount: float
    overdue_count: int
    overdue_amount: float


class ContractScheduleOut(BaseModel):
    contract_id: UUID
    entries: List[EffectivePayment]
    summary: ScheduleSummary
