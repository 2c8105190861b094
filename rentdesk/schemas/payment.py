"""
Payment Request/Response Schemas
"""
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from rentdesk.models.payment import PaymentStatus, PaymentMethod
from rentdesk.schemas.common import DisplayIdMixin


class PaymentCreate(BaseModel):
    contract_id: UUID
    amount: float = Field(..., ge=0)
    currency: Optional[str] = None
    due_date: str = Field(..., min_length=1)
    paid_date: Optional[date] = None
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CASH
    check_number: Optional[str] = None
    bank_name: Optional[str] = None

    class Config:
        use_enum_values = True


class PaymentUpdate(BaseModel):
    amount: Optional[float] = Field(None, ge=0)
    due_date: Optional[str] = None
    paid_date: Optional[date] = None
    status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    check_number: Optional[str] = None
    bank_name: Optional[str] = None

    @field_validator("amount", "due_date", "status", "payment_method")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    class Config:
        use_enum_values = True


class PaymentResponse(DisplayIdMixin):
    user_id: UUID
    contract_id: UUID
    amount: float
    currency: str
    due_date: str
    paid_date: Optional[date] = None
    status: str
    payment_method: str
    check_number: Optional[str] = None
    bank_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StatusRefreshResponse(BaseModel):
    success: bool = True
    updated: int
