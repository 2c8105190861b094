"""
Contract Schemas
"""
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from rentdesk.schemas.common import DisplayIdMixin


class ContractBase(BaseModel):
    property_id: Optional[UUID] = None
    client_id: UUID
    unit_number: Optional[str] = None
    start_date: date
    end_date: date
    monthly_rent: float = Field(..., ge=0, description="Total rent over the contract term")
    currency: str = "SAR"
    payment_schedule: str = "quarterly"
    payment_method: str = "cash"
    number_of_payments: Optional[str] = None
    payment_dates: str = ""
    payment_amounts: str = ""
    check_numbers: Optional[str] = None
    bank_name: Optional[str] = None

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ContractCreate(ContractBase):
    generate_payments: bool = True
    override_reservation: bool = False


class ContractUpdate(BaseModel):
    """Schedule strings may change without touching payment rows."""
    unit_number: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    monthly_rent: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    payment_schedule: Optional[str] = None
    payment_method: Optional[str] = None
    number_of_payments: Optional[str] = None
    payment_dates: Optional[str] = None
    payment_amounts: Optional[str] = None
    check_numbers: Optional[str] = None
    bank_name: Optional[str] = None

    @field_validator(
        "start_date", "end_date", "monthly_rent", "currency",
        "payment_schedule", "payment_method", "payment_dates", "payment_amounts",
    )
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ContractRenew(BaseModel):
    end_date: date


class ContractResponse(DisplayIdMixin):
    user_id: UUID
    property_id: Optional[UUID] = None
    client_id: UUID
    unit_number: Optional[str] = None
    start_date: date
    end_date: date
    monthly_rent: float
    currency: str
    payment_schedule: str
    payment_method: str
    number_of_payments: Optional[str] = None
    payment_dates: str
    payment_amounts: str
    check_numbers: Optional[str] = None
    bank_name: Optional[str] = None
    status: str
    terminated_date: Optional[date] = None
    is_active: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
