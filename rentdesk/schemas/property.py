from pydantic import BaseModel, Field, model_validator
from uuid import UUID
from datetime import datetime
from typing import Optional, List, Literal

from rentdesk.schemas.common import DisplayIdMixin


# ==================== Units ====================

class UnitBase(BaseModel):
    unit_number: str = Field(..., min_length=1)
    floor: int = 1
    unit_type: Optional[str] = None
    name: Optional[str] = None
    location: Optional[str] = None
    is_available: bool = True


class UnitCreate(UnitBase):
    property_id: Optional[UUID] = None


class UnitUpdate(BaseModel):
    unit_number: Optional[str] = None
    floor: Optional[int] = None
    unit_type: Optional[str] = None
    name: Optional[str] = None
    location: Optional[str] = None
    is_available: Optional[bool] = None


class UnitResponse(DisplayIdMixin, UnitBase):
    property_id: Optional[UUID] = None
    rented_by: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ==================== Occupancy ====================

class Occupancy(BaseModel):
    """
    Live occupancy of one unit.

    ``occupied`` comes from contracts only. ``reserved`` is the stored
    manual flag and only counts when no active contract exists.
    """
    occupied: bool
    reserved: bool = False
    available: bool
    source: str                        # contract | manual_flag | none
    contract_id: Optional[UUID] = None
    client_id: Optional[UUID] = None


class UnitOccupancyResponse(UnitResponse):
    occupancy: Occupancy


class PropertyOccupancyResponse(BaseModel):
    property_id: UUID
    total_units: int
    rented_units: int
    reserved_units: int
    available_units: int
    units: List[UnitOccupancyResponse] = []


class ReservationRequest(BaseModel):
    client_id: UUID
    override: bool = False


class ReservationResult(BaseModel):
    ok: bool
    reason: Optional[str] = None       # duplicate_reservation | conflicting_reservation | unit_unavailable | unit_not_found
    unit_id: Optional[UUID] = None
    contract_id: Optional[UUID] = None


# ==================== Properties ====================

# 101, 102, 201 | 01, 02, 03 | 1, 2, 3 | A1, A2, B1
UnitFormat = Literal["101", "01", "1", "A1"]


class PropertyBase(BaseModel):
    name: str = Field(..., min_length=1)
    property_type: str = "residential"
    location: str = ""
    floors: int = Field(1, ge=0)
    price: float = Field(0.0, ge=0)
    currency: str = "SAR"
    status: str = "available"
    units_per_floor: Optional[int] = None
    unit_format: Optional[UnitFormat] = None


class PropertyCreate(PropertyBase):
    units: List[UnitBase] = []

    @model_validator(mode="after")
    def _check_letter_floors(self):
        # A1 numbering has one letter per floor
        if self.unit_format == "A1" and self.floors > 26:
            raise ValueError("unit_format A1 supports at most 26 floors")
        return self


class PropertyUpdate(BaseModel):
    name: Optional[str] = None
    property_type: Optional[str] = None
    location: Optional[str] = None
    floors: Optional[int] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    status: Optional[str] = None
    units_per_floor: Optional[int] = None
    unit_format: Optional[UnitFormat] = None


class PropertyResponse(DisplayIdMixin, PropertyBase):
    user_id: UUID
    created_at: datetime
    total_units: int = 0
    rented_units: int = 0
    reserved_units: int = 0
    available_units: int = 0

    class Config:
        from_attributes = True
