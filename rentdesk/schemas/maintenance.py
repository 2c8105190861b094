from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from rentdesk.models.maintenance import MaintenanceStatus, MaintenancePriority
from rentdesk.schemas.common import DisplayIdMixin


class MaintenanceCreate(BaseModel):
    property_id: UUID
    description: str = Field(..., min_length=1)
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    status: MaintenanceStatus = MaintenanceStatus.PENDING
    request_date: Optional[date] = None

    class Config:
        use_enum_values = True


class MaintenanceUpdate(BaseModel):
    description: Optional[str] = None
    priority: Optional[MaintenancePriority] = None
    status: Optional[MaintenanceStatus] = None
    completed_date: Optional[date] = None

    class Config:
        use_enum_values = True


class MaintenanceResponse(DisplayIdMixin):
    user_id: UUID
    property_id: UUID
    description: str
    priority: str
    status: str
    request_date: date
    completed_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True
