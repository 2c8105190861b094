from datetime import date
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import String, Text, Date, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from rentdesk.db.base import Base, TimestampMixin


class MaintenanceStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MaintenancePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class MaintenanceRequest(Base, TimestampMixin):
    __tablename__ = "maintenance_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    property_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(20), default=MaintenancePriority.MEDIUM.value)
    status: Mapped[str] = mapped_column(String(20), default=MaintenanceStatus.PENDING.value)
    request_date: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)
    completed_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
