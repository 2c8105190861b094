"""
Contract Model
Table: contracts

``payment_dates`` / ``payment_amounts`` are comma-separated strings kept
positionally aligned; the effective schedule is rebuilt from them on every
read (services/reconciliation_service.py).
"""
from datetime import date
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import String, Float, Date, Text, ForeignKey, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentdesk.db.base import Base, TimestampMixin


class ContractStatus(str, Enum):
    ACTIVE = "active"
    TERMINATED = "terminated"


class Contract(Base, TimestampMixin):
    __tablename__ = "contracts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Null for contracts on standalone shops
    property_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    client_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("clients.id"), nullable=False, index=True)
    # Matched to Unit.unit_number by string equality, not by foreign key
    unit_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Total contract rent despite the name; equals the sum of its payments
    monthly_rent: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="SAR")
    payment_schedule: Mapped[str] = mapped_column(String(30), default="quarterly")
    payment_method: Mapped[str] = mapped_column(String(30), default="cash")
    number_of_payments: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    payment_dates: Mapped[str] = mapped_column(Text, default="")
    payment_amounts: Mapped[str] = mapped_column(Text, default="")
    check_numbers: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default=ContractStatus.ACTIVE.value, index=True)
    terminated_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    payments = relationship(
        "Payment",
        back_populates="contract",
        cascade="all, delete-orphan",
    )
    client = relationship("Client")

    __table_args__ = (
        Index("idx_contracts_unit", "property_id", "unit_number"),
    )
