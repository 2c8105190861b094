"""
Payment Model
Table: payments
"""
from datetime import date
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import String, Float, Date, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentdesk.db.base import Base, TimestampMixin


class PaymentStatus(str, Enum):
    """Payment status enum"""
    PAID = "paid"
    PENDING = "pending"
    SCHEDULED = "scheduled"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    """Payment method enum"""
    CASH = "cash"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"


class Payment(Base, TimestampMixin):
    """One persisted instalment of a contract"""
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    contract_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="SAR")

    # ISO "YYYY-MM-DD"; older rows may still hold "DD-MM-YYYY"
    due_date: Mapped[str] = mapped_column(String(20), nullable=False)
    paid_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    status: Mapped[str] = mapped_column(String(20), default=PaymentStatus.PENDING.value, index=True)
    payment_method: Mapped[str] = mapped_column(String(30), default=PaymentMethod.CASH.value)
    check_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    contract = relationship("Contract", back_populates="payments")
