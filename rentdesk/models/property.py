"""
Property and Unit Models
Tables: properties, units

A unit's stored ``is_available`` flag is manual vacancy bookkeeping only;
occupancy shown to users is derived from contracts (services/occupancy_service.py).
"""
from typing import Optional
import uuid

from sqlalchemy import String, Integer, Float, Boolean, ForeignKey, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentdesk.db.base import Base, TimestampMixin


class Property(Base, TimestampMixin):
    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    property_type: Mapped[str] = mapped_column(String(50), default="residential")  # residential, commercial, shops, ground_house
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    floors: Mapped[int] = mapped_column(Integer, default=1)
    price: Mapped[float] = mapped_column(Float, default=0.0)
    currency: Mapped[str] = mapped_column(String(3), default="SAR")
    status: Mapped[str] = mapped_column(String(20), default="available")
    units_per_floor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    unit_format: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    units = relationship(
        "Unit",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="Unit.unit_number",
    )


class Unit(Base, TimestampMixin):
    __tablename__ = "units"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Null for standalone shops that are not part of a building
    property_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=True, index=True
    )

    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    floor: Mapped[int] = mapped_column(Integer, default=1)
    unit_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)  # apartment, shop, ground_house
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    rented_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    property = relationship("Property", back_populates="units")

    __table_args__ = (
        Index("idx_units_property_number", "property_id", "unit_number"),
    )
