"""
User preferences (currency, theme, language)
"""
import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from rentdesk.db.base import Base, TimestampMixin


class UserPreference(Base, TimestampMixin):
    """One row per user; created lazily with settings defaults"""
    __tablename__ = "user_preferences"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, unique=True, index=True)

    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    theme: Mapped[str] = mapped_column(String(20), nullable=False)
    language: Mapped[str] = mapped_column(String(5), nullable=False)
