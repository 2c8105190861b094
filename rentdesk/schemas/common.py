"""
Shared schema helpers
"""
from uuid import UUID

from pydantic import BaseModel, computed_field


def display_id(value: UUID) -> int:
    """
    Compact integer id for display: the first 8 hex digits of the UUID.

    Lossy and not unique across large datasets. Never use it for lookups.
    """
    return int(value.hex[:8], 16)


class DisplayIdMixin(BaseModel):
    id: UUID

    @computed_field
    @property
    def display_id(self) -> int:
        return display_id(self.id)
