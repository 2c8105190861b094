from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from rentdesk.schemas.common import DisplayIdMixin


class ClientBase(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = ""
    email: str = ""
    id_number: str = ""
    nationality: Optional[str] = None
    address: Optional[str] = None
    client_type: str = "individual"


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    id_number: Optional[str] = None
    nationality: Optional[str] = None
    address: Optional[str] = None
    client_type: Optional[str] = None


class ClientResponse(DisplayIdMixin, ClientBase):
    user_id: UUID
    created_at: datetime

    class Config:
        from_attributes = True
