from typing import Optional

from pydantic import BaseModel, Field


class PreferencesUpdate(BaseModel):
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    theme: Optional[str] = None
    language: Optional[str] = Field(None, max_length=5)


class PreferencesResponse(BaseModel):
    currency: str
    theme: str
    language: str

    class Config:
        from_attributes = True
