"""
Intelligent import schemas
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel


class ImportItem(BaseModel):
    id: str
    data: dict
    type: str
    confidence: float
    is_duplicate: bool = False
    duplicate_reason: Optional[str] = None
    validation_errors: List[str] = []


class ImportAnalyzeRequest(BaseModel):
    """Either a flat list of records or a dict of named sections of records."""
    records: Union[List[Dict[str, Any]], Dict[str, Any]]


class ImportAnalyzeResponse(BaseModel):
    success: bool = True
    total: int
    groups: Dict[str, List[ImportItem]]
