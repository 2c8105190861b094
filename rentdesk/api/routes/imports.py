"""
Intelligent import - classify records before they are saved
Nothing is written here; the client confirms and posts the records to the
regular endpoints afterwards.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from rentdesk.database import get_db
from rentdesk.core.deps import get_current_user_id
from rentdesk.models.client import Client
from rentdesk.models.property import Property
from rentdesk.schemas.importing import ImportAnalyzeRequest, ImportAnalyzeResponse
from rentdesk.services.import_classifier import DuplicateDetector, analyze_records, flatten_payload

router = APIRouter()


@router.post("/analyze", response_model=ImportAnalyzeResponse)
def analyze_import(
    request: ImportAnalyzeRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Group records by guessed type and flag duplicates of existing data"""
    records = flatten_payload(request.records)
    detector = DuplicateDetector(
        properties=db.query(Property).filter(Property.user_id == user_id).all(),
        clients=db.query(Client).filter(Client.user_id == user_id).all(),
    )
    groups = analyze_records(records, detector)
    return ImportAnalyzeResponse(total=len(records), groups=groups)
