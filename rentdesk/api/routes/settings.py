"""
Settings Routes - per-user display preferences (currency, theme, language)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from rentdesk.database import get_db
from rentdesk.core.config import settings
from rentdesk.core.deps import get_current_user_id
from rentdesk.models.preference import UserPreference
from rentdesk.schemas.preference import PreferencesUpdate, PreferencesResponse

router = APIRouter(tags=["settings"])


def _get_or_create_preferences(db: Session, user_id: UUID) -> UserPreference:
    prefs = db.query(UserPreference).filter(UserPreference.user_id == user_id).first()
    if not prefs:
        prefs = UserPreference(
            user_id=user_id,
            currency=settings.DEFAULT_CURRENCY,
            theme=settings.DEFAULT_THEME,
            language=settings.DEFAULT_LANGUAGE,
        )
        db.add(prefs)
        db.commit()
        db.refresh(prefs)
    return prefs


# ==================== PREFERENCES ====================

@router.get("/preferences", response_model=PreferencesResponse)
def get_preferences(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    """Get current user's preferences, created with defaults on first access"""
    return _get_or_create_preferences(db, user_id)


@router.put("/preferences", response_model=PreferencesResponse)
def update_preferences(
    prefs_in: PreferencesUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    prefs = _get_or_create_preferences(db, user_id)

    for key, value in prefs_in.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(prefs, key, value)

    db.commit()
    db.refresh(prefs)
    return prefs
