from uuid import UUID

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
import logging

from rentdesk.core.config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> UUID:
    """
    Tenant id of the caller, taken from the hosted-auth access token.

    Tokens are issued by the hosted auth provider; this only verifies the
    signature and reads the ``sub`` claim. Every query is scoped by it.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None or not credentials.credentials:
        raise credentials_exception

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise credentials_exception

    subject = payload.get("sub")
    if subject is None:
        logger.warning("Token missing 'sub' field")
        raise credentials_exception

    try:
        return UUID(str(subject))
    except ValueError:
        logger.warning(f"Token 'sub' is not a UUID: {subject}")
        raise credentials_exception


def pagination(
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> dict:
    return {"skip": skip, "limit": limit}
