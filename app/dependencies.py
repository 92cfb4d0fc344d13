"""
Request dependencies shared by the API controllers.

`get_current_user` reads `Authorization: Bearer <token>` and is the
FastAPI counterpart of config.auth.get_current_user on the Streamlit side.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from config.auth import UserContext
from config.database import get_db
from services.auth_service import AuthService
from services.errors import AppError, AuthenticationError, log_error

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[UserContext]:
    """The caller, or None when no valid token was sent."""
    if not credentials:
        return None
    try:
        return AuthService(db).verify_access_token(credentials.credentials)
    except AuthenticationError as e:
        logger.info(f"Rejected bearer token: {e.message}")
        return None


def get_current_user(user: Optional[UserContext] = Depends(get_optional_user)) -> UserContext:
    """Protected routes depend on this; anonymous callers get 401."""
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def http_error(error: AppError, context: str) -> HTTPException:
    """Log a service error and convert it to an HTTPException."""
    log_error(error, context)
    return HTTPException(status_code=error.status_code, detail=error.message)
