"""
Notifications Controller
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, http_error
from app.models import MarkAllReadResponse, NotificationResponse
from config.auth import UserContext
from config.database import get_db
from services.errors import AppError
from services.notification_service import DEFAULT_LIMIT, NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
def get_notifications(
    limit: int = DEFAULT_LIMIT,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Newest first."""
    return NotificationService(db).fetch(user.user_id, limit=limit)


@router.post("/read-all", response_model=MarkAllReadResponse)
def mark_all_as_read(user: UserContext = Depends(get_current_user), db: Session = Depends(get_db)):
    return MarkAllReadResponse(updated=NotificationService(db).mark_all_as_read(user.user_id))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(
    notification_id: int,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return NotificationService(db).mark_as_read(notification_id, user.user_id)
    except AppError as e:
        raise http_error(e, "API mark notification read")
