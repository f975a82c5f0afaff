from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user
from dms.models.notification import Notification
from dms.schemas.common import MessageResponse
from dms.schemas.notification import NotificationResponse, UnreadCountResponse
from dms.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        title=n.title,
        message=n.message,
        type=n.type,
        workflow_event=n.workflow_event,
        metadata=n.metadata_ or {},
        is_read=n.is_read,
        read_at=n.read_at,
        created_at=n.created_at,
    )


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    is_read: bool | None = None,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    items = notification_service.list_notifications(db, user.id, limit, offset, is_read)
    return [_notification_to_response(n) for n in items]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return UnreadCountResponse(count=notification_service.unread_count(db, user.id))


@router.patch("/read-all", response_model=MessageResponse)
async def mark_all_read(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    updated = notification_service.mark_all_as_read(db, user.id)
    return MessageResponse(message=f"{updated} notifications marked as read")


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: str, user: CurrentUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    return _notification_to_response(notification_service.mark_as_read(db, notification_id, user.id))


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(notification_id: str, user: CurrentUser = Depends(get_current_user),
                              db: Session = Depends(get_db)):
    notification_service.delete_notification(db, notification_id, user.id)
    return MessageResponse(message="Notification deleted")
