import uuid
from typing import Any

from sqlalchemy.orm import Session

from dms.exceptions import NotFoundError
from dms.models.notification import Notification
from dms.models.user import User
from dms.utils.time import utc_now


def create_notification(db: Session, user_id: str, title: str, message: str, type_: str,
                        workflow_event: str | None = None,
                        metadata: dict[str, Any] | None = None) -> Notification:
    notification = Notification(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        message=message,
        type=type_,
        workflow_event=workflow_event,
        metadata_=metadata or {},
        is_read=False,
        is_deleted=False,
        created_at=utc_now(),
    )
    db.add(notification)
    return notification


def _label(document_id: str, title: str | None) -> str:
    return title or document_id


def document_created(db: Session, user_id: str, document_id: str, title: str | None):
    return create_notification(
        db, user_id, "Document Created",
        f"A new document has been created: {_label(document_id, title)}",
        "document", "document_created", {"document_id": document_id, "document_title": title},
    )


def document_shared(db: Session, user_id: str, document_id: str, title: str | None):
    return create_notification(
        db, user_id, "Document Shared",
        f"A document has been shared with you: {_label(document_id, title)}",
        "workflow", "document_shared", {"document_id": document_id, "document_title": title},
    )


def document_released(db: Session, user_id: str, document_id: str, title: str | None, to_department: str):
    return create_notification(
        db, user_id, "Document Released",
        f"A document has been released to {to_department}: {_label(document_id, title)}",
        "workflow", "document_released",
        {"document_id": document_id, "document_title": title, "to_department": to_department},
    )


def document_received(db: Session, user_id: str, document_id: str, title: str | None):
    return create_notification(
        db, user_id, "New Document Received",
        f"You have received a new document for review: {_label(document_id, title)}",
        "document", "document_received", {"document_id": document_id, "document_title": title},
    )


def document_completed(db: Session, user_id: str, document_id: str, title: str | None):
    return create_notification(
        db, user_id, "Document Completed",
        f"A document has been marked as completed: {_label(document_id, title)}",
        "workflow", "document_completed", {"document_id": document_id, "document_title": title},
    )


def document_updated(db: Session, user_id: str, document_id: str, title: str | None):
    return create_notification(
        db, user_id, "Document Updated",
        f"A document has been updated: {_label(document_id, title)}",
        "workflow", "document_updated", {"document_id": document_id, "document_title": title},
    )


def document_signed(db: Session, user_id: str, document_id: str, title: str | None, signer_name: str):
    return create_notification(
        db, user_id, "Document Signed",
        f"Document {_label(document_id, title)} has been signed by {signer_name}",
        "document", "document_signed",
        {"document_id": document_id, "document_title": title, "signer_name": signer_name},
    )


def checkout_overridden(db: Session, user_id: str, document_id: str, title: str | None, overridden_by: str):
    return create_notification(
        db, user_id, "Checkout Overridden",
        f"Your checkout of {_label(document_id, title)} was released by {overridden_by}",
        "document", "checkout_overridden",
        {"document_id": document_id, "document_title": title, "overridden_by": overridden_by},
    )


def notify_department(db: Session, department_id: str, notify) -> int:
    """Call ``notify(user_id)`` for every active user of a department."""
    users = db.query(User.id).filter(User.department_id == department_id, User.active.is_(True)).all()
    for (user_id,) in users:
        notify(user_id)
    return len(users)


def _get_owned(db: Session, notification_id: str, user_id: str) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
        Notification.is_deleted.is_(False),
    ).first()
    if not notification:
        raise NotFoundError("Notification not found")
    return notification


def list_notifications(db: Session, user_id: str, limit: int = 50, offset: int = 0,
                       is_read: bool | None = None) -> list[Notification]:
    query = db.query(Notification).filter(
        Notification.user_id == user_id, Notification.is_deleted.is_(False)
    )
    if is_read is not None:
        query = query.filter(Notification.is_read.is_(is_read))
    return query.order_by(Notification.created_at.desc(), Notification.id).offset(offset).limit(limit).all()


def unread_count(db: Session, user_id: str) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
        Notification.is_deleted.is_(False),
    ).count()


def mark_as_read(db: Session, notification_id: str, user_id: str) -> Notification:
    notification = _get_owned(db, notification_id, user_id)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utc_now()
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, user_id: str) -> int:
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
        Notification.is_deleted.is_(False),
    ).update({Notification.is_read: True, Notification.read_at: utc_now()}, synchronize_session=False)
    db.commit()
    return updated


def delete_notification(db: Session, notification_id: str, user_id: str):
    notification = _get_owned(db, notification_id, user_id)
    notification.is_deleted = True
    db.commit()
