import logging

from sqlalchemy.orm import Session

from dms.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from dms.models.document import Document
from dms.models.user import User
from dms.services import notification_service, trail_service
from dms.services.document_permissions import has_admin_role, has_any_role, has_permission
from dms.services.permission_service import ADMIN_ROLE_CODES
from dms.utils.time import utc_now

logger = logging.getLogger("dms.lock")


def _get_document(db: Session, document_id: str) -> Document:
    doc = db.query(Document).filter(Document.id == document_id).first()
    if not doc:
        raise NotFoundError("Document not found")
    return doc


def _holder_name(db: Session, user_id: str) -> str:
    holder = db.query(User).filter(User.id == user_id).first()
    return holder.full_name if holder else "another user"


def _release_lock(doc: Document):
    doc.checked_out_by = None
    doc.checked_out_at = None
    doc.status = "dispatch"
    doc.updated_at = utc_now()


def checkout(db: Session, user, document_id: str) -> Document:
    doc = _get_document(db, document_id)
    if doc.checked_out_by:
        if doc.checked_out_by == user.id:
            raise ConflictError("You have already checked out this document.")
        raise ConflictError(f"Document is already checked out by {_holder_name(db, doc.checked_out_by)}.")
    if doc.status == "deleted":
        raise ConflictError("Deleted documents cannot be checked out.")

    now = utc_now()
    doc.checked_out_by = user.id
    doc.checked_out_at = now
    doc.status = "checked_out"
    doc.updated_at = now
    trail_service.add_trail(db, doc.id, "checked_out", user_id=user.id, from_department=user.department_id)
    db.commit()
    db.refresh(doc)
    return doc


def checkin(db: Session, user, document_id: str) -> Document:
    doc = _get_document(db, document_id)
    if not doc.checked_out_by:
        raise ValidationError("Document is not checked out.")
    if doc.checked_out_by != user.id:
        raise PermissionDeniedError("You cannot check in a document checked out by another user.")

    _release_lock(doc)
    trail_service.add_trail(db, doc.id, "checked_in", user_id=user.id, from_department=user.department_id)
    db.commit()
    db.refresh(doc)
    return doc


def can_override(user) -> bool:
    if not has_permission(user, "document_edit"):
        return False
    return (
        has_admin_role(user)
        or has_any_role(user, ADMIN_ROLE_CODES)
        or has_permission(user, "system_maintenance")
    )


def override(db: Session, user, document_id: str) -> Document:
    if not can_override(user):
        raise PermissionDeniedError(
            "Only administrators can override a checkout",
            required_permissions=["document_edit", "system_maintenance"],
        )
    doc = _get_document(db, document_id)
    if not doc.checked_out_by:
        raise ValidationError("Document is not checked out.")

    previous_holder = doc.checked_out_by
    _release_lock(doc)
    trail_service.add_trail(
        db, doc.id, "checkout_overridden", user_id=user.id, from_department=user.department_id,
    )
    if previous_holder != user.id:
        notification_service.checkout_overridden(db, previous_holder, doc.id, doc.title, user.name)
    db.commit()
    db.refresh(doc)
    logger.warning("Checkout of document %s held by %s overridden by %s", doc.id, previous_holder, user.id)
    return doc


def lock_status(db: Session, user, document_id: str) -> dict:
    doc = _get_document(db, document_id)
    return {
        "locked": doc.checked_out_by is not None,
        "checked_out_by": doc.checked_out_by,
        "checked_out_at": doc.checked_out_at,
        "held_by_me": doc.checked_out_by == user.id,
    }
