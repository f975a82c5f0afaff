import logging

from sqlalchemy.orm import Session

from dms.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from dms.models.document import Document
from dms.services import trail_service
from dms.services.document_permissions import can_archive_document
from dms.services.document_service import (
    document_view,
    ensure_not_locked_by_other,
    get_accessible_document,
)
from dms.utils.time import utc_now

logger = logging.getLogger("dms.archive")


def archive_document(db: Session, user, document_id: str) -> Document:
    doc = get_accessible_document(db, user, document_id)
    if doc.created_by != user.id and not can_archive_document(user, document_view(doc)):
        raise PermissionDeniedError("Only the owning department can archive this document")
    if doc.status in ("archive", "deleted"):
        raise ConflictError(f"Document cannot be archived while {doc.status}")
    ensure_not_locked_by_other(db, doc, user.id)
    if doc.checked_out_by:
        raise ConflictError("Check the document in before archiving it.")

    now = utc_now()
    doc.status = "archive"
    doc.archived_at = now
    doc.archived_by = user.id
    doc.updated_at = now
    trail_service.add_trail(db, doc.id, "archived", user_id=user.id, from_department=user.department_id)
    db.commit()
    db.refresh(doc)
    logger.info("Document %s archived by %s", doc.id, user.id)
    return doc


def list_archived(db: Session, user) -> list[Document]:
    return (
        db.query(Document)
        .filter(
            Document.status == "archive",
            (Document.created_by == user.id) | (Document.department_id == user.department_id),
        )
        .order_by(Document.archived_at.desc(), Document.id)
        .all()
    )


def get_archived(db: Session, user, document_id: str) -> Document:
    doc = get_accessible_document(db, user, document_id)
    if doc.status != "archive":
        raise NotFoundError("Archived document not found")
    return doc


def restore_document(db: Session, user, document_id: str) -> Document:
    doc = get_accessible_document(db, user, document_id)
    if doc.status != "archive":
        raise ConflictError("Only archived documents can be restored")

    doc.status = "dispatch"
    doc.archived_at = None
    doc.archived_by = None
    doc.updated_at = utc_now()
    trail_service.add_trail(db, doc.id, "restored", user_id=user.id, from_department=user.department_id)
    db.commit()
    db.refresh(doc)
    return doc
