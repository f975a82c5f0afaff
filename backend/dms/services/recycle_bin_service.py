import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from dms.exceptions import ConflictError, NotFoundError
from dms.models.document import Document
from dms.services import trail_service
from dms.services.document_service import remove_stored_file, route_contains
from dms.utils.time import utc_now

logger = logging.getLogger("dms.recycle_bin")


def _visible_filter(user):
    return or_(Document.created_by == user.id, route_contains(user.department_id))


def list_deleted(db: Session, user, page: int = 1, limit: int = 10) -> tuple[list[Document], int]:
    query = db.query(Document).filter(Document.status == "deleted", _visible_filter(user))
    total = query.count()
    docs = (
        query.order_by(Document.deleted_at.desc(), Document.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return docs, total


def _get_deleted(db: Session, user, document_id: str) -> Document:
    doc = db.query(Document).filter(Document.id == document_id, _visible_filter(user)).first()
    if not doc:
        raise NotFoundError("Document not found in recycle bin")
    if doc.status != "deleted":
        raise ConflictError("Document is not in the recycle bin")
    return doc


def restore(db: Session, user, document_id: str) -> Document:
    doc = _get_deleted(db, user, document_id)
    doc.status = "dispatch"
    doc.deleted_at = None
    doc.deleted_by = None
    doc.updated_at = utc_now()
    trail_service.add_trail(db, doc.id, "restored", user_id=user.id, from_department=user.department_id)
    db.commit()
    db.refresh(doc)
    return doc


def permanent_delete(db: Session, user, document_id: str):
    doc = _get_deleted(db, user, document_id)
    stored_paths = [f.stored_path for f in doc.files]
    db.delete(doc)
    db.commit()
    for stored_path in stored_paths:
        remove_stored_file(stored_path)
    logger.info("Document %s permanently deleted by %s (%d files)", document_id, user.id, len(stored_paths))


def _bulk(db: Session, operation, user, document_ids: list[str]) -> dict:
    processed: list[str] = []
    failed: list[dict] = []
    for document_id in document_ids:
        try:
            operation(db, user, document_id)
            processed.append(document_id)
        except (NotFoundError, ConflictError) as exc:
            db.rollback()
            failed.append({"id": document_id, "error": exc.message})
    return {"processed": processed, "failed": failed}


def bulk_restore(db: Session, user, document_ids: list[str]) -> dict:
    return _bulk(db, restore, user, document_ids)


def bulk_delete(db: Session, user, document_ids: list[str]) -> dict:
    return _bulk(db, permanent_delete, user, document_ids)
