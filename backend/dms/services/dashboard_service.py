import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dms.exceptions import DMSError, NotFoundError
from dms.models.catalog import DocumentAction, DocumentType
from dms.models.department import Department
from dms.models.document import Document
from dms.models.user import User
from dms.services.document_service import received_by_contains

logger = logging.getLogger("dms.dashboard")


class StatisticsError(DMSError):
    code = "statistics_unavailable"


def document_stats(db: Session, user_id: str) -> dict:
    if not db.query(User.id).filter(User.id == user_id).first():
        raise NotFoundError("User not found")

    try:
        owned = db.query(Document).filter(
            Document.created_by == user_id, Document.status != "deleted"
        ).count()
        in_transit = db.query(Document).filter(
            Document.status == "intransit", Document.created_by != user_id
        ).count()
        shared = db.query(Document).filter(
            received_by_contains(user_id),
            Document.created_by != user_id,
            Document.status != "deleted",
        ).count()
        archive = db.query(Document).filter(
            Document.created_by == user_id, Document.status.in_(("completed", "archive"))
        ).count()
        recycle_bin = db.query(Document).filter(
            Document.created_by == user_id, Document.status == "deleted"
        ).count()
    except SQLAlchemyError as exc:
        logger.exception("Dashboard statistics query failed for %s", user_id)
        raise StatisticsError("Failed to fetch document statistics") from exc

    return {
        "owned": owned,
        "in_transit": in_transit,
        "shared": shared,
        "archive": archive,
        "recycle_bin": recycle_bin,
        "total": owned + in_transit + shared,
    }


def admin_counters(db: Session) -> dict:
    return {
        "departments": db.query(Department).count(),
        "document_types": db.query(DocumentType).count(),
        "document_actions": db.query(DocumentAction).count(),
        "users": db.query(User).count(),
    }
