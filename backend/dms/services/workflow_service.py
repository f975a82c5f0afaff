"""Routing documents between departments: release, receive, complete, cancel."""
import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from dms.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from dms.models.department import Department
from dms.models.document import Document
from dms.services import notification_service, trail_service, workflow_status
from dms.services.document_permissions import can_cancel_document, can_complete_document
from dms.services.document_service import (
    document_view,
    ensure_not_locked_by_other,
    get_accessible_document,
    received_by_contains,
    route_contains,
)
from dms.utils.time import utc_now

logger = logging.getLogger("dms.workflow")

CLOSED_STATUSES = ("deleted", "completed", "canceled")
CANCELLABLE_STATUSES = ("dispatch", "intransit")


def _request_action_label(request_action) -> str | None:
    if request_action is None:
        return None
    if isinstance(request_action, (list, tuple)):
        return ", ".join(a for a in request_action if a) or None
    return request_action or None


def release_document(db: Session, user, document_id: str, department_id: str,
                     request_action=None, remarks: str | None = None) -> Document:
    doc = get_accessible_document(db, user, document_id)

    target = db.query(Department).filter(Department.id == department_id).first()
    if not target:
        raise NotFoundError("Target department not found")
    if not target.active:
        raise ValidationError("Target department is inactive")

    if doc.status in CLOSED_STATUSES:
        raise ConflictError(f"Document cannot be released while {doc.status}")
    ensure_not_locked_by_other(db, doc, user.id)
    if doc.checked_out_by:
        raise ConflictError("Check the document in before releasing it.")

    now = utc_now()
    action_label = _request_action_label(request_action)
    doc.work_flow = workflow_status.add_route_department(
        workflow_status.parse_route(doc.work_flow), department_id
    )
    doc.work_flow_status = workflow_status.record_release(
        workflow_status.parse_workflow_status(doc.work_flow_status),
        at=now,
        from_department_id=user.department_id,
        to_department_id=department_id,
        user_id=user.id,
        request_action=action_label,
        remarks=remarks,
    )
    doc.status = "intransit"
    doc.remarks = remarks if remarks is not None else doc.remarks
    doc.updated_at = now

    trail_service.add_trail(
        db, doc.id, "released", user_id=user.id, from_department=user.department_id,
        to_department=department_id, remarks=remarks,
    )
    notified = notification_service.notify_department(
        db, department_id,
        lambda uid: notification_service.document_shared(db, uid, doc.id, doc.title),
    )
    notification_service.document_released(db, doc.created_by, doc.id, doc.title, target.name)
    db.commit()
    db.refresh(doc)
    logger.info("Document %s released to %s (%d users notified)", doc.id, target.code, notified)
    return doc


def receive_document(db: Session, user, document_id: str) -> Document:
    doc = get_accessible_document(db, user, document_id)
    if doc.status in CLOSED_STATUSES:
        raise ConflictError(f"Document cannot be received while {doc.status}")
    if user.department_id not in workflow_status.parse_route(doc.work_flow).values():
        raise ValidationError("Department not in document workflow")

    now = utc_now()
    doc.work_flow_status = workflow_status.record_receive(
        workflow_status.parse_workflow_status(doc.work_flow_status),
        at=now, department_id=user.department_id, user_id=user.id,
    )
    received = list(doc.received_by or [])
    if user.id not in received:
        received.append(user.id)
    doc.received_by = received
    doc.status = "received"
    doc.updated_at = now

    trail_service.add_trail(db, doc.id, "received", user_id=user.id, to_department=user.department_id)
    notification_service.document_received(db, user.id, doc.id, doc.title)
    db.commit()
    db.refresh(doc)
    logger.info("Document %s received by %s", doc.id, user.id)
    return doc


def complete_document(db: Session, user, document_id: str) -> Document:
    doc = get_accessible_document(db, user, document_id)
    if not can_complete_document(user, document_view(doc)):
        raise PermissionDeniedError("You cannot complete this document")
    if doc.status in CLOSED_STATUSES:
        raise ConflictError(f"Document cannot be completed while {doc.status}")

    now = utc_now()
    doc.work_flow_status = workflow_status.record_completion(
        workflow_status.parse_workflow_status(doc.work_flow_status), at=now, user_id=user.id,
    )
    doc.status = "completed"
    doc.updated_at = now

    trail_service.add_trail(db, doc.id, "completed", user_id=user.id, from_department=user.department_id)
    notification_service.document_completed(db, doc.created_by, doc.id, doc.title)
    db.commit()
    db.refresh(doc)
    logger.info("Document %s completed by %s", doc.id, user.id)
    return doc


def cancel_document(db: Session, user, document_id: str, remarks: str | None = None) -> Document:
    doc = get_accessible_document(db, user, document_id)
    if doc.status not in CANCELLABLE_STATUSES:
        raise ConflictError(f"Only documents in transit can be canceled (status: {doc.status})")
    if not can_cancel_document(user, document_view(doc)):
        raise PermissionDeniedError("You cannot cancel this document")

    doc.status = "canceled"
    doc.updated_at = utc_now()
    trail_service.add_trail(
        db, doc.id, "canceled", user_id=user.id, from_department=user.department_id, remarks=remarks,
    )
    db.commit()
    db.refresh(doc)
    logger.info("Document %s canceled by %s", doc.id, user.id)
    return doc


# --- listings ------------------------------------------------------------

def incoming_documents(db: Session, user) -> list[Document]:
    """Documents whose newest release targets the user's department and is unreceived."""
    candidates = (
        db.query(Document)
        .filter(Document.status == "intransit", route_contains(user.department_id))
        .order_by(Document.updated_at.desc())
        .all()
    )
    incoming = []
    for doc in candidates:
        release = workflow_status.latest_release(workflow_status.parse_workflow_status(doc.work_flow_status))
        if release and release.get("to_department_id") == user.department_id and not release.get("received_at"):
            incoming.append(doc)
    return incoming


def outgoing_documents(db: Session, user) -> list[Document]:
    candidates = (
        db.query(Document)
        .filter(Document.status == "intransit")
        .order_by(Document.updated_at.desc())
        .all()
    )
    outgoing = []
    for doc in candidates:
        release = workflow_status.latest_release(workflow_status.parse_workflow_status(doc.work_flow_status))
        if release and release.get("from_department_id") == user.department_id:
            outgoing.append(doc)
    return outgoing


def received_documents(db: Session, user) -> list[Document]:
    return (
        db.query(Document)
        .filter(Document.status == "received", received_by_contains(user.id))
        .order_by(Document.updated_at.desc())
        .all()
    )


def completed_documents(db: Session, user) -> list[Document]:
    return (
        db.query(Document)
        .filter(
            Document.status == "completed",
            or_(
                Document.created_by == user.id,
                Document.department_id == user.department_id,
                route_contains(user.department_id),
            ),
        )
        .order_by(Document.updated_at.desc())
        .all()
    )


def shared_documents(db: Session, user) -> list[Document]:
    return (
        db.query(Document)
        .filter(
            and_(
                received_by_contains(user.id),
                Document.created_by != user.id,
                Document.status != "deleted",
            )
        )
        .order_by(Document.updated_at.desc())
        .all()
    )
