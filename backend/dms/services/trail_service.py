import uuid

from sqlalchemy.orm import Session, joinedload

from dms.exceptions import NotFoundError, ValidationError
from dms.models.catalog import DocumentAction
from dms.models.department import Department
from dms.models.document import Document, DocumentTrail
from dms.utils.time import utc_now


def add_trail(db: Session, document_id: str, status: str, *, user_id: str | None = None,
              from_department: str | None = None, to_department: str | None = None,
              action_id: str | None = None, remarks: str | None = None) -> DocumentTrail:
    trail = DocumentTrail(
        id=str(uuid.uuid4()),
        document_id=document_id,
        action_id=action_id,
        from_department=from_department,
        to_department=to_department,
        user_id=user_id,
        status=status,
        remarks=remarks,
        action_date=utc_now(),
    )
    db.add(trail)
    return trail


def create_trail(db: Session, document_id: str, user_id: str, status: str, *,
                 action_id: str | None = None, from_department: str | None = None,
                 to_department: str | None = None, remarks: str | None = None) -> DocumentTrail:
    """Validated entry point used by the trails API."""
    if not db.query(Document.id).filter(Document.id == document_id).first():
        raise NotFoundError("Document not found")
    if action_id and not db.query(DocumentAction.id).filter(DocumentAction.id == action_id).first():
        raise ValidationError("Unknown document action")
    for dept_id in (from_department, to_department):
        if dept_id and not db.query(Department.id).filter(Department.id == dept_id).first():
            raise ValidationError(f"Unknown department: {dept_id}")

    trail = add_trail(
        db, document_id, status, user_id=user_id, from_department=from_department,
        to_department=to_department, action_id=action_id, remarks=remarks,
    )
    db.commit()
    db.refresh(trail)
    return trail


def _with_relations(query):
    return query.options(
        joinedload(DocumentTrail.action),
        joinedload(DocumentTrail.from_dept),
        joinedload(DocumentTrail.to_dept),
        joinedload(DocumentTrail.user),
    )


def document_trails(db: Session, document_id: str) -> list[DocumentTrail]:
    query = db.query(DocumentTrail).filter(DocumentTrail.document_id == document_id)
    return _with_relations(query).order_by(DocumentTrail.action_date.asc(), DocumentTrail.id).all()


def search_trails(db: Session, document_id: str | None = None, user_id: str | None = None,
                  status: str | None = None, date_from: str | None = None,
                  date_to: str | None = None, limit: int = 100, offset: int = 0) -> list[DocumentTrail]:
    query = db.query(DocumentTrail)
    if document_id:
        query = query.filter(DocumentTrail.document_id == document_id)
    if user_id:
        query = query.filter(DocumentTrail.user_id == user_id)
    if status:
        query = query.filter(DocumentTrail.status == status)
    if date_from:
        query = query.filter(DocumentTrail.action_date >= date_from)
    if date_to:
        if len(date_to) == 10:
            date_to += "T23:59:59Z"
        query = query.filter(DocumentTrail.action_date <= date_to)
    return (
        _with_relations(query)
        .order_by(DocumentTrail.action_date.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def delete_trail(db: Session, trail_id: str):
    trail = db.query(DocumentTrail).filter(DocumentTrail.id == trail_id).first()
    if not trail:
        raise NotFoundError("Trail entry not found")
    db.delete(trail)
    db.commit()
