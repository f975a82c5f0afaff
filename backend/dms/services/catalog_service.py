"""Admin-managed lookup tables: document types and document actions."""
import uuid

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from dms.exceptions import ConflictError, NotFoundError, ValidationError
from dms.models.catalog import DocumentAction, DocumentType
from dms.utils.time import utc_now


# --- document types ------------------------------------------------------

def list_document_types(db: Session, page: int = 1, limit: int = 10,
                        search: str | None = None) -> tuple[list[DocumentType], int]:
    query = db.query(DocumentType)
    if search:
        needle = search.lower()
        query = query.filter(or_(
            func.lower(DocumentType.name).contains(needle),
            func.lower(func.coalesce(DocumentType.description, "")).contains(needle),
        ))
    total = query.count()
    items = query.order_by(DocumentType.name.asc()).offset((page - 1) * limit).limit(limit).all()
    return items, total


def active_document_types(db: Session) -> list[DocumentType]:
    return db.query(DocumentType).filter(DocumentType.active.is_(True)).order_by(DocumentType.name).all()


def get_document_type(db: Session, type_id: str) -> DocumentType:
    doc_type = db.query(DocumentType).filter(DocumentType.id == type_id).first()
    if not doc_type:
        raise NotFoundError("Document type not found")
    return doc_type


def _ensure_type_name_free(db: Session, name: str, exclude_id: str | None = None):
    query = db.query(DocumentType.id).filter(func.lower(DocumentType.name) == name.lower())
    if exclude_id:
        query = query.filter(DocumentType.id != exclude_id)
    if query.first():
        raise ConflictError("Document type with this name already exists")


def create_document_type(db: Session, name: str, description: str | None = None,
                         active: bool = True) -> DocumentType:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Document type name is required")
    _ensure_type_name_free(db, name)
    now = utc_now()
    doc_type = DocumentType(
        id=str(uuid.uuid4()),
        name=name,
        description=description.strip() if description else None,
        active=active,
        created_at=now,
        updated_at=now,
    )
    db.add(doc_type)
    db.commit()
    db.refresh(doc_type)
    return doc_type


def update_document_type(db: Session, type_id: str, changes: dict) -> DocumentType:
    doc_type = get_document_type(db, type_id)
    if changes.get("name") is not None:
        name = changes["name"].strip()
        if not name:
            raise ValidationError("Document type name cannot be empty")
        if name.lower() != doc_type.name.lower():
            _ensure_type_name_free(db, name, exclude_id=doc_type.id)
        doc_type.name = name
    if "description" in changes:
        doc_type.description = changes["description"]
    if changes.get("active") is not None:
        doc_type.active = changes["active"]
    doc_type.updated_at = utc_now()
    db.commit()
    db.refresh(doc_type)
    return doc_type


def toggle_document_type(db: Session, type_id: str) -> DocumentType:
    doc_type = get_document_type(db, type_id)
    doc_type.active = not doc_type.active
    doc_type.updated_at = utc_now()
    db.commit()
    db.refresh(doc_type)
    return doc_type


def delete_document_type(db: Session, type_id: str):
    doc_type = get_document_type(db, type_id)
    db.delete(doc_type)
    db.commit()


# --- document actions ----------------------------------------------------

ACTION_FIELDS = ("description", "sender_tag", "recipient_tag", "action_date")


def list_document_actions(db: Session, page: int = 1, limit: int = 10,
                          search: str | None = None) -> tuple[list[DocumentAction], int]:
    query = db.query(DocumentAction)
    if search:
        query = query.filter(func.lower(DocumentAction.action_name).contains(search.lower()))
    total = query.count()
    items = query.order_by(DocumentAction.action_name.asc()).offset((page - 1) * limit).limit(limit).all()
    return items, total


def active_document_actions(db: Session) -> list[DocumentAction]:
    return (
        db.query(DocumentAction)
        .filter(DocumentAction.status.is_(True))
        .order_by(DocumentAction.action_name)
        .all()
    )


def get_document_action(db: Session, action_id: str) -> DocumentAction:
    action = db.query(DocumentAction).filter(DocumentAction.id == action_id).first()
    if not action:
        raise NotFoundError("Document action not found")
    return action


def _ensure_action_name_free(db: Session, name: str, exclude_id: str | None = None):
    query = db.query(DocumentAction.id).filter(func.lower(DocumentAction.action_name) == name.lower())
    if exclude_id:
        query = query.filter(DocumentAction.id != exclude_id)
    if query.first():
        raise ConflictError("Document action with this name already exists")


def create_document_action(db: Session, data: dict) -> DocumentAction:
    name = (data.get("action_name") or "").strip()
    if not name:
        raise ValidationError("Action name is required")
    _ensure_action_name_free(db, name)
    now = utc_now()
    action = DocumentAction(
        id=str(uuid.uuid4()),
        action_name=name,
        status=data.get("status", True) is not False,
        created_at=now,
        updated_at=now,
        **{key: data.get(key) for key in ACTION_FIELDS},
    )
    db.add(action)
    db.commit()
    db.refresh(action)
    return action


def update_document_action(db: Session, action_id: str, changes: dict) -> DocumentAction:
    action = get_document_action(db, action_id)
    if changes.get("action_name") is not None:
        name = changes["action_name"].strip()
        if not name:
            raise ValidationError("Action name cannot be empty")
        _ensure_action_name_free(db, name, exclude_id=action.id)
        action.action_name = name
    for key in ACTION_FIELDS:
        if key in changes:
            setattr(action, key, changes[key])
    if changes.get("status") is not None:
        action.status = changes["status"]
    action.updated_at = utc_now()
    db.commit()
    db.refresh(action)
    return action


def toggle_document_action(db: Session, action_id: str) -> DocumentAction:
    action = get_document_action(db, action_id)
    action.status = not action.status
    action.updated_at = utc_now()
    db.commit()
    db.refresh(action)
    return action


def delete_document_action(db: Session, action_id: str):
    action = get_document_action(db, action_id)
    db.delete(action)
    db.commit()
