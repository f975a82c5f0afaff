import logging
import os
import time
import uuid
from pathlib import Path

from sqlalchemy import or_, text
from sqlalchemy.orm import Session

from dms.config import settings
from dms.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from dms.models.document import Document, DocumentFile
from dms.models.user import User
from dms.services import notification_service, trail_service, workflow_status
from dms.services.document_permissions import DocumentView, can_sign_document
from dms.services.permission_service import ADMIN_ROLE_CODES
from dms.utils.filesystem import ensure_document_dir, sanitize_filename
from dms.utils.hashing import sha256_bytes
from dms.utils.security import generate_document_code
from dms.utils.time import utc_now

logger = logging.getLogger("dms.documents")

SORTABLE_COLUMNS = {
    "created_at": Document.created_at,
    "updated_at": Document.updated_at,
    "title": Document.title,
    "document_type": Document.document_type,
    "status": Document.status,
}

EDITABLE_FIELDS = ("title", "description", "document_type", "classification", "origin", "remarks")


# --- storage -------------------------------------------------------------

def store_file(document_id: str, filename: str, content: bytes) -> tuple[str, str, int]:
    """Store a file immutably. Returns (relative_path, file_hash, file_size)."""
    file_hash = sha256_bytes(content)
    safe_name = sanitize_filename(filename)
    stored_name = f"{file_hash[:8]}_{safe_name}"

    doc_dir = ensure_document_dir(document_id)
    file_path = doc_dir / stored_name
    file_path.write_bytes(content)
    os.chmod(file_path, 0o444)

    relative_path = f"files/{document_id}/{stored_name}"
    return relative_path, file_hash, len(content)


def get_file_full_path(stored_path: str, data_path: Path | None = None) -> Path:
    return (data_path or settings.data_path) / stored_path


def remove_stored_file(stored_path: str):
    full_path = get_file_full_path(stored_path)
    if full_path.exists():
        os.chmod(full_path, 0o644)
        full_path.unlink()


# --- lookups & access ----------------------------------------------------

def get_document(db: Session, document_id: str) -> Document:
    doc = db.query(Document).filter(Document.id == document_id).first()
    if not doc:
        raise NotFoundError("Document not found")
    return doc


def route_contains(department_id: str, param: str = "route_dept"):
    return text(
        f"EXISTS (SELECT 1 FROM json_each(documents.work_flow) WHERE json_each.value = :{param})"
    ).bindparams(**{param: department_id})


def received_by_contains(user_id: str, param: str = "received_user"):
    return text(
        f"EXISTS (SELECT 1 FROM json_each(documents.received_by) WHERE json_each.value = :{param})"
    ).bindparams(**{param: user_id})


def document_view(doc: Document) -> DocumentView:
    return DocumentView(status=doc.status, department_id=doc.department_id)


def can_access(user, doc: Document) -> bool:
    if doc.created_by == user.id or doc.department_id == user.department_id:
        return True
    if any(code in ADMIN_ROLE_CODES for code in user.roles):
        return True
    route = workflow_status.parse_route(doc.work_flow)
    if user.department_id in route.values():
        return True
    return user.id in (doc.received_by or [])


def apply_access_filter(query, user):
    """Restrict a Document query to what ``can_access`` would allow."""
    if any(code in ADMIN_ROLE_CODES for code in user.roles):
        return query
    return query.filter(or_(
        Document.created_by == user.id,
        Document.department_id == user.department_id,
        route_contains(user.department_id),
        received_by_contains(user.id),
    ))


def get_accessible_document(db: Session, user, document_id: str) -> Document:
    doc = get_document(db, document_id)
    if not can_access(user, doc):
        raise PermissionDeniedError("You do not have access to this document")
    return doc


def ensure_not_locked_by_other(db: Session, doc: Document, user_id: str):
    if doc.checked_out_by and doc.checked_out_by != user_id:
        holder = db.query(User).filter(User.id == doc.checked_out_by).first()
        name = holder.full_name if holder else "another user"
        raise ConflictError(f"Document is checked out by {name} and cannot be modified.")


# --- CRUD ----------------------------------------------------------------

def create_document(db: Session, user, data: dict, upload: tuple[str, bytes, str | None] | None = None) -> Document:
    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("Document title is required")

    now = utc_now()
    doc_id = str(uuid.uuid4())
    doc = Document(
        id=doc_id,
        document_code=generate_document_code(int(time.time() * 1000)),
        title=title,
        description=data.get("description"),
        document_type=data.get("document_type") or "General",
        classification=data.get("classification"),
        origin=data.get("origin"),
        remarks=data.get("remarks"),
        status="dispatch",
        department_id=user.department_id,
        created_by=user.id,
        work_flow={"first": user.department_id},
        work_flow_status=workflow_status.record_creation(
            {}, at=now, department_id=user.department_id, user_id=user.id,
        ),
        received_by=[],
        created_at=now,
        updated_at=now,
    )
    db.add(doc)
    db.flush()

    if upload is not None:
        filename, content, mime_type = upload
        _attach_file(db, doc, user.id, filename, content, mime_type)

    trail_service.add_trail(
        db, doc_id, "created", user_id=user.id, from_department=user.department_id,
        remarks=data.get("remarks"),
    )
    notification_service.document_created(db, user.id, doc_id, title)
    db.commit()
    db.refresh(doc)
    logger.info("Document %s created by %s", doc.document_code, user.id)
    return doc


def list_documents(db: Session, user, scope: str = "all", page: int = 1, limit: int = 10,
                   sort_by: str = "created_at", sort_order: str = "desc") -> tuple[list[Document], int]:
    query = db.query(Document).filter(Document.status != "deleted")
    if scope == "owned":
        query = query.filter(Document.created_by == user.id)
    else:
        query = apply_access_filter(query, user)

    column = SORTABLE_COLUMNS.get(sort_by, Document.created_at)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    total = query.count()
    docs = query.order_by(ordering, Document.id).offset((page - 1) * limit).limit(limit).all()
    return docs, total


def update_document(db: Session, user, document_id: str, changes: dict) -> Document:
    doc = get_accessible_document(db, user, document_id)
    if doc.status == "deleted":
        raise ConflictError("Deleted documents cannot be edited")
    ensure_not_locked_by_other(db, doc, user.id)

    if "title" in changes and not (changes["title"] or "").strip():
        raise ValidationError("Document title cannot be empty")
    for key in EDITABLE_FIELDS:
        if key in changes:
            setattr(doc, key, changes[key].strip() if key == "title" else changes[key])
    doc.updated_at = utc_now()

    if doc.created_by != user.id:
        notification_service.document_updated(db, doc.created_by, doc.id, doc.title)
    db.commit()
    db.refresh(doc)
    return doc


def soft_delete(db: Session, user, document_id: str) -> Document:
    doc = get_accessible_document(db, user, document_id)
    if doc.status == "deleted":
        raise ConflictError("Document is already in the recycle bin")
    ensure_not_locked_by_other(db, doc, user.id)

    now = utc_now()
    doc.status = "deleted"
    doc.deleted_at = now
    doc.deleted_by = user.id
    doc.checked_out_by = None
    doc.checked_out_at = None
    doc.updated_at = now
    trail_service.add_trail(db, doc.id, "deleted", user_id=user.id, from_department=user.department_id)
    db.commit()
    db.refresh(doc)
    logger.info("Document %s moved to recycle bin by %s", doc.id, user.id)
    return doc


def bulk_soft_delete(db: Session, user, document_ids: list[str]) -> dict:
    processed: list[str] = []
    failed: list[dict] = []
    for document_id in document_ids:
        try:
            soft_delete(db, user, document_id)
            processed.append(document_id)
        except (NotFoundError, ConflictError, PermissionDeniedError) as exc:
            db.rollback()
            failed.append({"id": document_id, "error": exc.message})
    return {"processed": processed, "failed": failed}


def sign_document(db: Session, user, document_id: str) -> Document:
    doc = get_accessible_document(db, user, document_id)
    if not can_sign_document(user, document_view(doc)):
        raise PermissionDeniedError("You cannot sign this document")
    if doc.signed_at:
        raise ConflictError("Document is already signed")
    ensure_not_locked_by_other(db, doc, user.id)

    now = utc_now()
    doc.signed_at = now
    doc.signed_by = user.id
    doc.blockchain_status = "pending"
    doc.updated_at = now
    trail_service.add_trail(db, doc.id, "signed", user_id=user.id, from_department=user.department_id)
    if doc.created_by != user.id:
        notification_service.document_signed(db, doc.created_by, doc.id, doc.title, user.name)
    db.commit()
    db.refresh(doc)
    return doc


# --- files ---------------------------------------------------------------

def _attach_file(db: Session, doc: Document, user_id: str, filename: str,
                 content: bytes, mime_type: str | None) -> DocumentFile:
    if not content:
        raise ValidationError("Empty file")

    file_hash = sha256_bytes(content)
    duplicate = db.query(DocumentFile).filter(
        DocumentFile.document_id == doc.id,
        DocumentFile.file_hash == file_hash,
    ).first()
    if duplicate:
        raise ConflictError("A file with identical content is already attached to this document")

    stored_path, file_hash, file_size = store_file(doc.id, filename, content)
    has_files = db.query(DocumentFile.id).filter(DocumentFile.document_id == doc.id).first() is not None
    record = DocumentFile(
        id=str(uuid.uuid4()),
        document_id=doc.id,
        original_filename=filename,
        stored_path=stored_path,
        file_hash=file_hash,
        file_size_bytes=file_size,
        mime_type=mime_type,
        is_primary=not has_files,
        uploaded_by=user_id,
        created_at=utc_now(),
    )
    db.add(record)
    db.flush()
    return record


def add_file(db: Session, user, document_id: str, filename: str, content: bytes,
             mime_type: str | None) -> DocumentFile:
    doc = get_accessible_document(db, user, document_id)
    if doc.status == "deleted":
        raise ConflictError("Cannot attach files to a deleted document")
    ensure_not_locked_by_other(db, doc, user.id)

    record = _attach_file(db, doc, user.id, filename, content, mime_type)
    doc.updated_at = utc_now()
    db.commit()
    db.refresh(record)
    return record


def get_file(db: Session, document_id: str, file_id: str) -> DocumentFile:
    record = db.query(DocumentFile).filter(
        DocumentFile.id == file_id, DocumentFile.document_id == document_id
    ).first()
    if not record:
        raise NotFoundError("File not found")
    return record


def delete_file(db: Session, user, document_id: str, file_id: str):
    doc = get_accessible_document(db, user, document_id)
    ensure_not_locked_by_other(db, doc, user.id)
    record = get_file(db, document_id, file_id)
    was_primary = record.is_primary
    stored_path = record.stored_path

    db.delete(record)
    db.flush()
    if was_primary:
        successor = (
            db.query(DocumentFile)
            .filter(DocumentFile.document_id == document_id)
            .order_by(DocumentFile.created_at.asc(), DocumentFile.id)
            .first()
        )
        if successor:
            successor.is_primary = True
    doc.updated_at = utc_now()
    db.commit()
    remove_stored_file(stored_path)
