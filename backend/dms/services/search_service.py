import math
import uuid
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, joinedload

from dms.exceptions import NotFoundError, ValidationError
from dms.models.department import Department
from dms.models.document import Document
from dms.models.notification import SavedSearch
from dms.services.document_service import apply_access_filter
from dms.utils.time import humanize_timestamp, utc_now

FILTER_KEYS = (
    "document_type", "department", "status", "signature_status",
    "classification", "origin", "date_from", "date_to", "sort_by",
)

SIGNATURE_STATUSES = ("signed", "unsigned", "blockchain-verified")

SORT_ORDERS = {
    "relevance": (Document.updated_at.desc(),),
    "date": (Document.created_at.desc(),),
    "name": (Document.title.asc(),),
    "type": (Document.document_type.asc(), Document.title.asc()),
}


def _validate_date(value: str, field: str) -> str:
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise ValidationError(f"Invalid {field}: expected YYYY-MM-DD") from exc
    return value


def _is_set(value) -> bool:
    return bool(value) and value != "all"


def search_documents(db: Session, user, query: str | None = None, page: int = 1, limit: int = 10,
                     **filters) -> dict:
    q = db.query(Document).options(joinedload(Document.department)).filter(Document.status != "deleted")
    q = apply_access_filter(q, user)

    if query and query.strip():
        q = q.filter(
            text("documents.rowid IN (SELECT rowid FROM documents_fts WHERE documents_fts MATCH :fts_query)")
            .bindparams(fts_query=query.strip())
        )

    if _is_set(filters.get("document_type")):
        q = q.filter(Document.document_type == filters["document_type"])
    if _is_set(filters.get("status")):
        q = q.filter(Document.status == filters["status"])
    if _is_set(filters.get("classification")):
        q = q.filter(Document.classification == filters["classification"])
    if _is_set(filters.get("origin")):
        q = q.filter(Document.origin == filters["origin"])
    if _is_set(filters.get("department")):
        department = filters["department"]
        q = q.join(Department, Document.department_id == Department.id).filter(
            Department.active.is_(True),
            (Department.name == department) | (Department.code == department),
        )

    signature_status = filters.get("signature_status")
    if _is_set(signature_status):
        if signature_status not in SIGNATURE_STATUSES:
            raise ValidationError(f"Invalid signature_status: {signature_status}")
        if signature_status == "signed":
            q = q.filter(Document.signed_at.isnot(None))
        elif signature_status == "unsigned":
            q = q.filter(Document.signed_at.is_(None))
        else:
            q = q.filter(Document.blockchain_status == "verified")

    if filters.get("date_from"):
        q = q.filter(Document.created_at >= _validate_date(filters["date_from"], "date_from"))
    if filters.get("date_to"):
        date_to = _validate_date(filters["date_to"], "date_to")
        q = q.filter(Document.created_at <= f"{date_to}T23:59:59Z")

    ordering = SORT_ORDERS.get(filters.get("sort_by") or "relevance", SORT_ORDERS["relevance"])
    try:
        total = q.count()
        docs = q.order_by(*ordering, Document.id).offset((page - 1) * limit).limit(limit).all()
    except OperationalError as exc:
        # Malformed FTS syntax surfaces here rather than as a 500.
        db.rollback()
        raise ValidationError("Invalid search query") from exc

    return {
        "documents": [_search_item(doc) for doc in docs],
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def _search_item(doc: Document) -> dict:
    return {
        "id": doc.id,
        "document_code": doc.document_code,
        "title": doc.title,
        "description": doc.description,
        "document_type": doc.document_type,
        "classification": doc.classification,
        "origin": doc.origin,
        "status": doc.status,
        "department": doc.department.name if doc.department else None,
        "signed": doc.signed_at is not None,
        "blockchain_status": doc.blockchain_status,
        "created_at": doc.created_at,
        "updated_at": doc.updated_at,
        "modified": humanize_timestamp(doc.updated_at),
    }


# --- saved searches ------------------------------------------------------

def list_saved(db: Session, user_id: str) -> list[SavedSearch]:
    return (
        db.query(SavedSearch)
        .filter(SavedSearch.user_id == user_id)
        .order_by(SavedSearch.is_favorite.desc(), SavedSearch.created_at.desc())
        .all()
    )


def get_saved(db: Session, user_id: str, search_id: str) -> SavedSearch:
    saved = db.query(SavedSearch).filter(
        SavedSearch.id == search_id, SavedSearch.user_id == user_id
    ).first()
    if not saved:
        raise NotFoundError("Saved search not found")
    return saved


def _clean_filters(filters: dict | None) -> dict:
    return {k: v for k, v in (filters or {}).items() if k in FILTER_KEYS and v is not None}


def create_saved(db: Session, user_id: str, data: dict) -> SavedSearch:
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("Saved search name is required")
    saved = SavedSearch(
        id=str(uuid.uuid4()),
        user_id=user_id,
        name=name,
        description=data.get("description"),
        query=data.get("query") or "",
        filters=_clean_filters(data.get("filters")),
        is_favorite=bool(data.get("is_favorite")),
        is_scheduled=bool(data.get("is_scheduled")),
        schedule_frequency=data.get("schedule_frequency"),
        results_count=0,
        created_at=utc_now(),
    )
    db.add(saved)
    db.commit()
    db.refresh(saved)
    return saved


def update_saved(db: Session, user_id: str, search_id: str, changes: dict) -> SavedSearch:
    saved = get_saved(db, user_id, search_id)
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Saved search name cannot be empty")
        saved.name = name
    for key in ("description", "is_favorite", "is_scheduled", "schedule_frequency"):
        if key in changes:
            setattr(saved, key, changes[key])
    if "query" in changes or "filters" in changes:
        if "query" in changes:
            saved.query = changes["query"] or ""
        if "filters" in changes:
            saved.filters = _clean_filters(changes["filters"])
        saved.last_run = utc_now()
    db.commit()
    db.refresh(saved)
    return saved


def delete_saved(db: Session, user_id: str, search_id: str):
    saved = get_saved(db, user_id, search_id)
    db.delete(saved)
    db.commit()


def execute_saved(db: Session, user, search_id: str, page: int = 1, limit: int = 10) -> dict:
    saved = get_saved(db, user.id, search_id)
    result = search_documents(db, user, saved.query, page=page, limit=limit, **(saved.filters or {}))
    saved.last_run = utc_now()
    saved.results_count = result["total"]
    db.commit()
    return result
