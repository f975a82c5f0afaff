import logging
import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session

from dms.exceptions import ConflictError, NotFoundError, ValidationError
from dms.models.department import Department
from dms.models.document import Document
from dms.models.user import User
from dms.utils.time import utc_now

logger = logging.getLogger("dms.departments")


def list_departments(db: Session, page: int = 1, limit: int = 10,
                     search: str | None = None) -> tuple[list[Department], int]:
    query = db.query(Department)
    if search:
        query = query.filter(func.lower(Department.name).contains(search.lower()))
    total = query.count()
    items = (
        query.order_by(Department.created_at.desc(), Department.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def get_department(db: Session, department_id: str) -> Department:
    dept = db.query(Department).filter(Department.id == department_id).first()
    if not dept:
        raise NotFoundError("Department not found")
    return dept


def _ensure_code_free(db: Session, code: str, exclude_id: str | None = None):
    query = db.query(Department.id).filter(Department.code == code)
    if exclude_id:
        query = query.filter(Department.id != exclude_id)
    if query.first():
        raise ConflictError(f"Department code already exists: {code}")


def create_department(db: Session, name: str, code: str, created_by: str | None = None) -> Department:
    name = (name or "").strip()
    code = (code or "").strip().upper()
    if not name or not code:
        raise ValidationError("Department name and code are required")
    _ensure_code_free(db, code)

    now = utc_now()
    dept = Department(
        id=str(uuid.uuid4()),
        name=name,
        code=code,
        active=True,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
    db.add(dept)
    db.commit()
    db.refresh(dept)
    logger.info("Department %s created", code)
    return dept


def update_department(db: Session, department_id: str, changes: dict) -> Department:
    dept = get_department(db, department_id)
    if "name" in changes and changes["name"] is not None:
        name = changes["name"].strip()
        if not name:
            raise ValidationError("Department name cannot be empty")
        dept.name = name
    if "code" in changes and changes["code"] is not None:
        code = changes["code"].strip().upper()
        if not code:
            raise ValidationError("Department code cannot be empty")
        _ensure_code_free(db, code, exclude_id=dept.id)
        dept.code = code
    if "active" in changes and changes["active"] is not None:
        dept.active = bool(changes["active"])
    dept.updated_at = utc_now()
    db.commit()
    db.refresh(dept)
    return dept


def set_active(db: Session, department_id: str, active: bool) -> Department:
    dept = get_department(db, department_id)
    dept.active = active
    dept.updated_at = utc_now()
    db.commit()
    db.refresh(dept)
    return dept


def toggle_status(db: Session, department_id: str) -> Department:
    dept = get_department(db, department_id)
    return set_active(db, dept.id, not dept.active)


def delete_department(db: Session, department_id: str):
    dept = get_department(db, department_id)
    if db.query(User.id).filter(User.department_id == dept.id).first():
        raise ConflictError("Department still has users assigned")
    if db.query(Document.id).filter(Document.department_id == dept.id).first():
        raise ConflictError("Department still owns documents")
    db.delete(dept)
    db.commit()
    logger.info("Department %s deleted", dept.code)
