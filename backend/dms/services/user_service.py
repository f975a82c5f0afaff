import logging
import uuid

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from dms.exceptions import ConflictError, NotFoundError, ValidationError
from dms.models.department import Department
from dms.models.role import Role, UserRole
from dms.models.user import User
from dms.services.auth_service import auth_service
from dms.utils.security import hash_password
from dms.utils.time import utc_now

logger = logging.getLogger("dms.users")

MIN_PASSWORD_LENGTH = 8


def list_users(db: Session, page: int = 1, limit: int = 10, q: str | None = None,
               department_id: str | None = None) -> tuple[list[User], int]:
    query = db.query(User).options(joinedload(User.department))
    if q:
        needle = q.lower()
        query = query.filter(or_(
            func.lower(User.first_name).contains(needle),
            func.lower(User.last_name).contains(needle),
            func.lower(User.email).contains(needle),
        ))
    if department_id:
        query = query.filter(User.department_id == department_id)
    total = query.count()
    users = (
        query.order_by(User.last_name, User.first_name, User.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return users, total


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def _ensure_department(db: Session, department_id: str):
    if not db.query(Department.id).filter(Department.id == department_id).first():
        raise NotFoundError("Department not found")


def _ensure_email_free(db: Session, email: str, exclude_id: str | None = None):
    query = db.query(User.id).filter(func.lower(User.email) == email.lower())
    if exclude_id:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise ConflictError("A user with this email already exists")


def _check_password(password: str):
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def create_user(db: Session, data: dict, created_by: str | None = None) -> User:
    email = (data.get("email") or "").strip().lower()
    if not email:
        raise ValidationError("Email is required")
    _check_password(data.get("password"))
    _ensure_email_free(db, email)
    _ensure_department(db, data["department_id"])

    now = utc_now()
    user = User(
        id=str(uuid.uuid4()),
        email=email,
        password_hash=hash_password(data["password"]),
        first_name=data["first_name"].strip(),
        last_name=data["last_name"].strip(),
        title=data.get("title"),
        department_id=data["department_id"],
        active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    db.flush()

    for code in data.get("roles") or []:
        role = db.query(Role).filter(Role.code == code, Role.is_active.is_(True)).first()
        if not role:
            raise ValidationError(f"Unknown role: {code}")
        db.add(UserRole(
            id=str(uuid.uuid4()), user_id=user.id, role_id=role.id,
            assigned_by=created_by, assigned_at=now, is_active=True,
        ))
    db.commit()
    db.refresh(user)
    logger.info("User %s created", user.email)
    return user


def update_user(db: Session, user_id: str, changes: dict) -> User:
    user = get_user(db, user_id)
    if changes.get("email") is not None:
        email = changes["email"].strip().lower()
        _ensure_email_free(db, email, exclude_id=user.id)
        user.email = email
    if changes.get("department_id") is not None:
        _ensure_department(db, changes["department_id"])
        user.department_id = changes["department_id"]
    for key in ("first_name", "last_name"):
        if changes.get(key) is not None:
            setattr(user, key, changes[key].strip())
    if "title" in changes:
        user.title = changes["title"]
    if changes.get("password"):
        _check_password(changes["password"])
        user.password_hash = hash_password(changes["password"])
        auth_service.revoke_user(user.id)
    user.updated_at = utc_now()
    db.commit()
    db.refresh(user)
    return user


def toggle_status(db: Session, user_id: str, acting_user_id: str) -> User:
    user = get_user(db, user_id)
    if user.id == acting_user_id:
        raise ValidationError("You cannot change your own account status")
    user.active = not user.active
    user.updated_at = utc_now()
    if not user.active:
        auth_service.revoke_user(user.id)
    db.commit()
    db.refresh(user)
    logger.info("User %s %s", user.email, "activated" if user.active else "deactivated")
    return user
