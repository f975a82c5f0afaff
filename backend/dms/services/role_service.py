import logging
import uuid

from sqlalchemy.orm import Session, selectinload

from dms.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from dms.models.role import Permission, Role, RolePermission, UserRole
from dms.models.user import User
from dms.utils.time import utc_now

logger = logging.getLogger("dms.roles")


def list_permissions(db: Session) -> list[Permission]:
    return db.query(Permission).order_by(Permission.permission).all()


def list_roles(db: Session) -> list[Role]:
    return (
        db.query(Role)
        .options(selectinload(Role.role_permissions).joinedload(RolePermission.permission))
        .filter(Role.is_active.is_(True))
        .order_by(Role.name)
        .all()
    )


def get_role(db: Session, role_id: str) -> Role:
    role = db.query(Role).filter(Role.id == role_id).first()
    if not role:
        raise NotFoundError("Role not found")
    return role


def role_permission_names(role: Role) -> list[str]:
    return sorted(rp.permission.permission for rp in role.role_permissions if rp.is_active)


def _ensure_unique(db: Session, code: str | None, name: str | None, exclude_id: str | None = None):
    for column, value, label in ((Role.code, code, "code"), (Role.name, name, "name")):
        if value is None:
            continue
        query = db.query(Role.id).filter(column == value)
        if exclude_id:
            query = query.filter(Role.id != exclude_id)
        if query.first():
            raise ConflictError(f"Role {label} already exists: {value}")


def _resolve_permissions(db: Session, names: list[str]) -> list[Permission]:
    found = {p.permission: p for p in db.query(Permission).filter(Permission.permission.in_(names)).all()}
    unknown = sorted(set(names) - set(found))
    if unknown:
        raise ValidationError("Unknown permissions", details={"unknown": unknown})
    return [found[name] for name in dict.fromkeys(names)]


def _replace_grants(db: Session, role: Role, permissions: list[Permission], granted_by: str | None):
    now = utc_now()
    role.role_permissions.clear()
    # flush deletes first; (role_id, permission_id) is unique
    db.flush()
    for perm in permissions:
        role.role_permissions.append(RolePermission(
            id=str(uuid.uuid4()), permission_id=perm.id, scope="global",
            granted_by=granted_by, granted_at=now, is_active=True,
        ))


def create_role(db: Session, data: dict, created_by: str | None = None) -> Role:
    code = (data.get("code") or "").strip().upper()
    name = (data.get("name") or "").strip()
    if not code or not name:
        raise ValidationError("Role code and name are required")
    _ensure_unique(db, code, name)
    permissions = _resolve_permissions(db, data.get("permissions") or [])

    now = utc_now()
    role = Role(
        id=str(uuid.uuid4()),
        code=code,
        name=name,
        description=data.get("description"),
        is_system_role=False,
        is_active=True,
        created_by=created_by,
        updated_by=created_by,
        created_at=now,
        updated_at=now,
    )
    db.add(role)
    db.flush()
    _replace_grants(db, role, permissions, created_by)
    db.commit()
    db.refresh(role)
    logger.info("Role %s created with %d permissions", code, len(permissions))
    return role


def update_role(db: Session, role_id: str, changes: dict, updated_by: str | None = None) -> Role:
    role = get_role(db, role_id)
    name = changes.get("name").strip() if changes.get("name") else None
    code = changes.get("code").strip().upper() if changes.get("code") else None
    _ensure_unique(db, code, name, exclude_id=role.id)
    if name:
        role.name = name
    if code:
        role.code = code
    if "description" in changes:
        role.description = changes["description"]
    if changes.get("permissions") is not None:
        _replace_grants(db, role, _resolve_permissions(db, changes["permissions"]), updated_by)
    role.updated_by = updated_by
    role.updated_at = utc_now()
    db.commit()
    db.refresh(role)
    return role


def delete_role(db: Session, role_id: str, deleted_by: str | None = None):
    role = get_role(db, role_id)
    if role.is_system_role:
        raise PermissionDeniedError("System roles cannot be deleted")
    in_use = (
        db.query(UserRole.id)
        .join(User, User.id == UserRole.user_id)
        .filter(UserRole.role_id == role.id, UserRole.is_active.is_(True), User.active.is_(True))
        .first()
    )
    if in_use:
        raise ConflictError("Role is still assigned to active users")
    role.is_active = False
    role.updated_by = deleted_by
    role.updated_at = utc_now()
    db.commit()
    logger.info("Role %s deactivated", role.code)


def assign_role(db: Session, user_id: str, role_id: str, assigned_by: str | None = None,
                expires_at: str | None = None) -> UserRole:
    if not db.query(User.id).filter(User.id == user_id).first():
        raise NotFoundError("User not found")
    role = get_role(db, role_id)
    if not role.is_active:
        raise ValidationError("Role is inactive")

    now = utc_now()
    assignment = db.query(UserRole).filter(UserRole.user_id == user_id, UserRole.role_id == role_id).first()
    if assignment:
        if assignment.is_active and not expires_at:
            raise ConflictError("Role already assigned to this user")
        assignment.is_active = True
        assignment.assigned_by = assigned_by
        assignment.assigned_at = now
        assignment.expires_at = expires_at
    else:
        assignment = UserRole(
            id=str(uuid.uuid4()), user_id=user_id, role_id=role_id,
            assigned_by=assigned_by, assigned_at=now, is_active=True, expires_at=expires_at,
        )
        db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


def revoke_role(db: Session, user_id: str, role_id: str):
    assignment = db.query(UserRole).filter(
        UserRole.user_id == user_id, UserRole.role_id == role_id, UserRole.is_active.is_(True)
    ).first()
    if not assignment:
        raise NotFoundError("Role assignment not found")
    assignment.is_active = False
    db.commit()
