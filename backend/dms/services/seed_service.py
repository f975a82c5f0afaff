"""Idempotent bootstrap data: permission catalog, system roles, first admin."""
import logging
import uuid

from sqlalchemy.orm import Session

from dms.config import settings
from dms.models.department import Department
from dms.models.role import Permission, Role, RolePermission, UserRole
from dms.models.user import User
from dms.services.permission_service import ALL_PERMISSIONS, SYSTEM_ROLES
from dms.utils.security import hash_password
from dms.utils.time import utc_now

logger = logging.getLogger("dms.seed")


def seed_permissions(db: Session) -> dict[str, Permission]:
    existing = {p.permission: p for p in db.query(Permission).all()}
    for name in ALL_PERMISSIONS:
        if name not in existing:
            perm = Permission(id=str(uuid.uuid4()), permission=name,
                              description=name.replace("_", " ").capitalize())
            db.add(perm)
            existing[name] = perm
    db.flush()
    return existing


def seed_system_roles(db: Session, permissions: dict[str, Permission]) -> dict[str, Role]:
    now = utc_now()
    roles: dict[str, Role] = {}
    for code, (name, description, granted) in SYSTEM_ROLES.items():
        role = db.query(Role).filter(Role.code == code).first()
        if role is None:
            role = Role(
                id=str(uuid.uuid4()), name=name, code=code, description=description,
                is_system_role=True, is_active=True, created_by="system",
                created_at=now, updated_at=now,
            )
            db.add(role)
            db.flush()
        have = {rp.permission_id for rp in role.role_permissions}
        for perm_name in granted:
            perm = permissions[perm_name]
            if perm.id not in have:
                role.role_permissions.append(RolePermission(
                    id=str(uuid.uuid4()), permission_id=perm.id, scope="global",
                    granted_by="system", granted_at=now, is_active=True,
                ))
        roles[code] = role
    db.flush()
    return roles


def seed_bootstrap_admin(db: Session, roles: dict[str, Role]) -> User | None:
    if db.query(User).first() is not None:
        return None

    now = utc_now()
    code = settings.default_department_code.upper()
    department = db.query(Department).filter(Department.code == code).first()
    if department is None:
        department = Department(
            id=str(uuid.uuid4()), name=settings.default_department_name, code=code,
            active=True, created_by="system", created_at=now, updated_at=now,
        )
        db.add(department)
        db.flush()

    admin = User(
        id=str(uuid.uuid4()), email=settings.admin_email.lower(),
        password_hash=hash_password(settings.admin_password),
        first_name="System", last_name="Administrator",
        department_id=department.id, active=True, created_at=now, updated_at=now,
    )
    db.add(admin)
    db.add(UserRole(
        id=str(uuid.uuid4()), user_id=admin.id, role_id=roles["SUPER_ADMIN"].id,
        assigned_by="system", assigned_at=now, is_active=True,
    ))
    logger.info("Created bootstrap administrator %s", admin.email)
    return admin


def seed_all(db: Session):
    permissions = seed_permissions(db)
    roles = seed_system_roles(db, permissions)
    seed_bootstrap_admin(db, roles)
    db.commit()
