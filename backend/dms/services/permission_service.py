"""Role-based permission resolution backed by the roles tables."""
from sqlalchemy import or_
from sqlalchemy.orm import Session

from dms.models.role import Permission, Role, RolePermission, UserRole
from dms.utils.time import utc_now

DOCUMENT_PERMISSIONS = [
    "document_read", "document_write", "document_edit", "document_delete",
    "document_create", "document_upload", "document_download", "document_share",
    "document_archive", "document_restore", "document_move", "document_copy",
    "document_metadata_read", "document_metadata_write", "document_metadata_edit",
    "document_routing_read", "document_routing_create", "document_routing_edit",
    "document_routing_delete", "document_routing_approve",
    "document_transfer_initiate", "document_transfer_approve",
    "document_transfer_receive", "document_transfer_reject", "document_transfer_track",
    "document_custody_view", "document_custody_transfer",
    "document_custody_receive", "document_custody_witness",
    "document_audit_read", "document_audit_export", "document_audit_verify",
    "document_recycle_view", "document_recycle_restore",
    "document_recycle_permanent_delete", "document_recycle_bulk_restore",
    "document_recycle_bulk_delete",
]

ADMIN_PERMISSIONS = [
    "document_type_read", "document_type_create", "document_type_edit", "document_type_delete",
    "department_read", "department_create", "department_edit", "department_delete",
    "department_users_manage",
    "user_read", "user_create", "user_edit", "user_delete", "user_activate", "user_deactivate",
    "role_read", "role_create", "role_edit", "role_delete", "role_assign",
    "permission_read", "permission_create", "permission_edit", "permission_delete",
    "permission_assign", "permission_revoke",
    "notification_read", "notification_send", "notification_manage",
    "report_read", "report_generate", "report_export", "report_schedule",
]

SYSTEM_PERMISSIONS = [
    "system_settings_read", "system_settings_write", "system_logs_read",
    "system_backup", "system_restore", "system_maintenance",
]

ALL_PERMISSIONS = DOCUMENT_PERMISSIONS + ADMIN_PERMISSIONS + SYSTEM_PERMISSIONS

ADMIN_ROLE_CODES = ["SUPER_ADMIN", "ADMIN", "ADMIN1", "ADMIN2", "ADMIN3"]

USER_ROLE_PERMISSIONS = [
    "document_read", "document_write", "document_edit", "document_create",
    "document_upload", "document_download", "document_share", "document_archive",
    "document_restore", "document_routing_read", "document_routing_create",
    "document_transfer_initiate", "document_transfer_receive",
    "document_transfer_reject", "document_transfer_track",
    "document_recycle_view", "document_recycle_restore",
    "document_type_read", "department_read", "notification_read",
]

# code -> (name, description, permissions)
SYSTEM_ROLES = {
    "SUPER_ADMIN": ("Super Administrator", "Unrestricted access", ALL_PERMISSIONS),
    "ADMIN": (
        "Administrator",
        "Manages catalogs, users and documents",
        [p for p in DOCUMENT_PERMISSIONS + ADMIN_PERMISSIONS if not p.startswith("permission_")],
    ),
    "USER": ("User", "Creates and routes documents", USER_ROLE_PERMISSIONS),
    "VIEW_ONLY": ("Viewer", "Read-only access to documents", ["document_read"]),
}


def _active_assignment_filter(user_id: str):
    now = utc_now()
    return (
        UserRole.user_id == user_id,
        UserRole.is_active.is_(True),
        or_(UserRole.expires_at.is_(None), UserRole.expires_at > now),
        Role.is_active.is_(True),
    )


def get_user_roles(db: Session, user_id: str) -> list[Role]:
    return (
        db.query(Role)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(*_active_assignment_filter(user_id))
        .order_by(Role.name)
        .all()
    )


def get_user_role_codes(db: Session, user_id: str) -> list[str]:
    return [role.code for role in get_user_roles(db, user_id)]


def get_user_permissions(db: Session, user_id: str) -> list[str]:
    rows = (
        db.query(Permission.permission)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .join(Role, Role.id == RolePermission.role_id)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(RolePermission.is_active.is_(True), *_active_assignment_filter(user_id))
        .distinct()
        .all()
    )
    return sorted(row[0] for row in rows)


def has_permission(db: Session, user_id: str, permission: str) -> bool:
    return permission in get_user_permissions(db, user_id)


def has_any_permission(db: Session, user_id: str, permissions: list[str]) -> bool:
    granted = set(get_user_permissions(db, user_id))
    return any(p in granted for p in permissions)


def has_all_permissions(db: Session, user_id: str, permissions: list[str]) -> bool:
    granted = set(get_user_permissions(db, user_id))
    return all(p in granted for p in permissions)


def has_role(db: Session, user_id: str, role_code: str) -> bool:
    return role_code in get_user_role_codes(db, user_id)


def has_any_role(db: Session, user_id: str, role_codes: list[str]) -> bool:
    codes = set(get_user_role_codes(db, user_id))
    return any(code in codes for code in role_codes)


def is_super_admin(db: Session, user_id: str) -> bool:
    return has_role(db, user_id, "SUPER_ADMIN")


def is_admin(db: Session, user_id: str) -> bool:
    return has_any_role(db, user_id, ADMIN_ROLE_CODES)


def can_manage_users(db: Session, user_id: str) -> bool:
    return has_any_permission(
        db, user_id, ["user_create", "user_edit", "user_delete", "user_activate", "user_deactivate"]
    )


def can_manage_roles(db: Session, user_id: str) -> bool:
    return has_any_permission(db, user_id, ["role_create", "role_edit", "role_delete", "role_assign"])


def can_manage_documents(db: Session, user_id: str) -> bool:
    return has_any_permission(
        db, user_id, ["document_create", "document_edit", "document_delete", "document_archive"]
    )


def can_view_documents(db: Session, user_id: str) -> bool:
    return has_permission(db, user_id, "document_read")
