"""Boolean document permission checks.

The checks take a user view (anything with ``permissions``, ``roles`` as role
codes, and ``department_id``) and a :class:`DocumentView`. They perform no I/O
so the same rules drive both request guards and the allowed-actions listing.
"""
from dataclasses import dataclass
from typing import Protocol, Sequence

VIEW_ONLY_ROLES = ("view_only", "viewer", "read_only")
USER_ROLES = ("user", "basic_user", "editor")
ADMIN_ROLES = ("admin", "administrator", "super_user")
MANAGER_ROLES = ("manager", "supervisor", "lead")

IN_TRANSIT_STATUSES = ("dispatch", "transit", "outgoing")


class UserView(Protocol):
    permissions: Sequence[str]
    roles: Sequence[str]
    department_id: str | None


@dataclass
class DocumentView:
    status: str | None = None
    department_id: str | None = None
    is_owned: bool | None = None


def has_permission(user: UserView | None, permission: str) -> bool:
    if user is None:
        return False
    return permission in (user.permissions or ())


def has_any_permission(user: UserView | None, permissions: Sequence[str]) -> bool:
    if user is None:
        return False
    return any(p in (user.permissions or ()) for p in permissions)


def has_all_permissions(user: UserView | None, permissions: Sequence[str]) -> bool:
    if user is None:
        return False
    return all(p in (user.permissions or ()) for p in permissions)


def has_role(user: UserView | None, role_code: str) -> bool:
    if user is None:
        return False
    return role_code.lower() in {r.lower() for r in user.roles or ()}


def has_any_role(user: UserView | None, role_codes: Sequence[str]) -> bool:
    if user is None:
        return False
    held = {r.lower() for r in user.roles or ()}
    return any(code.lower() in held for code in role_codes)


def has_view_only_role(user: UserView | None) -> bool:
    return has_any_role(user, VIEW_ONLY_ROLES)


def has_user_role(user: UserView | None) -> bool:
    return has_any_role(user, USER_ROLES)


def has_admin_role(user: UserView | None) -> bool:
    return has_any_role(user, ADMIN_ROLES)


def has_manager_role(user: UserView | None) -> bool:
    return has_any_role(user, MANAGER_ROLES)


def is_owned_by_user_department(document: DocumentView | None, user: UserView | None) -> bool:
    if user is None or document is None:
        return False
    if document.is_owned is not None:
        return document.is_owned
    if document.department_id:
        return document.department_id == user.department_id
    return True


def is_in_transit(document: DocumentView) -> bool:
    status = (document.status or "").lower()
    return "intransit" in status or status in IN_TRANSIT_STATUSES


def can_view_documents(user: UserView | None) -> bool:
    if user is None:
        return False
    if has_view_only_role(user):
        return True
    return has_permission(user, "document_read")


def can_view_document(user: UserView | None) -> bool:
    return can_view_documents(user)


def _can_modify_owned(user: UserView | None, document: DocumentView | None) -> bool:
    if user is None or document is None or has_view_only_role(user):
        return False
    if not is_owned_by_user_department(document, user):
        return False
    return has_any_permission(user, ("document_edit", "document_write"))


def can_edit_document_details(user: UserView | None, document: DocumentView | None) -> bool:
    return _can_modify_owned(user, document)


def can_edit_document(user: UserView | None, document: DocumentView | None) -> bool:
    return _can_modify_owned(user, document)


def can_sign_document(user: UserView | None, document: DocumentView | None) -> bool:
    return _can_modify_owned(user, document)


def can_release_document(user: UserView | None, document: DocumentView | None) -> bool:
    """Release forwards a document received from elsewhere, so it needs a non-owned one."""
    if user is None or document is None or has_view_only_role(user):
        return False
    if is_owned_by_user_department(document, user):
        return False
    return has_any_permission(user, ("document_transfer_initiate", "document_transfer_approve"))


def can_complete_document(user: UserView | None, document: DocumentView | None) -> bool:
    if user is None or document is None or has_view_only_role(user):
        return False
    return has_permission(user, "document_transfer_receive")


def can_cancel_document(user: UserView | None, document: DocumentView | None) -> bool:
    if user is None or document is None or has_view_only_role(user):
        return False
    if not is_in_transit(document):
        return False
    return has_any_permission(user, ("document_transfer_reject", "document_transfer_initiate"))


def can_archive_document(user: UserView | None, document: DocumentView | None) -> bool:
    if user is None or document is None or has_view_only_role(user):
        return False
    return is_owned_by_user_department(document, user) and has_permission(user, "document_archive")


def can_delete_document(user: UserView | None, document: DocumentView | None) -> bool:
    if user is None or document is None or has_view_only_role(user):
        return False
    return is_owned_by_user_department(document, user) and has_permission(user, "document_delete")


def get_allowed_actions(user: UserView | None, document: DocumentView | None) -> list[str]:
    if user is None:
        return []

    actions = ["copy_code"]
    if can_view_documents(user):
        actions.append("view_details")
    if can_view_document(user):
        actions.append("view_document")
    if can_edit_document_details(user, document):
        actions.append("edit_details")
    if can_edit_document(user, document):
        actions.append("edit_document")
    if can_sign_document(user, document):
        actions.append("sign_document")
    if can_release_document(user, document):
        actions.append("release")
    if can_complete_document(user, document):
        actions.append("complete")
    if can_cancel_document(user, document):
        actions.append("cancel")
    if can_archive_document(user, document):
        actions.append("archive")
    if can_delete_document(user, document):
        actions.append("delete")
    return actions
