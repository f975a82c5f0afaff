from dms.models.department import Department
from dms.models.user import User
from dms.models.role import Permission, Role, RolePermission, UserRole
from dms.models.catalog import DocumentAction, DocumentType
from dms.models.document import Document, DocumentFile, DocumentTrail
from dms.models.notification import Notification, SavedSearch

__all__ = [
    "Department", "User", "Permission", "Role", "RolePermission", "UserRole",
    "DocumentAction", "DocumentType", "Document", "DocumentFile", "DocumentTrail",
    "Notification", "SavedSearch",
]
