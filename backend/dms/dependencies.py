from dataclasses import dataclass, field

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from dms.config import settings
from dms.database import get_db
from dms.exceptions import AuthenticationError, PermissionDeniedError
from dms.models.user import User
from dms.services import permission_service
from dms.services.auth_service import auth_service


@dataclass
class CurrentUser:
    id: str
    email: str
    name: str
    department_id: str
    token: str
    permissions: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)

    def can(self, *permissions: str) -> bool:
        return any(p in self.permissions for p in permissions)


def _extract_token(request: Request, authorization: str | None) -> str | None:
    if authorization:
        if not authorization.startswith("Bearer "):
            raise AuthenticationError("Malformed authorization header")
        return authorization[7:]
    return request.cookies.get(settings.auth_cookie_name)


async def get_current_user(
    request: Request,
    authorization: str | None = Header(None),
    db: Session = Depends(get_db),
) -> CurrentUser:
    token = _extract_token(request, authorization)
    if not token:
        raise AuthenticationError("Authentication required")
    user_id = auth_service.resolve(token)
    if user_id is None:
        raise AuthenticationError("Session expired or invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.active:
        auth_service.logout(token)
        raise AuthenticationError("Account is no longer active")

    return CurrentUser(
        id=user.id,
        email=user.email,
        name=user.full_name,
        department_id=user.department_id,
        token=token,
        permissions=permission_service.get_user_permissions(db, user.id),
        roles=permission_service.get_user_role_codes(db, user.id),
    )


def require_permission(*permissions: str):
    """Dependency factory: pass when the user holds any of ``permissions``."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not user.can(*permissions):
            raise PermissionDeniedError(required_permissions=list(permissions))
        return user

    return checker
