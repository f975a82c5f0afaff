from pydantic import BaseModel

from dms.schemas.common import PageMeta


class UserCreate(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str
    title: str | None = None
    department_id: str
    roles: list[str] = []


class UserUpdate(BaseModel):
    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    department_id: str | None = None


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    title: str | None
    department_id: str
    department_name: str | None
    active: bool
    roles: list[str] = []
    last_login_at: str | None
    created_at: str
    updated_at: str


class UserListResponse(BaseModel):
    data: list[UserResponse]
    pagination: PageMeta


class RoleAssignRequest(BaseModel):
    role_id: str
    expires_at: str | None = None


class RoleAssignmentResponse(BaseModel):
    id: str
    user_id: str
    role_id: str
    assigned_by: str | None
    assigned_at: str
    is_active: bool
    expires_at: str | None
