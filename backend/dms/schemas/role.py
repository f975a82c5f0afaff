from pydantic import BaseModel


class PermissionResponse(BaseModel):
    id: str
    permission: str
    description: str | None


class RoleCreate(BaseModel):
    code: str
    name: str
    description: str | None = None
    permissions: list[str] = []


class RoleUpdate(BaseModel):
    code: str | None = None
    name: str | None = None
    description: str | None = None
    permissions: list[str] | None = None


class RoleResponse(BaseModel):
    id: str
    code: str
    name: str
    description: str | None
    is_system_role: bool
    is_active: bool
    permissions: list[str]
    created_at: str
    updated_at: str
