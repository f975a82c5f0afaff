from pydantic import BaseModel

from dms.schemas.common import PageMeta


class DepartmentCreate(BaseModel):
    name: str
    code: str


class DepartmentUpdate(BaseModel):
    name: str | None = None
    code: str | None = None
    active: bool | None = None


class DepartmentResponse(BaseModel):
    id: str
    name: str
    code: str
    active: bool
    created_at: str
    updated_at: str


class DepartmentListResponse(BaseModel):
    data: list[DepartmentResponse]
    pagination: PageMeta
