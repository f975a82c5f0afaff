from pydantic import BaseModel

from dms.schemas.common import PageMeta


class DocumentTypeCreate(BaseModel):
    name: str
    description: str | None = None
    active: bool = True


class DocumentTypeUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    active: bool | None = None


class DocumentTypeResponse(BaseModel):
    id: str
    name: str
    description: str | None
    active: bool
    created_at: str
    updated_at: str


class DocumentTypeListResponse(BaseModel):
    data: list[DocumentTypeResponse]
    meta: PageMeta


class DocumentActionCreate(BaseModel):
    action_name: str
    description: str | None = None
    sender_tag: str | None = None
    recipient_tag: str | None = None
    action_date: str | None = None
    status: bool = True


class DocumentActionUpdate(BaseModel):
    action_name: str | None = None
    description: str | None = None
    sender_tag: str | None = None
    recipient_tag: str | None = None
    action_date: str | None = None
    status: bool | None = None


class DocumentActionResponse(BaseModel):
    id: str
    action_name: str
    description: str | None
    sender_tag: str | None
    recipient_tag: str | None
    action_date: str | None
    status: bool
    created_at: str
    updated_at: str


class DocumentActionListResponse(BaseModel):
    data: list[DocumentActionResponse]
    meta: PageMeta
