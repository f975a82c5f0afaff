from typing import Any

from pydantic import BaseModel

from dms.schemas.common import PageMeta, PaginationBlock


class DocumentUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    document_type: str | None = None
    classification: str | None = None
    origin: str | None = None
    remarks: str | None = None


class DocumentFileResponse(BaseModel):
    id: str
    document_id: str
    original_filename: str
    file_hash: str
    file_size_bytes: int
    mime_type: str | None
    is_primary: bool
    uploaded_by: str | None
    created_at: str


class DocumentResponse(BaseModel):
    id: str
    document_code: str
    title: str
    description: str | None
    document_type: str
    classification: str | None
    origin: str | None
    status: str
    department_id: str | None
    department_name: str | None
    created_by: str
    remarks: str | None
    work_flow: dict[str, str]
    work_flow_status: dict[str, Any]
    received_by: list[str]
    checked_out_by: str | None
    checked_out_at: str | None
    signed_at: str | None
    signed_by: str | None
    blockchain_status: str | None
    archived_at: str | None
    deleted_at: str | None
    created_at: str
    updated_at: str
    files: list[DocumentFileResponse] = []


class DocumentListResponse(BaseModel):
    data: list[DocumentResponse]
    pagination: PageMeta


class RecycleBinListResponse(BaseModel):
    data: list[DocumentResponse]
    pagination: PaginationBlock


class FileVerifyResponse(BaseModel):
    verified: bool
    filename: str
    stored_hash: str
    actual_hash: str


class ReleaseRequest(BaseModel):
    department_id: str
    request_action: str | list[str] | None = None
    remarks: str | None = None


class CancelRequest(BaseModel):
    remarks: str | None = None


class LockStatusResponse(BaseModel):
    locked: bool
    checked_out_by: str | None
    checked_out_at: str | None
    held_by_me: bool


class AllowedActionsResponse(BaseModel):
    document_id: str
    actions: list[str]


class TrailCreate(BaseModel):
    status: str
    action_id: str | None = None
    from_department: str | None = None
    to_department: str | None = None
    remarks: str | None = None


class TrailResponse(BaseModel):
    id: str
    document_id: str
    action_id: str | None
    action_name: str | None
    from_department: str | None
    from_department_name: str | None
    to_department: str | None
    to_department_name: str | None
    user_id: str | None
    user_name: str | None
    status: str
    remarks: str | None
    action_date: str
