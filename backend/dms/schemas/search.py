from typing import Any

from pydantic import BaseModel


class SearchResultItem(BaseModel):
    id: str
    document_code: str
    title: str
    description: str | None
    document_type: str
    classification: str | None
    origin: str | None
    status: str
    department: str | None
    signed: bool
    blockchain_status: str | None
    created_at: str
    updated_at: str
    modified: str


class SearchResponse(BaseModel):
    documents: list[SearchResultItem]
    total: int
    page: int
    limit: int
    total_pages: int


class SavedSearchCreate(BaseModel):
    name: str
    description: str | None = None
    query: str = ""
    filters: dict[str, Any] = {}
    is_favorite: bool = False
    is_scheduled: bool = False
    schedule_frequency: str | None = None


class SavedSearchUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    query: str | None = None
    filters: dict[str, Any] | None = None
    is_favorite: bool | None = None
    is_scheduled: bool | None = None
    schedule_frequency: str | None = None


class SavedSearchResponse(BaseModel):
    id: str
    name: str
    description: str | None
    query: str
    filters: dict[str, Any]
    last_run: str | None
    results_count: int
    is_favorite: bool
    is_scheduled: bool
    schedule_frequency: str | None
    created_at: str
