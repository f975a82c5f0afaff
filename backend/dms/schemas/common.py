from pydantic import BaseModel


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class PaginationBlock(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class BulkIdsRequest(BaseModel):
    document_ids: list[str]


class BulkFailure(BaseModel):
    id: str
    error: str


class BulkResult(BaseModel):
    processed: list[str]
    failed: list[BulkFailure]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
