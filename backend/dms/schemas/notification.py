from typing import Any

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str
    type: str
    workflow_event: str | None
    metadata: dict[str, Any]
    is_read: bool
    read_at: str | None
    created_at: str


class UnreadCountResponse(BaseModel):
    count: int
