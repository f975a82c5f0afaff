from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import get_current_user, require_permission
from dms.routers.documents import trail_to_response
from dms.schemas.common import MessageResponse
from dms.schemas.document import TrailResponse
from dms.services import trail_service

router = APIRouter(prefix="/trails", tags=["trails"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[TrailResponse], dependencies=[Depends(require_permission("document_audit_read"))])
async def search_trails(
    document_id: str | None = None,
    user_id: str | None = None,
    status: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    trails = trail_service.search_trails(db, document_id, user_id, status, date_from, date_to, limit, offset)
    return [trail_to_response(t) for t in trails]


@router.delete("/{trail_id}", response_model=MessageResponse,
               dependencies=[Depends(require_permission("document_routing_delete"))])
async def delete_trail(trail_id: str, db: Session = Depends(get_db)):
    trail_service.delete_trail(db, trail_id)
    return MessageResponse(message="Trail entry deleted")
