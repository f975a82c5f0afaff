from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user, require_permission
from dms.models.notification import SavedSearch
from dms.schemas.common import MessageResponse
from dms.schemas.search import SavedSearchCreate, SavedSearchResponse, SavedSearchUpdate, SearchResponse
from dms.services import search_service

router = APIRouter(prefix="/search", tags=["search"], dependencies=[Depends(get_current_user)])


def _saved_to_response(saved: SavedSearch) -> SavedSearchResponse:
    return SavedSearchResponse(
        id=saved.id,
        name=saved.name,
        description=saved.description,
        query=saved.query,
        filters=saved.filters or {},
        last_run=saved.last_run,
        results_count=saved.results_count,
        is_favorite=saved.is_favorite,
        is_scheduled=saved.is_scheduled,
        schedule_frequency=saved.schedule_frequency,
        created_at=saved.created_at,
    )


@router.get("", response_model=SearchResponse)
async def search(
    query: str | None = None,
    document_type: str | None = None,
    department: str | None = None,
    status: str | None = None,
    signature_status: str | None = None,
    classification: str | None = None,
    origin: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    sort_by: str = Query("relevance", pattern="^(relevance|date|name|type)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_permission("document_read")),
    db: Session = Depends(get_db),
):
    return search_service.search_documents(
        db, user, query, page=page, limit=limit,
        document_type=document_type, department=department, status=status,
        signature_status=signature_status, classification=classification, origin=origin,
        date_from=date_from, date_to=date_to, sort_by=sort_by,
    )


@router.get("/saved", response_model=list[SavedSearchResponse])
async def list_saved(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_saved_to_response(s) for s in search_service.list_saved(db, user.id)]


@router.post("/saved", response_model=SavedSearchResponse, status_code=201)
async def create_saved(req: SavedSearchCreate, user: CurrentUser = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    return _saved_to_response(search_service.create_saved(db, user.id, req.model_dump()))


@router.get("/saved/{search_id}", response_model=SavedSearchResponse)
async def get_saved(search_id: str, user: CurrentUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    return _saved_to_response(search_service.get_saved(db, user.id, search_id))


@router.put("/saved/{search_id}", response_model=SavedSearchResponse)
async def update_saved(search_id: str, req: SavedSearchUpdate, user: CurrentUser = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    saved = search_service.update_saved(db, user.id, search_id, req.model_dump(exclude_unset=True))
    return _saved_to_response(saved)


@router.delete("/saved/{search_id}", response_model=MessageResponse)
async def delete_saved(search_id: str, user: CurrentUser = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    search_service.delete_saved(db, user.id, search_id)
    return MessageResponse(message="Saved search deleted")


@router.post("/saved/{search_id}/execute", response_model=SearchResponse)
async def execute_saved(
    search_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_permission("document_read")),
    db: Session = Depends(get_db),
):
    return search_service.execute_saved(db, user, search_id, page=page, limit=limit)
