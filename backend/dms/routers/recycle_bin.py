from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user, require_permission
from dms.routers.documents import document_to_response
from dms.schemas.common import BulkIdsRequest, BulkResult, MessageResponse
from dms.schemas.document import DocumentResponse, RecycleBinListResponse
from dms.services import recycle_bin_service
from dms.utils.pagination import pagination_block

router = APIRouter(prefix="/recycle-bin", tags=["recycle-bin"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=RecycleBinListResponse)
async def list_recycle_bin(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_permission("document_recycle_view")),
    db: Session = Depends(get_db),
):
    docs, total = recycle_bin_service.list_deleted(db, user, page, limit)
    return RecycleBinListResponse(
        data=[document_to_response(d) for d in docs],
        pagination=pagination_block(page, limit, total),
    )


@router.post("/bulk-restore", response_model=BulkResult)
async def bulk_restore(
    req: BulkIdsRequest,
    user: CurrentUser = Depends(require_permission("document_recycle_bulk_restore")),
    db: Session = Depends(get_db),
):
    return recycle_bin_service.bulk_restore(db, user, req.document_ids)


@router.post("/bulk-delete", response_model=BulkResult)
async def bulk_delete(
    req: BulkIdsRequest,
    user: CurrentUser = Depends(require_permission("document_recycle_bulk_delete")),
    db: Session = Depends(get_db),
):
    return recycle_bin_service.bulk_delete(db, user, req.document_ids)


@router.post("/{document_id}/restore", response_model=DocumentResponse)
async def restore(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_recycle_restore")),
    db: Session = Depends(get_db),
):
    return document_to_response(recycle_bin_service.restore(db, user, document_id))


@router.delete("/{document_id}", response_model=MessageResponse)
async def permanent_delete(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_recycle_permanent_delete")),
    db: Session = Depends(get_db),
):
    recycle_bin_service.permanent_delete(db, user, document_id)
    return MessageResponse(message="Document permanently deleted")
