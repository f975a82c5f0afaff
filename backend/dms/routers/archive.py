from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user, require_permission
from dms.routers.documents import document_to_response
from dms.schemas.document import DocumentResponse
from dms.services import archive_service

router = APIRouter(tags=["archive"], dependencies=[Depends(get_current_user)])


@router.post("/documents/{document_id}/archive", response_model=DocumentResponse)
async def archive_document(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_archive")),
    db: Session = Depends(get_db),
):
    return document_to_response(archive_service.archive_document(db, user, document_id))


@router.get("/archive", response_model=list[DocumentResponse])
async def list_archive(user: CurrentUser = Depends(require_permission("document_read")),
                       db: Session = Depends(get_db)):
    return [document_to_response(d) for d in archive_service.list_archived(db, user)]


@router.get("/archive/{document_id}", response_model=DocumentResponse)
async def get_archived(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_read")),
    db: Session = Depends(get_db),
):
    return document_to_response(archive_service.get_archived(db, user, document_id))


@router.post("/archive/{document_id}/restore", response_model=DocumentResponse)
async def restore_archived(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_restore")),
    db: Session = Depends(get_db),
):
    return document_to_response(archive_service.restore_document(db, user, document_id))
