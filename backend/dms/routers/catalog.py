from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import get_current_user, require_permission
from dms.models.catalog import DocumentAction, DocumentType
from dms.schemas.catalog import (
    DocumentActionCreate,
    DocumentActionListResponse,
    DocumentActionResponse,
    DocumentActionUpdate,
    DocumentTypeCreate,
    DocumentTypeListResponse,
    DocumentTypeResponse,
    DocumentTypeUpdate,
)
from dms.schemas.common import MessageResponse
from dms.services import catalog_service
from dms.utils.pagination import page_meta

router = APIRouter(tags=["catalog"], dependencies=[Depends(get_current_user)])


def _type_to_response(doc_type: DocumentType) -> DocumentTypeResponse:
    return DocumentTypeResponse(
        id=doc_type.id,
        name=doc_type.name,
        description=doc_type.description,
        active=doc_type.active,
        created_at=doc_type.created_at,
        updated_at=doc_type.updated_at,
    )


def _action_to_response(action: DocumentAction) -> DocumentActionResponse:
    return DocumentActionResponse(
        id=action.id,
        action_name=action.action_name,
        description=action.description,
        sender_tag=action.sender_tag,
        recipient_tag=action.recipient_tag,
        action_date=action.action_date,
        status=action.status,
        created_at=action.created_at,
        updated_at=action.updated_at,
    )


# --- document types ------------------------------------------------------

@router.get("/document-types/active", response_model=list[DocumentTypeResponse])
async def active_document_types(db: Session = Depends(get_db)):
    return [_type_to_response(t) for t in catalog_service.active_document_types(db)]


@router.get("/admin/document-types", response_model=DocumentTypeListResponse,
            dependencies=[Depends(require_permission("document_type_read"))])
async def list_document_types(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = None,
    db: Session = Depends(get_db),
):
    items, total = catalog_service.list_document_types(db, page, limit, search)
    return DocumentTypeListResponse(data=[_type_to_response(t) for t in items], meta=page_meta(page, limit, total))


@router.get("/admin/document-types/{type_id}", response_model=DocumentTypeResponse,
            dependencies=[Depends(require_permission("document_type_read"))])
async def get_document_type(type_id: str, db: Session = Depends(get_db)):
    return _type_to_response(catalog_service.get_document_type(db, type_id))


@router.post("/admin/document-types", response_model=DocumentTypeResponse, status_code=201,
             dependencies=[Depends(require_permission("document_type_create"))])
async def create_document_type(req: DocumentTypeCreate, db: Session = Depends(get_db)):
    return _type_to_response(catalog_service.create_document_type(db, req.name, req.description, req.active))


@router.put("/admin/document-types/{type_id}", response_model=DocumentTypeResponse,
            dependencies=[Depends(require_permission("document_type_edit"))])
async def update_document_type(type_id: str, req: DocumentTypeUpdate, db: Session = Depends(get_db)):
    doc_type = catalog_service.update_document_type(db, type_id, req.model_dump(exclude_unset=True))
    return _type_to_response(doc_type)


@router.patch("/admin/document-types/{type_id}/toggle-status", response_model=DocumentTypeResponse,
              dependencies=[Depends(require_permission("document_type_edit"))])
async def toggle_document_type(type_id: str, db: Session = Depends(get_db)):
    return _type_to_response(catalog_service.toggle_document_type(db, type_id))


@router.delete("/admin/document-types/{type_id}", response_model=MessageResponse,
               dependencies=[Depends(require_permission("document_type_delete"))])
async def delete_document_type(type_id: str, db: Session = Depends(get_db)):
    catalog_service.delete_document_type(db, type_id)
    return MessageResponse(message="Document type deleted")


# --- document actions ----------------------------------------------------

@router.get("/document-actions/active", response_model=list[DocumentActionResponse])
async def active_document_actions(db: Session = Depends(get_db)):
    return [_action_to_response(a) for a in catalog_service.active_document_actions(db)]


@router.get("/admin/document-actions", response_model=DocumentActionListResponse,
            dependencies=[Depends(require_permission("document_type_read"))])
async def list_document_actions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = None,
    db: Session = Depends(get_db),
):
    items, total = catalog_service.list_document_actions(db, page, limit, search)
    return DocumentActionListResponse(
        data=[_action_to_response(a) for a in items], meta=page_meta(page, limit, total)
    )


@router.get("/admin/document-actions/{action_id}", response_model=DocumentActionResponse,
            dependencies=[Depends(require_permission("document_type_read"))])
async def get_document_action(action_id: str, db: Session = Depends(get_db)):
    return _action_to_response(catalog_service.get_document_action(db, action_id))


@router.post("/admin/document-actions", response_model=DocumentActionResponse, status_code=201,
             dependencies=[Depends(require_permission("document_type_create"))])
async def create_document_action(req: DocumentActionCreate, db: Session = Depends(get_db)):
    return _action_to_response(catalog_service.create_document_action(db, req.model_dump()))


@router.put("/admin/document-actions/{action_id}", response_model=DocumentActionResponse,
            dependencies=[Depends(require_permission("document_type_edit"))])
async def update_document_action(action_id: str, req: DocumentActionUpdate, db: Session = Depends(get_db)):
    action = catalog_service.update_document_action(db, action_id, req.model_dump(exclude_unset=True))
    return _action_to_response(action)


@router.patch("/admin/document-actions/{action_id}/toggle-status", response_model=DocumentActionResponse,
              dependencies=[Depends(require_permission("document_type_edit"))])
async def toggle_document_action(action_id: str, db: Session = Depends(get_db)):
    return _action_to_response(catalog_service.toggle_document_action(db, action_id))


@router.delete("/admin/document-actions/{action_id}", response_model=MessageResponse,
               dependencies=[Depends(require_permission("document_type_delete"))])
async def delete_document_action(action_id: str, db: Session = Depends(get_db)):
    catalog_service.delete_document_action(db, action_id)
    return MessageResponse(message="Document action deleted")
