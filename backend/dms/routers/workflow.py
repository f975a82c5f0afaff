from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user, require_permission
from dms.routers.documents import document_to_response
from dms.schemas.document import CancelRequest, DocumentResponse, LockStatusResponse, ReleaseRequest
from dms.services import lock_service, workflow_service

# Mounted before the documents router so the fixed listing paths win over /documents/{id}.
router = APIRouter(prefix="/documents", tags=["workflow"], dependencies=[Depends(get_current_user)])


# --- listings ------------------------------------------------------------

@router.get("/intransit/incoming", response_model=list[DocumentResponse])
async def incoming(user: CurrentUser = Depends(require_permission("document_read")),
                   db: Session = Depends(get_db)):
    return [document_to_response(d) for d in workflow_service.incoming_documents(db, user)]


@router.get("/intransit/outgoing", response_model=list[DocumentResponse])
async def outgoing(user: CurrentUser = Depends(require_permission("document_read")),
                   db: Session = Depends(get_db)):
    return [document_to_response(d) for d in workflow_service.outgoing_documents(db, user)]


@router.get("/received", response_model=list[DocumentResponse])
async def received(user: CurrentUser = Depends(require_permission("document_read")),
                   db: Session = Depends(get_db)):
    return [document_to_response(d) for d in workflow_service.received_documents(db, user)]


@router.get("/completed", response_model=list[DocumentResponse])
async def completed(user: CurrentUser = Depends(require_permission("document_read")),
                    db: Session = Depends(get_db)):
    return [document_to_response(d) for d in workflow_service.completed_documents(db, user)]


@router.get("/shared", response_model=list[DocumentResponse])
async def shared(user: CurrentUser = Depends(require_permission("document_read")),
                 db: Session = Depends(get_db)):
    return [document_to_response(d) for d in workflow_service.shared_documents(db, user)]


# --- transitions ---------------------------------------------------------

@router.post("/{document_id}/release", response_model=DocumentResponse)
async def release(
    document_id: str,
    req: ReleaseRequest,
    user: CurrentUser = Depends(require_permission("document_transfer_initiate", "document_transfer_approve")),
    db: Session = Depends(get_db),
):
    doc = workflow_service.release_document(
        db, user, document_id, req.department_id, request_action=req.request_action, remarks=req.remarks,
    )
    return document_to_response(doc)


@router.post("/{document_id}/receive", response_model=DocumentResponse)
async def receive(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_transfer_receive")),
    db: Session = Depends(get_db),
):
    return document_to_response(workflow_service.receive_document(db, user, document_id))


@router.post("/{document_id}/complete", response_model=DocumentResponse)
async def complete(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_transfer_receive")),
    db: Session = Depends(get_db),
):
    return document_to_response(workflow_service.complete_document(db, user, document_id))


@router.post("/{document_id}/cancel", response_model=DocumentResponse)
async def cancel(
    document_id: str,
    req: CancelRequest | None = None,
    user: CurrentUser = Depends(require_permission("document_transfer_reject", "document_transfer_initiate")),
    db: Session = Depends(get_db),
):
    remarks = req.remarks if req else None
    return document_to_response(workflow_service.cancel_document(db, user, document_id, remarks))


# --- lock ----------------------------------------------------------------

@router.post("/{document_id}/checkout", response_model=DocumentResponse)
async def checkout(document_id: str, user: CurrentUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    return document_to_response(lock_service.checkout(db, user, document_id))


@router.post("/{document_id}/checkin", response_model=DocumentResponse)
async def checkin(document_id: str, user: CurrentUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    return document_to_response(lock_service.checkin(db, user, document_id))


@router.post("/{document_id}/override", response_model=DocumentResponse)
async def override(document_id: str, user: CurrentUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    return document_to_response(lock_service.override(db, user, document_id))


@router.get("/{document_id}/lock", response_model=LockStatusResponse)
async def lock_status(document_id: str, user: CurrentUser = Depends(get_current_user),
                      db: Session = Depends(get_db)):
    return LockStatusResponse(**lock_service.lock_status(db, user, document_id))
