from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from dms.config import settings
from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user, require_permission
from dms.models.document import Document, DocumentFile, DocumentTrail
from dms.schemas.common import BulkIdsRequest, BulkResult
from dms.schemas.document import (
    AllowedActionsResponse,
    DocumentFileResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
    FileVerifyResponse,
    TrailCreate,
    TrailResponse,
)
from dms.services import document_service, trail_service, workflow_status
from dms.services.document_permissions import get_allowed_actions
from dms.services.pdf_service import generate_routing_slip
from dms.utils.hashing import sha256_file
from dms.utils.pagination import page_meta

router = APIRouter(prefix="/documents", tags=["documents"], dependencies=[Depends(get_current_user)])


def file_to_response(record: DocumentFile) -> DocumentFileResponse:
    return DocumentFileResponse(
        id=record.id,
        document_id=record.document_id,
        original_filename=record.original_filename,
        file_hash=record.file_hash,
        file_size_bytes=record.file_size_bytes,
        mime_type=record.mime_type,
        is_primary=record.is_primary,
        uploaded_by=record.uploaded_by,
        created_at=record.created_at,
    )


def document_to_response(doc: Document) -> DocumentResponse:
    return DocumentResponse(
        id=doc.id,
        document_code=doc.document_code,
        title=doc.title,
        description=doc.description,
        document_type=doc.document_type,
        classification=doc.classification,
        origin=doc.origin,
        status=doc.status,
        department_id=doc.department_id,
        department_name=doc.department.name if doc.department else None,
        created_by=doc.created_by,
        remarks=doc.remarks,
        work_flow=workflow_status.parse_route(doc.work_flow),
        work_flow_status=workflow_status.parse_workflow_status(doc.work_flow_status),
        received_by=list(doc.received_by or []),
        checked_out_by=doc.checked_out_by,
        checked_out_at=doc.checked_out_at,
        signed_at=doc.signed_at,
        signed_by=doc.signed_by,
        blockchain_status=doc.blockchain_status,
        archived_at=doc.archived_at,
        deleted_at=doc.deleted_at,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
        files=[file_to_response(f) for f in doc.files],
    )


def trail_to_response(trail: DocumentTrail) -> TrailResponse:
    return TrailResponse(
        id=trail.id,
        document_id=trail.document_id,
        action_id=trail.action_id,
        action_name=trail.action.action_name if trail.action else None,
        from_department=trail.from_department,
        from_department_name=trail.from_dept.name if trail.from_dept else None,
        to_department=trail.to_department,
        to_department_name=trail.to_dept.name if trail.to_dept else None,
        user_id=trail.user_id,
        user_name=trail.user.full_name if trail.user else None,
        status=trail.status,
        remarks=trail.remarks,
        action_date=trail.action_date,
    )


async def read_upload(file: UploadFile) -> bytes:
    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise HTTPException(status_code=413, detail=f"File too large (max {max_bytes} bytes)")
        chunks.append(chunk)
    content = b"".join(chunks)
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")
    return content


@router.post("", response_model=DocumentResponse, status_code=201)
async def create_document(
    title: str = Form(...),
    description: str | None = Form(None),
    document_type: str | None = Form(None),
    classification: str | None = Form(None),
    origin: str | None = Form(None),
    remarks: str | None = Form(None),
    file: UploadFile | None = File(None),
    user: CurrentUser = Depends(require_permission("document_create")),
    db: Session = Depends(get_db),
):
    upload = None
    if file is not None and file.filename:
        upload = (file.filename, await read_upload(file), file.content_type)

    doc = document_service.create_document(
        db, user,
        {
            "title": title,
            "description": description,
            "document_type": document_type,
            "classification": classification,
            "origin": origin,
            "remarks": remarks,
        },
        upload,
    )
    return document_to_response(doc)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    scope: str = Query("all", pattern="^(owned|all)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    user: CurrentUser = Depends(require_permission("document_read")),
    db: Session = Depends(get_db),
):
    docs, total = document_service.list_documents(db, user, scope, page, limit, sort_by, sort_order)
    return DocumentListResponse(
        data=[document_to_response(d) for d in docs],
        pagination=page_meta(page, limit, total),
    )


@router.post("/bulk-delete", response_model=BulkResult)
async def bulk_delete_documents(
    req: BulkIdsRequest,
    user: CurrentUser = Depends(require_permission("document_delete")),
    db: Session = Depends(get_db),
):
    return document_service.bulk_soft_delete(db, user, req.document_ids)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_read")),
    db: Session = Depends(get_db),
):
    return document_to_response(document_service.get_accessible_document(db, user, document_id))


@router.put("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    req: DocumentUpdate,
    user: CurrentUser = Depends(require_permission("document_edit")),
    db: Session = Depends(get_db),
):
    doc = document_service.update_document(db, user, document_id, req.model_dump(exclude_unset=True))
    return document_to_response(doc)


@router.delete("/{document_id}", response_model=DocumentResponse)
async def delete_document(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_delete")),
    db: Session = Depends(get_db),
):
    return document_to_response(document_service.soft_delete(db, user, document_id))


@router.get("/{document_id}/allowed-actions", response_model=AllowedActionsResponse)
async def allowed_actions(
    document_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    doc = document_service.get_accessible_document(db, user, document_id)
    return AllowedActionsResponse(
        document_id=doc.id,
        actions=get_allowed_actions(user, document_service.document_view(doc)),
    )


@router.post("/{document_id}/sign", response_model=DocumentResponse)
async def sign_document(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_edit")),
    db: Session = Depends(get_db),
):
    return document_to_response(document_service.sign_document(db, user, document_id))


@router.get("/{document_id}/routing-slip")
async def routing_slip(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_read")),
    db: Session = Depends(get_db),
):
    doc = document_service.get_accessible_document(db, user, document_id)
    trails = [trail_to_response(t).model_dump() for t in trail_service.document_trails(db, doc.id)]
    names = {t["to_department"]: t["to_department_name"] for t in trails if t["to_department"]}
    if doc.department:
        names[doc.department_id] = doc.department.name
    route = [
        names.get(dept_id, dept_id)
        for dept_id in workflow_status.route_departments(workflow_status.parse_route(doc.work_flow))
    ]
    pdf_bytes = generate_routing_slip(document_to_response(doc).model_dump(), route, trails)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{doc.document_code}-routing-slip.pdf"'},
    )


# --- files ---------------------------------------------------------------

@router.post("/{document_id}/files", response_model=DocumentFileResponse, status_code=201)
async def upload_file(
    document_id: str,
    file: UploadFile = File(...),
    user: CurrentUser = Depends(require_permission("document_upload")),
    db: Session = Depends(get_db),
):
    content = await read_upload(file)
    record = document_service.add_file(db, user, document_id, file.filename, content, file.content_type)
    return file_to_response(record)


@router.get("/{document_id}/files", response_model=list[DocumentFileResponse])
async def list_files(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_read")),
    db: Session = Depends(get_db),
):
    doc = document_service.get_accessible_document(db, user, document_id)
    return [file_to_response(f) for f in doc.files]


@router.get("/{document_id}/files/{file_id}/download")
async def download_file(
    document_id: str,
    file_id: str,
    user: CurrentUser = Depends(require_permission("document_download")),
    db: Session = Depends(get_db),
):
    document_service.get_accessible_document(db, user, document_id)
    record = document_service.get_file(db, document_id, file_id)

    full_path = document_service.get_file_full_path(record.stored_path)
    if not full_path.exists():
        raise HTTPException(status_code=404, detail="File missing from storage")

    return FileResponse(
        path=str(full_path),
        filename=record.original_filename,
        media_type=record.mime_type or "application/octet-stream",
    )


@router.get("/{document_id}/files/{file_id}/verify", response_model=FileVerifyResponse)
async def verify_file(
    document_id: str,
    file_id: str,
    user: CurrentUser = Depends(require_permission("document_read")),
    db: Session = Depends(get_db),
):
    """Re-hash the stored file and compare against the recorded SHA-256."""
    document_service.get_accessible_document(db, user, document_id)
    record = document_service.get_file(db, document_id, file_id)

    full_path = document_service.get_file_full_path(record.stored_path)
    if not full_path.exists():
        raise HTTPException(status_code=404, detail="File missing from storage")

    actual_hash = sha256_file(full_path)
    return FileVerifyResponse(
        verified=actual_hash == record.file_hash,
        filename=record.original_filename,
        stored_hash=record.file_hash,
        actual_hash=actual_hash,
    )


@router.delete("/{document_id}/files/{file_id}", status_code=204)
async def delete_file(
    document_id: str,
    file_id: str,
    user: CurrentUser = Depends(require_permission("document_upload", "document_edit")),
    db: Session = Depends(get_db),
):
    document_service.delete_file(db, user, document_id, file_id)


# --- trails --------------------------------------------------------------

@router.get("/{document_id}/trails", response_model=list[TrailResponse])
async def document_trails(
    document_id: str,
    user: CurrentUser = Depends(require_permission("document_read", "document_routing_read")),
    db: Session = Depends(get_db),
):
    document_service.get_accessible_document(db, user, document_id)
    return [trail_to_response(t) for t in trail_service.document_trails(db, document_id)]


@router.post("/{document_id}/trails", response_model=TrailResponse, status_code=201)
async def create_trail(
    document_id: str,
    req: TrailCreate,
    user: CurrentUser = Depends(require_permission("document_routing_create")),
    db: Session = Depends(get_db),
):
    trail = trail_service.create_trail(
        db, document_id, user.id, req.status,
        action_id=req.action_id,
        from_department=req.from_department,
        to_department=req.to_department,
        remarks=req.remarks,
    )
    return trail_to_response(trail)
