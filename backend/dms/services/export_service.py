import csv
import io

from sqlalchemy.orm import Session, selectinload

from dms.models.document import Document
from dms.services.document_service import apply_access_filter
from dms.utils.time import utc_now

CSV_COLUMNS = [
    "id", "document_code", "title", "description", "document_type", "classification",
    "origin", "status", "department_id", "created_by", "signed_at", "blockchain_status",
    "file_count", "created_at", "updated_at",
]


def _visible_documents(db: Session, user) -> list[Document]:
    query = db.query(Document).options(
        selectinload(Document.files), selectinload(Document.trails)
    ).filter(Document.status != "deleted")
    return apply_access_filter(query, user).order_by(Document.created_at.desc(), Document.id).all()


def export_csv(db: Session, user) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)
    for doc in _visible_documents(db, user):
        writer.writerow([
            doc.id, doc.document_code, doc.title, doc.description, doc.document_type,
            doc.classification, doc.origin, doc.status, doc.department_id, doc.created_by,
            doc.signed_at, doc.blockchain_status, len(doc.files), doc.created_at, doc.updated_at,
        ])
    return output.getvalue()


def export_json(db: Session, user) -> dict:
    data = {"version": "1", "exported_at": utc_now(), "documents": []}
    for doc in _visible_documents(db, user):
        data["documents"].append({
            "id": doc.id,
            "document_code": doc.document_code,
            "title": doc.title,
            "description": doc.description,
            "document_type": doc.document_type,
            "classification": doc.classification,
            "origin": doc.origin,
            "status": doc.status,
            "department_id": doc.department_id,
            "created_by": doc.created_by,
            "work_flow": doc.work_flow or {},
            "work_flow_status": doc.work_flow_status or {},
            "received_by": doc.received_by or [],
            "signed_at": doc.signed_at,
            "signed_by": doc.signed_by,
            "blockchain_status": doc.blockchain_status,
            "created_at": doc.created_at,
            "updated_at": doc.updated_at,
            "files": [
                {
                    "id": f.id,
                    "original_filename": f.original_filename,
                    "file_hash": f.file_hash,
                    "file_size_bytes": f.file_size_bytes,
                    "mime_type": f.mime_type,
                    "is_primary": f.is_primary,
                    "created_at": f.created_at,
                }
                for f in doc.files
            ],
            "trails": [
                {
                    "id": t.id,
                    "status": t.status,
                    "from_department": t.from_department,
                    "to_department": t.to_department,
                    "user_id": t.user_id,
                    "remarks": t.remarks,
                    "action_date": t.action_date,
                }
                for t in doc.trails
            ],
        })
    return data
