from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, require_permission
from dms.services import export_service

router = APIRouter(prefix="/export", tags=["export"])


@router.get("/documents.csv")
async def export_csv(user: CurrentUser = Depends(require_permission("report_export")),
                     db: Session = Depends(get_db)):
    return Response(
        content=export_service.export_csv(db, user),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=dms-documents.csv"},
    )


@router.get("/documents.json")
async def export_json(user: CurrentUser = Depends(require_permission("report_export")),
                      db: Session = Depends(get_db)):
    return JSONResponse(
        content=export_service.export_json(db, user),
        headers={"Content-Disposition": "attachment; filename=dms-documents.json"},
    )
