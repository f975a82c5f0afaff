from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user
from dms.schemas.dashboard import AdminCountersResponse, DocumentStatsResponse
from dms.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DocumentStatsResponse)
async def document_stats(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return DocumentStatsResponse(**dashboard_service.document_stats(db, user.id))


@router.get("/counters", response_model=AdminCountersResponse, dependencies=[Depends(get_current_user)])
async def admin_counters(db: Session = Depends(get_db)):
    return AdminCountersResponse(**dashboard_service.admin_counters(db))
