from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user, require_permission
from dms.models.department import Department
from dms.schemas.common import MessageResponse
from dms.schemas.department import (
    DepartmentCreate,
    DepartmentListResponse,
    DepartmentResponse,
    DepartmentUpdate,
)
from dms.services import department_service
from dms.utils.pagination import page_meta

router = APIRouter(prefix="/admin/departments", tags=["departments"], dependencies=[Depends(get_current_user)])


def _dept_to_response(dept: Department) -> DepartmentResponse:
    return DepartmentResponse(
        id=dept.id,
        name=dept.name,
        code=dept.code,
        active=dept.active,
        created_at=dept.created_at,
        updated_at=dept.updated_at,
    )


@router.get("", response_model=DepartmentListResponse,
            dependencies=[Depends(require_permission("department_read"))])
async def list_departments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = None,
    db: Session = Depends(get_db),
):
    items, total = department_service.list_departments(db, page, limit, search)
    return DepartmentListResponse(
        data=[_dept_to_response(d) for d in items],
        pagination=page_meta(page, limit, total),
    )


@router.get("/{department_id}", response_model=DepartmentResponse,
            dependencies=[Depends(require_permission("department_read"))])
async def get_department(department_id: str, db: Session = Depends(get_db)):
    return _dept_to_response(department_service.get_department(db, department_id))


@router.post("", response_model=DepartmentResponse, status_code=201)
async def create_department(
    req: DepartmentCreate,
    user: CurrentUser = Depends(require_permission("department_create")),
    db: Session = Depends(get_db),
):
    return _dept_to_response(department_service.create_department(db, req.name, req.code, created_by=user.id))


@router.put("/{department_id}", response_model=DepartmentResponse,
            dependencies=[Depends(require_permission("department_edit"))])
async def update_department(department_id: str, req: DepartmentUpdate, db: Session = Depends(get_db)):
    dept = department_service.update_department(db, department_id, req.model_dump(exclude_unset=True))
    return _dept_to_response(dept)


@router.patch("/{department_id}/toggle-status", response_model=DepartmentResponse,
              dependencies=[Depends(require_permission("department_edit"))])
async def toggle_department(department_id: str, db: Session = Depends(get_db)):
    return _dept_to_response(department_service.toggle_status(db, department_id))


@router.patch("/{department_id}/activate", response_model=DepartmentResponse,
              dependencies=[Depends(require_permission("department_edit"))])
async def activate_department(department_id: str, db: Session = Depends(get_db)):
    return _dept_to_response(department_service.set_active(db, department_id, True))


@router.patch("/{department_id}/deactivate", response_model=DepartmentResponse,
              dependencies=[Depends(require_permission("department_delete", "department_edit"))])
async def deactivate_department(department_id: str, db: Session = Depends(get_db)):
    return _dept_to_response(department_service.set_active(db, department_id, False))


@router.delete("/{department_id}", response_model=MessageResponse,
               dependencies=[Depends(require_permission("department_delete"))])
async def delete_department(department_id: str, db: Session = Depends(get_db)):
    department_service.delete_department(db, department_id)
    return MessageResponse(message="Department deleted")
