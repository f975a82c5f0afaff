from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user, require_permission
from dms.models.user import User
from dms.schemas.common import MessageResponse
from dms.schemas.user import (
    RoleAssignmentResponse,
    RoleAssignRequest,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from dms.services import permission_service, role_service, user_service
from dms.utils.pagination import page_meta

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(get_current_user)])


def _user_to_response(db: Session, user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        title=user.title,
        department_id=user.department_id,
        department_name=user.department.name if user.department else None,
        active=user.active,
        roles=permission_service.get_user_role_codes(db, user.id),
        last_login_at=user.last_login_at,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


@router.get("", response_model=UserListResponse, dependencies=[Depends(require_permission("user_read"))])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    q: str | None = None,
    department_id: str | None = None,
    db: Session = Depends(get_db),
):
    users, total = user_service.list_users(db, page, limit, q, department_id)
    return UserListResponse(
        data=[_user_to_response(db, u) for u in users],
        pagination=page_meta(page, limit, total),
    )


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    req: UserCreate,
    user: CurrentUser = Depends(require_permission("user_create")),
    db: Session = Depends(get_db),
):
    created = user_service.create_user(db, req.model_dump(), created_by=user.id)
    return _user_to_response(db, created)


@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_permission("user_read"))])
async def get_user(user_id: str, db: Session = Depends(get_db)):
    return _user_to_response(db, user_service.get_user(db, user_id))


@router.put("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_permission("user_edit"))])
async def update_user(user_id: str, req: UserUpdate, db: Session = Depends(get_db)):
    updated = user_service.update_user(db, user_id, req.model_dump(exclude_unset=True))
    return _user_to_response(db, updated)


@router.patch("/{user_id}/toggle-status", response_model=UserResponse)
async def toggle_user_status(
    user_id: str,
    user: CurrentUser = Depends(require_permission("user_activate", "user_deactivate")),
    db: Session = Depends(get_db),
):
    return _user_to_response(db, user_service.toggle_status(db, user_id, acting_user_id=user.id))


@router.post("/{user_id}/roles", response_model=RoleAssignmentResponse, status_code=201)
async def assign_role(
    user_id: str,
    req: RoleAssignRequest,
    user: CurrentUser = Depends(require_permission("role_assign")),
    db: Session = Depends(get_db),
):
    assignment = role_service.assign_role(db, user_id, req.role_id, assigned_by=user.id, expires_at=req.expires_at)
    return RoleAssignmentResponse(
        id=assignment.id,
        user_id=assignment.user_id,
        role_id=assignment.role_id,
        assigned_by=assignment.assigned_by,
        assigned_at=assignment.assigned_at,
        is_active=assignment.is_active,
        expires_at=assignment.expires_at,
    )


@router.delete("/{user_id}/roles/{role_id}", response_model=MessageResponse,
               dependencies=[Depends(require_permission("role_assign"))])
async def revoke_role(user_id: str, role_id: str, db: Session = Depends(get_db)):
    role_service.revoke_role(db, user_id, role_id)
    return MessageResponse(message="Role revoked")
