from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dms.database import get_db
from dms.dependencies import CurrentUser, require_permission
from dms.models.role import Role
from dms.schemas.common import MessageResponse
from dms.schemas.role import PermissionResponse, RoleCreate, RoleResponse, RoleUpdate
from dms.services import role_service

router = APIRouter(tags=["roles"])


def _role_to_response(role: Role) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        code=role.code,
        name=role.name,
        description=role.description,
        is_system_role=role.is_system_role,
        is_active=role.is_active,
        permissions=role_service.role_permission_names(role),
        created_at=role.created_at,
        updated_at=role.updated_at,
    )


@router.get("/permissions", response_model=list[PermissionResponse],
            dependencies=[Depends(require_permission("permission_read"))])
async def list_permissions(db: Session = Depends(get_db)):
    return [
        PermissionResponse(id=p.id, permission=p.permission, description=p.description)
        for p in role_service.list_permissions(db)
    ]


@router.get("/roles", response_model=list[RoleResponse], dependencies=[Depends(require_permission("role_read"))])
async def list_roles(db: Session = Depends(get_db)):
    return [_role_to_response(r) for r in role_service.list_roles(db)]


@router.get("/roles/{role_id}", response_model=RoleResponse, dependencies=[Depends(require_permission("role_read"))])
async def get_role(role_id: str, db: Session = Depends(get_db)):
    return _role_to_response(role_service.get_role(db, role_id))


@router.post("/roles", response_model=RoleResponse, status_code=201)
async def create_role(
    req: RoleCreate,
    user: CurrentUser = Depends(require_permission("role_create")),
    db: Session = Depends(get_db),
):
    return _role_to_response(role_service.create_role(db, req.model_dump(), created_by=user.id))


@router.put("/roles/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    req: RoleUpdate,
    user: CurrentUser = Depends(require_permission("role_edit")),
    db: Session = Depends(get_db),
):
    role = role_service.update_role(db, role_id, req.model_dump(exclude_unset=True), updated_by=user.id)
    return _role_to_response(role)


@router.delete("/roles/{role_id}", response_model=MessageResponse)
async def delete_role(
    role_id: str,
    user: CurrentUser = Depends(require_permission("role_delete")),
    db: Session = Depends(get_db),
):
    role_service.delete_role(db, role_id, deleted_by=user.id)
    return MessageResponse(message="Role deleted")
