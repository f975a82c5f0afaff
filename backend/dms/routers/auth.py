from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from dms.config import settings
from dms.database import get_db
from dms.dependencies import CurrentUser, get_current_user
from dms.models.user import User
from dms.schemas.auth import LoginRequest, LoginResponse, MeResponse
from dms.schemas.common import MessageResponse
from dms.services import permission_service
from dms.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _me_response(db: Session, user: User) -> MeResponse:
    return MeResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        name=user.full_name,
        title=user.title,
        department_id=user.department_id,
        department_name=user.department.name if user.department else None,
        roles=permission_service.get_user_role_codes(db, user.id),
        permissions=permission_service.get_user_permissions(db, user.id),
    )


@router.post("/login", response_model=LoginResponse)
async def login(req: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    client_host = request.client.host if request.client else "unknown"
    result = auth_service.login(db, req.email, req.password, throttle_key=f"login:{client_host}")
    response.set_cookie(
        settings.auth_cookie_name,
        result["token"],
        max_age=result["expires_in_seconds"],
        httponly=True,
        samesite="lax",
    )
    return LoginResponse(
        token=result["token"],
        expires_in_seconds=result["expires_in_seconds"],
        user=_me_response(db, result["user"]),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, user: CurrentUser = Depends(get_current_user)):
    auth_service.logout(user.token)
    response.delete_cookie(settings.auth_cookie_name)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=MeResponse)
async def me(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return _me_response(db, db.query(User).filter(User.id == user.id).one())
