from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: str
    password: str


class MeResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    name: str
    title: str | None
    department_id: str
    department_name: str | None
    roles: list[str]
    permissions: list[str]


class LoginResponse(BaseModel):
    token: str
    expires_in_seconds: int
    user: MeResponse
