from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict

from api.domain.credentials import AuthErrors, AuthResult, UsernamePasswordInput
from api.repositories.sql_repository import SQLRepository
from api.services import auth_service
from api.services.auth_service import AuthContext
from api.services.session_service import load_session, sync_session_cookie

router = APIRouter(prefix="/auth", tags=["auth"])
_sql_repo = SQLRepository()


# ---------------------------------- schemas ----------------------------------
class UsernamePasswordOptions(BaseModel):
    username: str
    password: str


class FieldErrorOut(BaseModel):
    field: str
    message: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class UserResponse(BaseModel):
    errors: Optional[List[FieldErrorOut]] = None
    user: Optional[UserOut] = None


class LogoutResponse(BaseModel):
    ok: bool


# ---------------------------------- helpers ----------------------------------
def get_repository() -> SQLRepository:
    return _sql_repo


def get_auth_context(request: Request, repository: SQLRepository = Depends(get_repository)) -> AuthContext:
    return AuthContext(session=load_session(request, repository), users=repository)


def _to_response(result: AuthResult) -> UserResponse:
    if isinstance(result, AuthErrors):
        return UserResponse(errors=[FieldErrorOut(field=e.field, message=e.message) for e in result.errors])
    return UserResponse(user=UserOut.model_validate(result.user))


def _options(body: UsernamePasswordOptions) -> UsernamePasswordInput:
    return UsernamePasswordInput(username=body.username, password=body.password)


# ---------------------------------- endpoints ----------------------------------
@router.get("/me", response_model=Optional[UserOut])
def me(ctx: AuthContext = Depends(get_auth_context)):
    user = auth_service.me(ctx)
    return UserOut.model_validate(user) if user else None


@router.post("/register", response_model=UserResponse, response_model_exclude_none=True)
def register(body: UsernamePasswordOptions, ctx: AuthContext = Depends(get_auth_context)):
    return _to_response(auth_service.register(ctx, _options(body)))


@router.post("/login", response_model=UserResponse, response_model_exclude_none=True)
def login(body: UsernamePasswordOptions, response: Response, ctx: AuthContext = Depends(get_auth_context)):
    result = auth_service.login(ctx, _options(body))
    sync_session_cookie(response, ctx.session)
    return _to_response(result)


@router.post("/logout", response_model=LogoutResponse)
def logout(response: Response, ctx: AuthContext = Depends(get_auth_context)):
    ok = auth_service.logout(ctx)
    sync_session_cookie(response, ctx.session)
    return {"ok": ok}
