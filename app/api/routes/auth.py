from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Header

from app.core.auth import parse_bearer
from app.core.container import Services, get_services
from app.core.rate_limit import enforce_client_rate_limit
from app.schemas.auth import AuthSession, LoginRequest, RefreshRequest
from app.schemas.common import ApiResponse
from app.schemas.user import User

router = APIRouter(prefix="/auth", tags=["Auth"])

ServicesDep = Annotated[Services, Depends(get_services)]
AuthorizationHeader = Annotated[str | None, Header()]


@router.post("/login", dependencies=[Depends(enforce_client_rate_limit)])
async def login(body: LoginRequest, services: ServicesDep) -> ApiResponse[AuthSession]:
    """Sign in with email and the demo password.

    Returns the session the dashboard keeps in local storage: the user,
    a bearer token, a refresh token and the token expiry (epoch seconds).
    """
    session = await services.auth.login(body.email, body.password, remember_me=body.remember_me)
    return ApiResponse[AuthSession](data=session, message="Login successful")


@router.post("/logout")
async def logout(services: ServicesDep, authorization: AuthorizationHeader = None) -> ApiResponse[None]:
    token = parse_bearer(authorization)
    if token:
        await services.auth.logout(token)
    return ApiResponse[None](data=None, message="Logged out")


@router.post("/refresh", dependencies=[Depends(enforce_client_rate_limit)])
async def refresh(body: RefreshRequest, services: ServicesDep) -> ApiResponse[AuthSession]:
    session = await services.auth.refresh(body.refresh_token)
    return ApiResponse[AuthSession](data=session)


@router.get("/me")
async def me(services: ServicesDep, authorization: AuthorizationHeader = None) -> ApiResponse[User]:
    user = await services.auth.current_user(parse_bearer(authorization))
    return ApiResponse[User](data=user)
