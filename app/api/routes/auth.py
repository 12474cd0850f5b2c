import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.deps import require_admin, session_claims
from app.api.schemas.auth import (
    AdminCreateRequest,
    AdminResponse,
    LoginRequest,
    LogoutResponse,
    MeResponse,
)
from app.core.config import settings
from app.core.db import get_session, get_session_factory
from app.core.errors import ForbiddenError
from app.models.admin_user import AdminUser
from app.services.auth_service import SessionClaims, admin_to_public, create_admin, login, logout

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.session_expire_hours * 60 * 60,
        path="/",
    )


@router.post("/login", response_model=AdminResponse)
async def admin_login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
) -> AdminResponse:
    admin, token = await login(session, body.username, body.password)
    _set_session_cookie(response, token)
    return AdminResponse(message="Login realizado com sucesso", admin=admin_to_public(admin))


@router.post("/logout", response_model=LogoutResponse)
async def admin_logout(
    response: Response,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    claims: SessionClaims | None = Depends(session_claims),
) -> LogoutResponse:
    # Own session: logout commits itself and never fails the request.
    async with session_factory() as session:
        await logout(session, claims)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return LogoutResponse()


@router.get("/me", response_model=MeResponse)
async def me(admin: AdminUser = Depends(require_admin)) -> MeResponse:
    return MeResponse(admin=admin_to_public(admin))


@router.post("/create", response_model=AdminResponse)
async def create_admin_user(
    body: AdminCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> AdminResponse:
    """Bootstrap endpoint for the first operator; disable with ALLOW_ADMIN_SETUP=false."""
    if not settings.allow_admin_setup:
        logger.warning("Admin setup attempted while disabled (username=%s)", body.username)
        raise ForbiddenError("Criação de administradores desativada")
    admin = await create_admin(session, body.username, body.password)
    return AdminResponse(message="Usuário admin criado com sucesso", admin=admin_to_public(admin))
