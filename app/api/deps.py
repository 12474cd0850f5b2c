from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_session
from app.models.admin_user import AdminUser
from app.services.auth_service import SessionClaims, current_admin, read_session_token


def session_claims(request: Request) -> SessionClaims | None:
    """Decode the admin session cookie, if any. Does not touch the database."""
    return read_session_token(request.cookies.get(settings.session_cookie_name))


async def require_admin(
    session: AsyncSession = Depends(get_session),
    claims: SessionClaims | None = Depends(session_claims),
) -> AdminUser:
    """Gate for every admin-only route: 401 before any appointment data is read."""
    return await current_admin(session, claims)
