import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, InvalidCredentialsError, StorageError, UnauthenticatedError
from app.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    new_session_id,
    session_expiry,
    verify_password,
)
from app.models.admin_user import AdminPublic, AdminUser
from app.repositories import admin_repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionClaims:
    """What the admin cookie says: which admin, and which admin_sessions row."""

    admin_id: int
    sid: str


def read_session_token(token: str | None) -> SessionClaims | None:
    if not token:
        return None
    admin_id_str, sid = decode_session_token(token)
    if not admin_id_str or not sid:
        return None
    try:
        return SessionClaims(admin_id=int(admin_id_str), sid=sid)
    except ValueError:
        return None


def admin_to_public(admin: AdminUser) -> AdminPublic:
    return AdminPublic(id=admin.id, username=admin.username, role=admin.role)


async def create_admin(session: AsyncSession, username: str, password: str) -> AdminUser:
    """Setup-only registration of a dashboard operator."""
    existing = await admin_repository.get_admin_by_username(session, username)
    if existing:
        raise ConflictError(admin_repository.USERNAME_TAKEN_MESSAGE)
    admin = await admin_repository.create_admin_user(session, username, hash_password(password))
    logger.info("Admin user created: %s", username)
    return admin


async def login(session: AsyncSession, username: str, password: str) -> tuple[AdminUser, str]:
    """Returns (admin, cookie token). Unknown user and wrong password fail the same way."""
    admin = await admin_repository.get_admin_by_username(session, username)
    if not verify_password(password, admin.password_hash if admin else None):
        logger.info("Admin login failed for username=%s", username)
        raise InvalidCredentialsError()
    sid = new_session_id()
    expires_at = session_expiry()
    await admin_repository.create_session(session, admin.id, sid, expires_at)
    logger.info("Admin login: %s (id=%s)", admin.username, admin.id)
    return admin, create_session_token(admin.id, sid, expires_at)


async def current_admin(session: AsyncSession, claims: SessionClaims | None) -> AdminUser:
    if claims is None:
        raise UnauthenticatedError("Não autenticado")
    row = await admin_repository.get_active_session(session, claims.sid)
    if not row or row.admin_id != claims.admin_id:
        raise UnauthenticatedError("Sessão inválida ou expirada")
    admin = await admin_repository.get_admin_by_id(session, claims.admin_id)
    if not admin:
        await admin_repository.revoke_session(session, claims.sid)
        # Persist the revocation; the error below makes the request dependency roll back.
        await session.commit()
        raise UnauthenticatedError("Usuário admin não encontrado")
    return admin


async def logout(session: AsyncSession, claims: SessionClaims | None) -> None:
    """Always succeeds for the caller; failures only affect server bookkeeping."""
    if claims is None:
        return
    try:
        await admin_repository.revoke_session(session, claims.sid)
        await session.commit()
    except (StorageError, SQLAlchemyError) as e:
        logger.warning("Logout: could not revoke session for admin %s: %s", claims.admin_id, e)
        try:
            await session.rollback()
        except SQLAlchemyError as rollback_error:
            logger.warning("Logout: rollback failed: %s", rollback_error)
        return
    logger.info("Admin logout: id=%s", claims.admin_id)
