import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, StorageError
from app.models.admin_session import AdminSession
from app.models.admin_user import AdminUser

logger = logging.getLogger(__name__)

USERNAME_TAKEN_MESSAGE = "Nome de usuário já existe"


def _utc_naive() -> datetime:
    """Naive UTC datetime for DB columns that are TIMESTAMP WITHOUT TIME ZONE."""
    return datetime.now(UTC).replace(tzinfo=None)


def _naive_utc(dt: datetime) -> datetime:
    """Ensure datetime is naive UTC for DB (strip or convert to UTC and strip)."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(UTC)
    return dt.replace(tzinfo=None)


async def create_admin_user(
    session: AsyncSession, username: str, password_hash: str, role: str = "admin"
) -> AdminUser:
    admin = AdminUser(username=username, password_hash=password_hash, role=role)
    session.add(admin)
    try:
        await session.flush()
    except IntegrityError as e:
        raise ConflictError(USERNAME_TAKEN_MESSAGE) from e
    except SQLAlchemyError as e:
        logger.exception("Creating admin %s failed: %s", username, e)
        raise StorageError() from e
    await session.refresh(admin)
    return admin


async def get_admin_by_username(session: AsyncSession, username: str) -> AdminUser | None:
    try:
        result = await session.execute(select(AdminUser).where(AdminUser.username == username))
    except SQLAlchemyError as e:
        logger.exception("Admin lookup by username failed: %s", e)
        raise StorageError() from e
    return result.scalar_one_or_none()


async def get_admin_by_id(session: AsyncSession, admin_id: int) -> AdminUser | None:
    try:
        return await session.get(AdminUser, admin_id)
    except SQLAlchemyError as e:
        logger.exception("Admin lookup by id failed: %s", e)
        raise StorageError() from e


async def create_session(
    session: AsyncSession, admin_id: int, sid: str, expires_at: datetime
) -> AdminSession:
    row = AdminSession(sid=sid, admin_id=admin_id, expires_at=_naive_utc(expires_at))
    session.add(row)
    try:
        await session.flush()
    except SQLAlchemyError as e:
        logger.exception("Creating admin session failed: %s", e)
        raise StorageError() from e
    return row


async def get_active_session(session: AsyncSession, sid: str) -> AdminSession | None:
    try:
        result = await session.execute(
            select(AdminSession).where(
                AdminSession.sid == sid,
                AdminSession.revoked == False,  # noqa: E712
                AdminSession.expires_at > _utc_naive(),
            )
        )
    except SQLAlchemyError as e:
        logger.exception("Admin session lookup failed: %s", e)
        raise StorageError() from e
    return result.scalar_one_or_none()


async def revoke_session(session: AsyncSession, sid: str) -> None:
    try:
        result = await session.execute(select(AdminSession).where(AdminSession.sid == sid))
        row = result.scalar_one_or_none()
        if row:
            row.revoked = True
            session.add(row)
            await session.flush()
    except SQLAlchemyError as e:
        logger.exception("Revoking admin session failed: %s", e)
        raise StorageError() from e
