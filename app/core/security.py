import secrets
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)

# Verified against when the username does not exist, so both failure paths cost one bcrypt round.
_DUMMY_HASH = pwd_context.hash("not-a-real-password")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        pwd_context.verify(plain_password, _DUMMY_HASH)
        return False
    return pwd_context.verify(plain_password, hashed_password)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


def session_expiry() -> datetime:
    return datetime.now(UTC) + timedelta(hours=settings.session_expire_hours)


def create_session_token(admin_id: int, sid: str, expires_at: datetime) -> str:
    to_encode = {
        "sub": str(admin_id),
        "exp": expires_at,
        "type": "session",
        "jti": sid,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_session_token(token: str) -> tuple[str | None, str | None]:
    """Returns (admin_id_str, sid) or (None, None)."""
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
        if payload.get("type") != "session":
            return None, None
        return payload.get("sub"), payload.get("jti")
    except JWTError:
        return None, None
