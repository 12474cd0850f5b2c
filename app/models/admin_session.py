from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


class AdminSession(SQLModel, table=True):
    """Server-side half of an admin login; the cookie carries a signed pointer (sid) to it."""

    __tablename__ = "admin_sessions"
    id: int | None = Field(default=None, primary_key=True)
    sid: str = Field(unique=True, index=True, max_length=64)
    admin_id: int = Field(foreign_key="admin_users.id", ondelete="CASCADE", index=True)
    expires_at: datetime = Field(sa_column=Column(DateTime(), nullable=False, index=True))  # naive UTC
    revoked: bool = False
