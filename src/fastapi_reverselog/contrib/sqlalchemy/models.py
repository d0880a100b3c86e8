"""SQLAlchemy reverse request model."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""


class ReverseRequestModel(Base):
    """Persistence model of a reverse-logistics request."""

    __tablename__ = "reverselog_requests"

    request_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    postage_code: Mapped[str] = mapped_column(String(64), default="")
    tracking_code: Mapped[str] = mapped_column(
        String(64), index=True, default=""
    )
    status: Mapped[str] = mapped_column(
        String(32), index=True, default="created"
    )
    retries: Mapped[int] = mapped_column(Integer, default=0)
    callback: Mapped[str] = mapped_column(String(512), default="")
    reason: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(tz=UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(tz=UTC),
        onupdate=lambda: datetime.now(tz=UTC),
    )
