"""SQLAlchemy repository implementation."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fastapi_reverselog.contrib.sqlalchemy.models import ReverseRequestModel
from fastapi_reverselog.exceptions import (
    InvalidFilterError,
    RequestNotFoundError,
    StorageError,
)
from fastapi_reverselog.filters import OPERATORS, Search
from fastapi_reverselog.status import RequestStatus
from fastapi_reverselog.types import ReverseRequest

_COLUMNS = frozenset(ReverseRequestModel.__table__.columns.keys())


def _to_entity(row: ReverseRequestModel) -> ReverseRequest:
    return ReverseRequest(
        request_id=row.request_id,
        postage_code=row.postage_code,
        tracking_code=row.tracking_code,
        status=RequestStatus(row.status),
        retries=row.retries,
        callback=row.callback,
        reason=row.reason,
    )


def _plain(value: Any) -> Any:
    return str(value) if isinstance(value, RequestStatus) else value


class SQLAlchemyRequestRepository:
    """Request repository backed by SQLAlchemy async sessions."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    async def get_by_id(self, request_id: str) -> ReverseRequest:
        try:
            async with self.session_factory() as session:
                row = await session.get(ReverseRequestModel, request_id)
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        if row is None:
            raise RequestNotFoundError(request_id)
        return _to_entity(row)

    async def create(self, **kwargs) -> ReverseRequest:
        row = ReverseRequestModel(
            request_id=kwargs.get("request_id") or str(uuid.uuid4()),
            postage_code=kwargs.get("postage_code", ""),
            tracking_code=kwargs.get("tracking_code", ""),
            status=str(kwargs.get("status", RequestStatus.CREATED)),
            retries=kwargs.get("retries", 0),
            callback=kwargs.get("callback", ""),
            reason=kwargs.get("reason", ""),
        )
        try:
            async with self.session_factory() as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        return _to_entity(row)

    async def search(self, search: Search) -> list[ReverseRequest]:
        stmt = select(ReverseRequestModel)
        for where in search.where:
            if where.field not in _COLUMNS:
                raise InvalidFilterError(f"Unknown field {where.field!r}")
            column = getattr(ReverseRequestModel, where.field)
            stmt = stmt.where(
                OPERATORS[where.operator](column, _plain(where.value))
            )
        stmt = stmt.order_by(ReverseRequestModel.request_id)
        if search.offset:
            stmt = stmt.offset(search.offset)
        if search.limit is not None:
            stmt = stmt.limit(search.limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        return [_to_entity(row) for row in rows]

    async def update_status(
        self,
        request: ReverseRequest,
        status: str,
        reason: str = "",
        *,
        expected_status: str | None = None,
    ) -> bool:
        stmt = update(ReverseRequestModel).where(
            ReverseRequestModel.request_id == request.request_id
        )
        if expected_status is not None:
            stmt = stmt.where(
                ReverseRequestModel.status == str(expected_status)
            )
        stmt = stmt.values(
            status=str(status),
            reason=reason,
            retries=request.retries,
            postage_code=request.postage_code,
            tracking_code=request.tracking_code,
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                updated = result.rowcount
                exists = updated > 0
                if not exists:
                    exists = (
                        await session.get(
                            ReverseRequestModel, request.request_id
                        )
                        is not None
                    )
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        if not exists:
            raise RequestNotFoundError(request.request_id)
        return updated > 0
