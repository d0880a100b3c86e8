"""FastAPI example app demonstrating fastapi-reverselog."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from tracking_sim import TrackingSimProvider, _sim_objects, sim_router

from fastapi_reverselog import (
    ReverseLogConfig,
    create_reconciliation_router,
    register_exception_handlers,
)
from fastapi_reverselog.contrib.sqlalchemy.models import Base
from fastapi_reverselog.contrib.sqlalchemy.repository import (
    SQLAlchemyRequestRepository,
)
from fastapi_reverselog.status import RequestStatus

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("example")

# --- Database setup ---

DATABASE_URL = "sqlite+aiosqlite:///./example.db"
engine = create_async_engine(DATABASE_URL, echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession)

# --- Library integration ---

config = ReverseLogConfig(
    tracking_callback="http://localhost:8000/callbacks/received",
)
repository = SQLAlchemyRequestRepository(async_session)
provider = TrackingSimProvider(repository)

reconciliation_router = create_reconciliation_router(
    config=config,
    repository=repository,
    provider=provider,
)

# --- FastAPI app ---


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title="fastapi-reverselog demo",
    lifespan=lifespan,
)
register_exception_handlers(app)
app.include_router(reconciliation_router, prefix="/api/reverselog")
app.include_router(sim_router)

received: list[dict] = []


class RequestCreate(BaseModel):
    tracking_code: str
    callback: str = "http://localhost:8000/callbacks/received"


@app.post("/requests")
async def create_request(body: RequestCreate) -> dict[str, str]:
    """Store a used reverse request and register it with the simulator."""
    created = await repository.create(
        tracking_code=body.tracking_code,
        status=RequestStatus.USED,
        callback=body.callback,
    )
    _sim_objects.setdefault(body.tracking_code, [])
    return {"request_id": created.request_id, "status": created.status}


@app.get("/requests/{request_id}")
async def get_request(request_id: str) -> dict[str, str | int]:
    found = await repository.get_by_id(request_id)
    return {
        "request_id": found.request_id,
        "status": found.status,
        "retries": found.retries,
        "reason": found.reason,
    }


@app.post("/callbacks/received")
async def receive_callback(request: Request) -> dict[str, int]:
    """Sink for the notifications the engine sends."""
    payload = await request.json()
    logger.info("Callback received: %s", payload)
    received.append(payload)
    return {"received": len(received)}
