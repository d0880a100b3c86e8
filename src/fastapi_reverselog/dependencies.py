"""Dependency providers for request handlers."""

from __future__ import annotations

from fastapi import Request

from fastapi_reverselog.config import ReverseLogConfig
from fastapi_reverselog.polling import StatusPoller
from fastapi_reverselog.protocols import (
    Notifier,
    ProviderHandler,
    RequestRepository,
)
from fastapi_reverselog.retry import RetryEngine
from fastapi_reverselog.tasks import TaskPool


def get_config(request: Request) -> ReverseLogConfig:
    """Read config from FastAPI app state."""
    return request.app.state.reverselog_config


def get_repository(request: Request) -> RequestRepository:
    """Read repository from FastAPI app state."""
    return request.app.state.reverselog_repository


def get_provider(request: Request) -> ProviderHandler:
    """Read provider handler from FastAPI app state."""
    return request.app.state.reverselog_provider


def get_notifier(request: Request) -> Notifier:
    return request.app.state.reverselog_notifier


def get_pool(request: Request) -> TaskPool:
    return request.app.state.reverselog_pool


def get_poller(request: Request) -> StatusPoller:
    """Create a StatusPoller for the current request."""
    return StatusPoller(
        repository=get_repository(request),
        provider=get_provider(request),
        notifier=get_notifier(request),
        pool=get_pool(request),
        config=get_config(request),
    )


def get_retry_engine(request: Request) -> RetryEngine:
    """Create a RetryEngine for the current request."""
    return RetryEngine(
        repository=get_repository(request),
        provider=get_provider(request),
        notifier=get_notifier(request),
        pool=get_pool(request),
        config=get_config(request),
    )
