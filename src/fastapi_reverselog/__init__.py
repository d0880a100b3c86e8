"""Reverse-logistics reconciliation and retry engine for FastAPI."""

from typing import TYPE_CHECKING

__version__ = "0.1.0"

__all__ = [
    "CallbackNotifier",
    "ProviderHandler",
    "RequestRepository",
    "RetryEngine",
    "ReverseLogConfig",
    "ReverseLogisticHandler",
    "ReverseRequest",
    "StatusPoller",
    "TaskPool",
    "__version__",
    "create_reconciliation_router",
    "register_exception_handlers",
]

if TYPE_CHECKING:
    from fastapi_reverselog.config import ReverseLogConfig
    from fastapi_reverselog.exceptions import register_exception_handlers
    from fastapi_reverselog.notifier import CallbackNotifier
    from fastapi_reverselog.polling import StatusPoller
    from fastapi_reverselog.protocols import (
        ProviderHandler,
        RequestRepository,
    )
    from fastapi_reverselog.provider import ReverseLogisticHandler
    from fastapi_reverselog.retry import RetryEngine
    from fastapi_reverselog.router import create_reconciliation_router
    from fastapi_reverselog.tasks import TaskPool
    from fastapi_reverselog.types import ReverseRequest

_LAZY = {
    "ReverseLogConfig": "fastapi_reverselog.config",
    "register_exception_handlers": "fastapi_reverselog.exceptions",
    "CallbackNotifier": "fastapi_reverselog.notifier",
    "StatusPoller": "fastapi_reverselog.polling",
    "ProviderHandler": "fastapi_reverselog.protocols",
    "RequestRepository": "fastapi_reverselog.protocols",
    "ReverseLogisticHandler": "fastapi_reverselog.provider",
    "RetryEngine": "fastapi_reverselog.retry",
    "create_reconciliation_router": "fastapi_reverselog.router",
    "TaskPool": "fastapi_reverselog.tasks",
    "ReverseRequest": "fastapi_reverselog.types",
}


def __getattr__(name: str):
    # Lazy imports to avoid loading all submodules on package import.
    module_name = _LAZY.get(name)
    if module_name is None:
        raise AttributeError(
            f"module 'fastapi_reverselog' has no attribute {name!r}"
        )
    from importlib import import_module

    return getattr(import_module(module_name), name)
