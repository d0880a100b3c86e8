"""Exception hierarchy and handlers mapping it to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class ReverseLogError(Exception):
    """Base class for every error raised by fastapi-reverselog."""


class StorageError(ReverseLogError):
    """The request store failed to run a query or an update."""


class RequestNotFoundError(StorageError):
    """No stored request matches the given identifier."""

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Request {request_id} not found")


class ProviderError(ReverseLogError):
    """The tracking provider call failed."""


class InvalidFilterError(ReverseLogError):
    """A search predicate uses an unknown field or operator."""


class InvalidTransitionError(ReverseLogError):
    """A status change is not allowed by the request lifecycle."""

    def __init__(self, current: str, new: str) -> None:
        self.current = current
        self.new = new
        super().__init__(f"Cannot move request from {current} to {new}")


class InvalidRequestTypeError(ReverseLogError):
    """Unknown reverse-logistics request type."""


def _error_response(
    status_code: int, exc: Exception, code: str
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register reverselog exception handlers on a FastAPI app.

    More specific handlers must be registered first so FastAPI
    matches them before the generic ReverseLogError handler.

    Handler order (most specific first):
    1. RequestNotFoundError → 404
    2. StorageError → 503
    3. ProviderError → 502
    4. InvalidTransitionError → 409
    5. InvalidFilterError, InvalidRequestTypeError → 400
    6. ReverseLogError → 400 (catch-all)
    """

    @app.exception_handler(RequestNotFoundError)
    async def _not_found(
        request: Request,
        exc: RequestNotFoundError,
    ) -> JSONResponse:
        return _error_response(404, exc, "request_not_found")

    @app.exception_handler(StorageError)
    async def _storage_error(
        request: Request,
        exc: StorageError,
    ) -> JSONResponse:
        return _error_response(503, exc, "storage_error")

    @app.exception_handler(ProviderError)
    async def _provider_error(
        request: Request,
        exc: ProviderError,
    ) -> JSONResponse:
        return _error_response(502, exc, "provider_error")

    @app.exception_handler(InvalidTransitionError)
    async def _invalid_transition(
        request: Request,
        exc: InvalidTransitionError,
    ) -> JSONResponse:
        return _error_response(409, exc, "invalid_transition")

    @app.exception_handler(InvalidFilterError)
    async def _invalid_filter(
        request: Request,
        exc: InvalidFilterError,
    ) -> JSONResponse:
        return _error_response(400, exc, "invalid_filter")

    @app.exception_handler(InvalidRequestTypeError)
    async def _invalid_request_type(
        request: Request,
        exc: InvalidRequestTypeError,
    ) -> JSONResponse:
        return _error_response(400, exc, "invalid_request_type")

    @app.exception_handler(ReverseLogError)
    async def _reverselog_error(
        request: Request,
        exc: ReverseLogError,
    ) -> JSONResponse:
        return _error_response(400, exc, "reverselog_error")
