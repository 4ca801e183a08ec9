"""
Centralized error handlers for FastAPI.

Maps brokerage domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema: {"error": code, "detail": message}.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.brokerage.errors import (
    AssetNotFoundError,
    BrokerageDomainError,
    InsufficientFundsError,
    InvalidArgumentError,
    InvalidOrderStatusError,
    InvalidStateError,
    OrderNotFoundError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_404 = 404
HTTP_500 = 500

# Domain error -> (status, error code). A subclass maps like its nearest listed ancestor.
ERROR_STATUS: dict[type[BrokerageDomainError], tuple[int, str]] = {
    InvalidArgumentError: (HTTP_400, "INVALID_ARGUMENT"),
    AssetNotFoundError: (HTTP_404, "ASSET_NOT_FOUND"),
    InsufficientFundsError: (HTTP_400, "INSUFFICIENT_FUNDS"),
    InvalidStateError: (HTTP_400, "INVALID_STATE"),
    OrderNotFoundError: (HTTP_404, "ORDER_NOT_FOUND"),
    InvalidOrderStatusError: (HTTP_400, "INVALID_ORDER_STATUS"),
}


def _lookup_status(
    error_type: type[BrokerageDomainError],
) -> tuple[int, str] | None:
    """Return the mapping of the closest class in the error's hierarchy."""
    for cls in error_type.__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return None


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(BrokerageDomainError)
    async def handle_brokerage_domain(
        _request: Request, exc: BrokerageDomainError
    ) -> JSONResponse:
        """Translate a brokerage domain error to its status and code."""
        mapped = _lookup_status(type(exc))
        if mapped is None:
            logger.error("Unhandled brokerage domain error: %s", exc.message)
            return _error_response(HTTP_500, "INTERNAL_ERROR", "Internal server error")

        status_code, code = mapped
        logger.warning("%s: %s", code, exc.message)
        return _error_response(status_code, code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "INTERNAL_ERROR", "Internal server error")
