"""
Global exception handlers.

- KnownError -> ApiResponse known_failure with the error's status code
- Exception  -> ApiResponse unknown_failure, 500, no internal detail
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from cardtracker.models.failure import KnownError, create_known_failure, create_unknown_failure

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(KnownError)
    async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
        logger.info(
            "known_failure",
            extra={"kind": exc.kind.value, "path": request.url.path, "detail": exc.detail},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=create_known_failure(exc).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def unknown_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception on %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_unknown_failure(exc).model_dump(mode="json"),
        )
