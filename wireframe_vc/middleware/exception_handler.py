"""Exception handlers turning service errors into structured JSON responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import ErrorCode, WireframeException

logger = logging.getLogger(__name__)


async def wireframe_exception_handler(request: Request, exc: WireframeException) -> JSONResponse:
    """Map a WireframeException to ``{"error", "message", "details"}``.

    Client errors (4xx) log at WARNING, server errors at ERROR.
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"{type(exc).__name__}: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for errors no service translated. Never leaks internals."""
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": ErrorCode.INTERNAL_ERROR.value,
            "message": "Internal server error",
            "details": {},
        },
    )
