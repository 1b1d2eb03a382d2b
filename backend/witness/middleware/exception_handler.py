"""Exception handler middleware for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import WitnessException

logger = logging.getLogger(__name__)


async def witness_exception_handler(request: Request, exc: WitnessException) -> JSONResponse:
    """
    Handle registry exceptions and return structured JSON responses.

    Client errors (4xx) are expected outcomes of the consensus rules, such
    as a duplicate vote or an overlapping proposal, and are logged at
    warning level; anything else at error level.

    Args:
        request: FastAPI request object
        exc: WitnessException instance

    Returns:
        JSONResponse with error details
    """
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        level,
        f"WitnessException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    headers = None
    if exc.status_code == 429:
        headers = {"Retry-After": str(exc.details.get("window_seconds", 3600))}

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers,
    )
