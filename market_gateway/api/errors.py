"""Map domain exceptions to HTTP error responses"""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse

from market_gateway.api.dependencies import get_request_id
from market_gateway.domain.exceptions import (
    DomainException,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    ValidationFailedError,
)

STATUS_CODES = {
    NotFoundError: 404,
    ForbiddenError: 403,
    InvalidStateError: 400,
    ValidationFailedError: 400,
    PersistenceError: 500,
}


def status_code_for(exc: DomainException) -> int:
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Render {"error": {"code", "message"}}; internal details stay in the logs"""
    status_code = status_code_for(exc)
    request_id = get_request_id(request)

    if status_code >= 500:
        logging.error(f"Persistence failure: {exc.message}", extra={"request_id": request_id})
        message = "Internal server error"
    else:
        logging.warning(f"Request rejected: {exc.message}", extra={"request_id": request_id, "code": exc.code})
        message = exc.message

    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": exc.code, "message": message}},
    )
