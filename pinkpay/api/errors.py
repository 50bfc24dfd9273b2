"""Translate domain errors into JSON error responses.

Body: {"detail": <message>, "code": <error code>, "details": {...}}
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from pinkpay.core.exceptions import (
    AlreadyResolvedError,
    DuplicateSubmissionError,
    InvalidTransitionError,
    KYCRequiredError,
    NotFoundError,
    PersistenceUnavailableError,
    PinkPayError,
    RateUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins
STATUS_CODES: list[tuple[type[PinkPayError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (AlreadyResolvedError, status.HTTP_409_CONFLICT),
    (DuplicateSubmissionError, status.HTTP_409_CONFLICT),
    (KYCRequiredError, status.HTTP_403_FORBIDDEN),
    (RateUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (PersistenceUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_code_for(exc: PinkPayError) -> int:
    for error_class, code in STATUS_CODES:
        if isinstance(exc, error_class):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def pinkpay_error_handler(request: Request, exc: PinkPayError) -> JSONResponse:
    code = status_code_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=code,
        content={"detail": exc.message, "code": exc.code, "details": exc.details},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PinkPayError, pinkpay_error_handler)
