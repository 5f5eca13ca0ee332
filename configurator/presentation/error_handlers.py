"""Centralized error handling for the presentation layer."""

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..domain.exceptions import (
    DomainError,
    NotFoundError,
    PersistenceError,
    RuleViolation,
    ValidationError,
)

GENERIC_SERVER_ERROR = "An internal server error occurred. Please try again."
# starlette renamed its 422 constant between releases
UNPROCESSABLE_STATUS = 422
MISSING_CAR_FIELDS = (
    'Bad Request: Please provide a "name" and a non-empty array of "optionIds".'
)
_REQUEST_LOCATIONS = frozenset({"body", "path", "query"})
_CAR_FIELDS = frozenset({"name", "optionIds", "unknown"})


def status_for(error: DomainError) -> int:
    """HTTP status for a domain error; not-found never shares a code with 400s."""
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, RuleViolation):
        return UNPROCESSABLE_STATUS
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(error: DomainError) -> dict[str, Any]:
    if isinstance(error, RuleViolation):
        return {
            "error": str(error),
            "feature": error.feature,
            "option": error.option,
            "reason": error.reason,
        }
    if isinstance(error, PersistenceError | ValidationError | NotFoundError):
        return {"error": str(error)}
    # Unknown domain errors may carry internals
    return {"error": GENERIC_SERVER_ERROR}


def handle_domain_error(error: DomainError, request: Request) -> JSONResponse:
    """Convert domain errors to JSON responses."""
    return JSONResponse(status_code=status_for(error), content=error_body(error))


def handle_request_validation_error(
    error: RequestValidationError, request: Request
) -> JSONResponse:
    """Malformed requests are client errors (400), like empty fields.

    The message names the first offending field; a bad car name or option
    list keeps the usual "provide name and optionIds" wording.
    """
    details = []
    for item in error.errors():
        field_name = ".".join(
            str(loc) for loc in item["loc"] if loc not in _REQUEST_LOCATIONS
        )
        details.append(
            {
                "field": field_name or "unknown",
                "code": item["type"],
                "message": item["msg"],
            }
        )

    first = details[0] if details else None
    if first is None or first["field"].split(".")[0] in _CAR_FIELDS:
        message = MISSING_CAR_FIELDS
    else:
        message = f"Bad Request: invalid {first['field']}: {first['message']}"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": message,
            "details": details,
        },
    )


def handle_server_error(request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": GENERIC_SERVER_ERROR},
    )
