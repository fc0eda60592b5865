"""
Mapping from domain exceptions to HTTP errors.

Services raise WorkflowError subclasses; endpoints translate
them here so every route answers the same way.
"""

from fastapi import HTTPException

from finance_review.exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
    WorkflowError,
)

STATUS_CODES: dict[type[WorkflowError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    InvalidStateError: 409,
    ForbiddenError: 403,
    StorageError: 503,
}


def to_http(error: WorkflowError) -> HTTPException:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
