"""Translation of domain errors into HTTP errors."""

from typing import Any

from fastapi import HTTPException, status

from ..domain.exceptions import RecordNotFoundException, ValidationException


def not_found(entity: str, record_id: Any) -> HTTPException:
    exc = RecordNotFoundException(entity, record_id)
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "success": False,
            "error": "not_found",
            "message": exc.message,
            "details": exc.details,
        },
    )


def bad_request(exc: ValidationException) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "success": False,
            "error": "validation_error",
            "message": exc.message,
            "details": exc.details,
        },
    )
