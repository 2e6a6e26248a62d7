"""
Custom exceptions for the order management domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, Dataverse wire format, etc.).
"""

from typing import Any, Optional


class OrderManagementException(Exception):
    """Base exception for all order management service errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(OrderManagementException):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class RecordNotFoundException(OrderManagementException):
    """Raised at the HTTP boundary when a record does not exist."""

    def __init__(self, entity: str, record_id: Any):
        message = f"{entity} with ID {record_id} not found."
        super().__init__(
            message=message, details={"entity": entity, "id": str(record_id)}
        )


class ExternalServiceException(OrderManagementException):
    """Raised when the remote data platform fails or rejects an operation."""

    def __init__(
        self,
        service: str,
        reason: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        message = f"External service '{service}' failed"
        if reason:
            message += f": {reason}"
        self.status_code = status_code
        super().__init__(
            message=message,
            details={"service": service, "reason": reason, "status_code": status_code},
        )


class ConnectionNotEstablishedException(ExternalServiceException):
    """Raised when the Dataverse client is used before a connection exists."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            service="dataverse",
            reason=reason
            or "Dataverse connection is not established. Call connect() first.",
        )


class ConfigurationException(OrderManagementException):
    """Raised when required configuration values are missing."""

    def __init__(self, setting: str, reason: str = "must be set"):
        message = f"Configuration error for {setting}: {reason}"
        super().__init__(message=message, details={"setting": setting, "reason": reason})
