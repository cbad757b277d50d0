"""
Domain exceptions

Raised by the services and translated into the API error envelope
({"error": {"code", "message", "details"}}) by the handlers in main.py.
Store failures (sqlalchemy.exc.OperationalError) are not wrapped here; they
propagate unchanged and are reported as STORE_UNAVAILABLE.
"""
from typing import Any, Iterable, Optional


class TestCademyError(Exception):
    """Base class for errors reported back to the caller of a single operation"""

    code = "ERROR"
    status_code = 400

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(TestCademyError):
    """Caller-supplied data failed a required-field or enum-membership check"""

    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        self.fields = list(fields or [])
        super().__init__(message, details={"fields": self.fields} if self.fields else None)


class NotFoundError(TestCademyError):
    """Referenced record does not exist"""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, identifier: Any):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} '{identifier}' not found", details={"id": str(identifier)})


class InvalidContactError(TestCademyError):
    """A phone number or email address cannot be turned into a contact link"""

    code = "INVALID_CONTACT"
    status_code = 422

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message, details={"field": field})


class ConflictError(TestCademyError):
    """Update was based on a stale version of the record"""

    code = "CONFLICT"
    status_code = 409

    def __init__(self, entity: str, identifier: Any, expected_version: int, current_version: int):
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"{entity} '{identifier}' was modified by someone else; reload and retry",
            details={
                "id": str(identifier),
                "expected_version": expected_version,
                "current_version": current_version,
            },
        )
