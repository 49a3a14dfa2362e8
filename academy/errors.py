"""Application error hierarchy.

Service functions raise these instead of ``HTTPException`` so that the same
code can be called from routes, scripts and tests.  ``academy.main`` registers a
handler that turns any :class:`AppError` into a JSON response of the form
``{"code": ..., "message": ..., "details": ...}``.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for expected, user-facing failures."""

    code = "app_error"
    status_code = 500
    retryable = False

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        retryable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if retryable is not None:
            self.retryable = retryable

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        if self.retryable:
            body["retryable"] = True
        return body


class ValidationError(AppError):
    """Request was well-formed JSON but failed a domain check."""

    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, fields: Optional[dict[str, list[str]]] = None):
        super().__init__(message, fields)
        self.fields = fields or {}


class NotFoundError(AppError):
    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, identifier: Any = None):
        if identifier is not None:
            message = f"{resource} not found: {identifier}"
        else:
            message = f"{resource} not found"
        super().__init__(message)
        self.resource = resource
        self.identifier = identifier


class AuthenticationError(AppError):
    """No valid identity was presented."""

    code = "authentication_error"
    status_code = 401

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class AuthorizationError(AppError):
    """The caller is known but may not act on the target."""

    code = "authorization_error"
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class ConflictError(AppError):
    """A uniqueness invariant would be violated."""

    code = "conflict"
    status_code = 409


class DatabaseError(AppError):
    """Storage was unavailable or a transaction had to be rolled back."""

    code = "database_error"
    status_code = 503
    retryable = True
