"""Error taxonomy for the Analytics Hub.

Authorization checks themselves never raise; they return booleans. These
exceptions are raised by the places that act on a decision: ``Gate.authorize``,
the administrative service and the API layer.
"""

from typing import Any, Dict, List, Optional


class HubError(Exception):
    code: str = "HUB_ERROR"
    message: str = "Application error"
    status_code: int = 400
    details: Optional[Any] = None

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        if details is not None:
            self.details = details

        super().__init__(self.message)


class ValidationError(HubError):
    """Malformed or non-unique input, reported per field."""

    code = "VALIDATION_ERROR"
    message = "The given data was invalid."
    status_code = 422

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        self.errors = {field: list(msgs) for field, msgs in errors.items()}
        super().__init__(message, details=self.errors)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls({field: [message]})


class NotFoundError(HubError):
    code = "NOT_FOUND"
    message = "Resource not found"
    status_code = 404


class ConflictError(HubError):
    code = "CONFLICT"
    message = "Resource conflict"
    status_code = 409


class AuthorizationDenied(HubError):
    """An authorization decision came back false."""

    code = "PERMISSION_DENIED"
    message = "This action is unauthorized."
    status_code = 403

    def __init__(self, ability: str, reason: Optional[str] = None):
        self.ability = ability
        self.reason = reason
        super().__init__(details={"ability": ability, "reason": reason})


def error_payload(code: str, message: str, details: Optional[Any] = None) -> Dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details}}
