from typing import Optional, Any, Dict

from utils.constants import (
    ERROR_BODY_INVALID,
    ERROR_FETCH_FAILED,
    ERROR_INTERNAL,
    ERROR_PHONE_INVALID,
    ERROR_UNAUTHORIZED,
    ERROR_WATI,
)


class RelayError(Exception):
    """
    Base exception for the relay.

    `code` is returned to the caller as the "error" field; `extra` holds any
    additional response fields.
    """
    def __init__(
        self,
        message: str,
        code: str = ERROR_INTERNAL,
        status_code: int = 500,
        extra: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.extra = extra or {}
        super().__init__(self.message)


class AuthError(RelayError):
    """
    Raised when the bearer credential is missing or wrong.
    """
    def __init__(self, message: str = "Missing or invalid bearer token"):
        super().__init__(message, code=ERROR_UNAUTHORIZED, status_code=401)


class ValidationError(RelayError):
    """
    Raised when the request body or phone number is malformed.
    """
    def __init__(
        self,
        message: str = "Validation error",
        code: str = ERROR_PHONE_INVALID,
        details: Optional[Any] = None
    ):
        extra = {"detail": details} if details is not None else None
        super().__init__(message, code=code, status_code=400, extra=extra)


class BodyValidationError(ValidationError):
    """
    Raised when the request body does not match the expected shape.
    """
    def __init__(self, message: str = "Request body is invalid", details: Optional[Any] = None):
        super().__init__(message, code=ERROR_BODY_INVALID, details=details)


class DownstreamError(RelayError):
    """
    Raised when a destination answers with a non-2xx status.
    """
    def __init__(self, dest: str, status: int, detail: Any):
        self.dest = dest
        self.status = status
        self.detail = detail
        super().__init__(
            f"Destination {dest} responded with {status}",
            code=ERROR_WATI,
            status_code=502,
            extra={"dest": dest, "detail": detail}
        )


class TransportError(RelayError):
    """
    Raised when a destination cannot be reached.
    """
    def __init__(self, dest: str, message: str = "Request to destination failed"):
        self.dest = dest
        super().__init__(message, code=ERROR_FETCH_FAILED, status_code=500)


class ConfigurationError(Exception):
    """
    Raised at startup when the relay cannot be configured to serve.
    """
    pass
