"""Exceptions raised by the mailer pipeline."""

from __future__ import annotations


class MailerError(Exception):
    """Base class for fatal command errors."""

    error_code = "mailer_error"

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code


class ValidationError(MailerError):
    """Raised when CLI or JSON input cannot be parsed."""

    error_code = "validation_error"


class DataError(MailerError):
    """Raised when an expected input file or structure is missing."""

    error_code = "data_error"


class SubprocessError(MailerError):
    """Raised when an external helper exits non-zero."""

    error_code = "subprocess_error"

    def __init__(self, message: str, returncode: int, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class RouteResolutionError(MailerError):
    """Raised when a route/endpoint pair does not form a usable URL."""

    error_code = "route_resolution_error"


class ApiError(MailerError):
    """Raised when the mail API call fails or returns a non-2xx status."""

    error_code = "api_error"

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
