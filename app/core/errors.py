"""
Guestbook error taxonomy.

Every failure the API reports is one of these typed values. Services and
stores raise them; ``app.main`` is the only place they are turned into HTTP
responses.
"""
from typing import Optional


class GuestbookError(Exception):
    """Base error: stable machine-readable ``code`` plus a human ``message``."""

    status_code: int = 500
    default_code: str = "error"
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(GuestbookError):
    status_code = 400
    default_code = "invalid_request"
    default_message = "Invalid request"


class Unauthorized(GuestbookError):
    status_code = 401
    default_code = "unauthorized"
    default_message = "Unauthorized"


class NotFound(GuestbookError):
    status_code = 404
    default_code = "not_found"
    default_message = "Resource not found"


class StoreError(GuestbookError):
    """Backend failure. ``detail`` is for server logs, never for clients in production."""

    status_code = 500
    default_code = "store_error"
    default_message = "Storage backend error"

    def __init__(self, detail: str = "", message: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message=message, code=code)
        self.detail = detail


class ConfigurationError(GuestbookError):
    status_code = 500
    default_code = "not_configured"
    default_message = "Server is not configured for this operation"
