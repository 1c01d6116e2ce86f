"""Application error taxonomy.

Every error raised from a request path is an ``AppError`` subclass carrying
the HTTP status and a short user-facing message. The handlers registered in
``blogdesk.main`` turn them into ``{"success": false, "message": ...}``.
"""

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal Server Error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class AuthError(AppError):
    """Missing, invalid or expired credential, or insufficient role."""

    status_code = status.HTTP_401_UNAUTHORIZED

    _MESSAGES = {
        "missing": "Please login to access this resource",
        "invalid": "Invalid token, please login again",
        "expired": "Session expired, please login again",
        "forbidden": "You are not authorized to access this resource",
    }

    def __init__(self, reason: str = "missing", message: str | None = None):
        self.reason = reason
        # Role failures answer 400, credential failures 401
        code = (
            status.HTTP_400_BAD_REQUEST
            if reason == "forbidden"
            else status.HTTP_401_UNAUTHORIZED
        )
        super().__init__(message or self._MESSAGES.get(reason, self._MESSAGES["invalid"]), code)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class UpstreamError(AppError):
    """A dependent service (mailer, realtime push) failed."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Upstream service failed"
