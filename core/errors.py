# =============================================================================
# core/errors.py  —  Error taxonomy for Loom API calls
# =============================================================================
#
# Four kinds of failure can come back from the client:
#
#   AuthenticationError  missing token, or HTTP 401/403
#   RateLimitError       HTTP 429, carries retry_after (seconds)
#   NotFoundError        HTTP 404, code "NOT_FOUND"
#   LoomApiError         any other non-2xx, carries the status code
#
# Nothing here retries.  retry_after is information for the caller.
# =============================================================================

from typing import Optional


class LoomError(Exception):
    """Base class for every failure raised by core.loom_client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(LoomError):
    pass


class RateLimitError(LoomError):
    def __init__(self, message: str, retry_after: int = 60):
        super().__init__(message)
        self.retry_after = retry_after


class LoomApiError(LoomError):
    def __init__(self, message: str, status_code: int, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class NotFoundError(LoomApiError):
    CODE = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, 404, self.CODE)


def format_error(error: BaseException) -> str:
    """Render any exception as a single human-readable line."""
    if isinstance(error, RateLimitError):
        return f"{error.message}. Retry after {error.retry_after} seconds."
    if isinstance(error, LoomError):
        return error.message
    text = str(error)
    return text or type(error).__name__
