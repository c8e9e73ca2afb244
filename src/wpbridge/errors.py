"""
WordPress error types.

Upstream failures are raised as WordPressAPIError with a code derived from the
HTTP status, so callers can branch on `code` without knowing status numbers.
"""

STATUS_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_SUPPORTED",
    408: "TIMEOUT",
    409: "CONFLICT",
    412: "PRECONDITION_FAILED",
    413: "CONTENT_TOO_LARGE",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "UNPROCESSABLE_CONTENT",
    429: "TOO_MANY_REQUESTS",
    499: "CLIENT_CLOSED_REQUEST",
    500: "INTERNAL_SERVER_ERROR",
    501: "NOT_IMPLEMENTED",
    502: "BAD_GATEWAY",
    503: "SERVICE_UNAVAILABLE",
    504: "GATEWAY_TIMEOUT",
}


def status_to_code(status: int) -> str:
    """Map an HTTP status to an error code name."""
    if status in STATUS_CODES:
        return STATUS_CODES[status]
    return "INTERNAL_SERVER_ERROR" if status >= 500 else "BAD_REQUEST"


class WordPressAPIError(Exception):
    """Upstream HTTP or network failure talking to WordPress."""

    def __init__(self, message: str, status: int = 500, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code or status_to_code(status)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, status={self.status}, message={self.message!r})"


class AuthenticationError(WordPressAPIError):
    """Rejected credentials or missing auth configuration."""

    def __init__(self, message: str = "WordPress rejected these credentials."):
        super().__init__(message, status=401, code="UNAUTHORIZED")
