"""Exceptions raised by the crawlapi client."""

from typing import Any, Optional


class CrawlApiError(Exception):
    """Base exception for client errors.

    Attributes:
        message: Human readable description
        status_code: HTTP status of the failed response, if any
        response_data: Parsed error payload returned by the API, if any
        attempts: Number of attempts made before the error surfaced
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Any = None,
        attempts: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data
        self.attempts = attempts

    def __str__(self) -> str:
        if self.attempts and self.attempts > 1:
            return f"{self.message} (after {self.attempts} attempts)"
        return self.message


class ParameterValidationError(CrawlApiError):
    """Raised when call parameters are invalid. Never retried."""

    pass


class NotFoundError(CrawlApiError):
    """Resource does not exist (HTTP 404)."""

    pass


class TransientTransportError(CrawlApiError):
    """Network failure, timeout, rate limit or 5xx. Retryable."""

    pass


class IncompleteBodyError(TransientTransportError):
    """Response body ended before it could be parsed."""

    pass


class TerminalServerError(CrawlApiError):
    """Non-2xx response that retrying will not fix."""

    pass


class BodyParseError(TerminalServerError):
    """Response body is malformed."""

    pass


class BailError(CrawlApiError):
    """Explicit early termination of a retried operation.

    The wrapped error is kept as ``__cause__``.
    """

    def __init__(self, cause: BaseException, attempts: Optional[int] = None):
        super().__init__(str(cause), getattr(cause, "status_code", None), attempts=attempts)
        self.__cause__ = cause
