from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    TRANSPORT = "transport"
    API = "api"
    DECODE = "decode"
    CANCELLED = "cancelled"


class BinanceClientError(Exception):
    """Base exception for all client errors."""

    kind: ErrorKind

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ValidationError(BinanceClientError):
    """Request failed a precondition before anything was sent."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field

    @classmethod
    def mandatory(cls, field: str) -> "ValidationError":
        return cls(f"{field}: field is MANDATORY", field=field)


class TransportError(BinanceClientError):
    """Network/connection related errors, including failing to read the body."""

    kind = ErrorKind.TRANSPORT


class APIError(BinanceClientError):
    """Error payload returned by the exchange with HTTP status >= 400."""

    kind = ErrorKind.API

    def __init__(
        self,
        code: int = 0,
        message: str = "",
        *,
        status_code: int | None = None,
        method: str | None = None,
        path: str | None = None,
        body: str | None = None,
    ):
        super().__init__(f"<APIError> code={code}, msg={message}")
        self.code = code
        self.message = message
        self.status_code = status_code
        self.method = method
        self.path = path
        self.body = body


class DecodeError(BinanceClientError):
    """Success payload could not be decoded into the expected shape."""

    kind = ErrorKind.DECODE


class RequestCancelledError(BinanceClientError):
    """The call was cancelled or ran past its deadline."""

    kind = ErrorKind.CANCELLED
