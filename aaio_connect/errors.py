"""Exceptions raised by the AAIO client.

Every exception carries a ``kind`` discriminant, so callers can branch on
``err.kind`` instead of depending on the order of ``except`` clauses.
"""
from datetime import timedelta
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    API = "api"
    SECURITY = "security"
    PAYMENT_FAILED = "payment_failed"
    CANCELLED = "cancelled"


class AaioError(Exception):
    """Base exception for AAIO client errors."""

    kind: ErrorKind = ErrorKind.API

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.response_body = response_body
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return False

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.error_code is not None:
            parts.append(f"code={self.error_code}")
        return " ".join(parts)


class TransportError(AaioError):
    """Network-level failure: connection refused, DNS, TLS, broken stream."""

    kind = ErrorKind.TRANSPORT

    @property
    def retryable(self) -> bool:
        return True


class GatewayTimeoutError(TransportError):
    """The caller-visible deadline of a single request elapsed."""

    kind = ErrorKind.TIMEOUT


class ApiError(AaioError):
    """Non-success gateway response or a body that could not be decoded."""

    kind = ErrorKind.API

    @property
    def retryable(self) -> bool:
        return self.status_code is not None and (self.status_code == 429 or self.status_code >= 500)


class AuthenticationError(ApiError):
    """Raised on 401/403: the API key is missing, wrong or lacks access."""

    kind = ErrorKind.AUTHENTICATION


class ValidationError(ApiError):
    """Raised on 400 responses and on malformed caller input."""

    kind = ErrorKind.VALIDATION


class SecurityError(AaioError):
    """Raised when a webhook comes from an IP outside the gateway allow-list."""

    kind = ErrorKind.SECURITY

    def __init__(self, message: str, request_ip: Optional[str] = None):
        self.request_ip = request_ip
        super().__init__(message)


class PaymentFailedError(AaioError):
    """The gateway reported the order as failed while we were waiting on it."""

    kind = ErrorKind.PAYMENT_FAILED

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Payment failed for order {order_id}")


class PaymentWaitTimeoutError(AaioError):
    """The order did not reach a terminal status before the wait deadline."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, order_id: str, timeout: float, elapsed: float):
        self.order_id = order_id
        self.timeout = timeout
        self.elapsed = elapsed
        super().__init__(
            f"Payment wait timeout for order {order_id} after {timedelta(seconds=timeout)} "
            f"(elapsed {elapsed:.1f}s)"
        )


class PaymentWaitCancelledError(AaioError):
    """The caller cancelled the wait before the order settled."""

    kind = ErrorKind.CANCELLED

    def __init__(self, order_id: str, elapsed: float):
        self.order_id = order_id
        self.elapsed = elapsed
        super().__init__(f"Payment wait for order {order_id} was cancelled after {elapsed:.1f}s")
