from __future__ import annotations

"""
Exchange Error Handling and Logging
===================================

- Venue error codes normalized to typed exceptions
- Structured classification of failures (category, severity, retry hint)
- Async operation context that logs start, completion and failure

Nothing here retries or rewraps: the original exception always propagates.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Type

from bitforex_connector.exchange.common import (
    AuthenticationError,
    ExchangeError,
    ExchangeRejected,
    InsufficientFunds,
    InvalidOrder,
    InvalidSymbol,
    MalformedResponse,
    OrderNotFound,
    PermissionDenied,
    PreconditionError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    DATA_SHAPE = "data_shape"
    EXCHANGE_SPECIFIC = "exchange_specific"


# Bitforex `code` values seen on `success: false` envelopes
VENUE_ERROR_MAP: Dict[str, Dict[str, Any]] = {
    "1000": {"reason_code": "ORDER_NOT_FOUND", "error": OrderNotFound},
    "1003": {"reason_code": "PARAM_INVALID", "error": InvalidSymbol},
    "1013": {"reason_code": "AUTH_FAILED", "error": AuthenticationError},
    "1016": {"reason_code": "AUTH_FAILED", "error": AuthenticationError},
    "1017": {"reason_code": "IP_NOT_ALLOWED", "error": PermissionDenied},
    "1019": {"reason_code": "SYMBOL_INVALID", "error": InvalidSymbol},
    "3002": {"reason_code": "INSUFFICIENT_BALANCE", "error": InsufficientFunds},
    "4002": {"reason_code": "PRICE_UNREASONABLE", "error": InvalidOrder},
    "4003": {"reason_code": "AMOUNT_TOO_SMALL", "error": InvalidOrder},
    "4004": {"reason_code": "ORDER_NOT_FOUND", "error": OrderNotFound},
    "10204": {"reason_code": "RATE_LIMITED", "error": RateLimitError},
}

_UNKNOWN_VENUE_ERROR: Dict[str, Any] = {
    "reason_code": "EXCHANGE_UNKNOWN",
    "error": ExchangeRejected,
}


def normalize_venue_error(raw_code: Any, raw_msg: Optional[str] = None) -> Dict[str, Any]:
    """Return {reason_code, error, message} for a venue error code."""
    code = str(raw_code).strip() if raw_code is not None else ""
    out = dict(VENUE_ERROR_MAP.get(code, _UNKNOWN_VENUE_ERROR))
    out["message"] = raw_msg or ""
    return out


def unwrap_response(response: Any, operation: str) -> Any:
    """Return `data` from a Bitforex envelope, raising on `success: false`."""
    if not isinstance(response, Mapping):
        raise MalformedResponse(
            f"unexpected response type {type(response).__name__}",
            operation=operation,
        )
    if response.get("success") is False:
        code = response.get("code")
        message = str(response.get("message") or "")
        reason = normalize_venue_error(code, message)
        error_cls: Type[ExchangeRejected] = reason["error"]
        raise error_cls(
            f"bitforex {operation} rejected: {reason['reason_code']} ({code}) {message}".rstrip(),
            operation=operation,
            code=str(code) if code is not None else None,
        )
    if "data" not in response:
        raise MalformedResponse("response without data", operation=operation, argument="data")
    return response["data"]


@dataclass
class ExchangeErrorContext:
    exchange_name: str
    operation: str
    symbol: Optional[str] = None
    order_id: Optional[str] = None
    timestamp_ns: int = 0
    correlation_id: Optional[str] = None

    def __post_init__(self):
        if self.timestamp_ns == 0:
            self.timestamp_ns = time.time_ns()
        if self.correlation_id is None:
            self.correlation_id = uuid.uuid4().hex[:12]


@dataclass
class ExchangeErrorInfo:
    error: Exception
    category: ErrorCategory
    severity: ErrorSeverity
    context: ExchangeErrorContext
    retryable: bool = False
    user_message: Optional[str] = None

    @property
    def error_code(self) -> str:
        return f"{self.category.value}_{self.error.__class__.__name__}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "error_code": self.error_code,
            "error_message": str(self.error),
            "category": self.category.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "user_message": self.user_message,
            "context": {
                "exchange_name": self.context.exchange_name,
                "operation": self.context.operation,
                "symbol": self.context.symbol,
                "order_id": self.context.order_id,
                "correlation_id": self.context.correlation_id,
                "timestamp_ns": self.context.timestamp_ns,
            },
        }


class ExchangeErrorHandler:
    """Classifies exchange errors for structured logging."""

    _BY_TYPE = (
        (PreconditionError, ErrorCategory.VALIDATION, ErrorSeverity.LOW, False),
        (MalformedResponse, ErrorCategory.DATA_SHAPE, ErrorSeverity.HIGH, False),
        (AuthenticationError, ErrorCategory.AUTHENTICATION, ErrorSeverity.CRITICAL, False),
        (PermissionDenied, ErrorCategory.AUTHENTICATION, ErrorSeverity.CRITICAL, False),
        (RateLimitError, ErrorCategory.RATE_LIMIT, ErrorSeverity.MEDIUM, True),
        (InvalidOrder, ErrorCategory.VALIDATION, ErrorSeverity.LOW, False),
        (InvalidSymbol, ErrorCategory.VALIDATION, ErrorSeverity.LOW, False),
        (ExchangeError, ErrorCategory.EXCHANGE_SPECIFIC, ErrorSeverity.MEDIUM, False),
        (ConnectionError, ErrorCategory.NETWORK, ErrorSeverity.HIGH, True),
        (TimeoutError, ErrorCategory.NETWORK, ErrorSeverity.MEDIUM, True),
    )

    def classify_error(self, error: Exception, context: ExchangeErrorContext) -> ExchangeErrorInfo:
        category = ErrorCategory.NETWORK
        severity = ErrorSeverity.MEDIUM
        retryable = False
        for cls, cat, sev, retry in self._BY_TYPE:
            if isinstance(error, cls):
                category, severity, retryable = cat, sev, retry
                break

        # HTTP status from the transport (aiohttp.ClientResponseError carries `.status`)
        status = getattr(error, "status", None)
        if isinstance(status, int):
            if status == 429:
                category, severity, retryable = ErrorCategory.RATE_LIMIT, ErrorSeverity.MEDIUM, True
            elif status >= 500:
                category, severity, retryable = ErrorCategory.NETWORK, ErrorSeverity.HIGH, True
            elif status in (401, 403):
                category, severity, retryable = ErrorCategory.AUTHENTICATION, ErrorSeverity.CRITICAL, False

        return ExchangeErrorInfo(
            error=error,
            category=category,
            severity=severity,
            context=context,
            retryable=retryable,
            user_message=self._generate_user_message(category, context),
        )

    def _generate_user_message(self, category: ErrorCategory, context: ExchangeErrorContext) -> str:
        base_messages = {
            ErrorCategory.NETWORK: f"Network connectivity issue with {context.exchange_name}",
            ErrorCategory.AUTHENTICATION: f"Authentication failed with {context.exchange_name}",
            ErrorCategory.VALIDATION: f"Invalid request to {context.exchange_name}",
            ErrorCategory.RATE_LIMIT: f"Rate limit exceeded on {context.exchange_name}",
            ErrorCategory.DATA_SHAPE: f"Unexpected response shape from {context.exchange_name}",
            ErrorCategory.EXCHANGE_SPECIFIC: f"Exchange error on {context.exchange_name}",
        }
        message = base_messages[category]
        if context.symbol:
            message += f" for {context.symbol}"
        return message + f" during {context.operation}"


_HANDLER = ExchangeErrorHandler()


@asynccontextmanager
async def exchange_operation_context(
    exchange_name: str,
    operation: str,
    symbol: Optional[str] = None,
    order_id: Optional[str] = None,
) -> AsyncIterator[ExchangeErrorContext]:
    """Log an exchange operation; failures are logged with classification and re-raised as-is."""
    context = ExchangeErrorContext(
        exchange_name=exchange_name,
        operation=operation,
        symbol=symbol,
        order_id=order_id,
    )
    start_time = time.time_ns()
    logger.info(f"Starting {operation} on {exchange_name}" + (f" for {symbol}" if symbol else ""))
    try:
        yield context
    except Exception as e:
        duration_ms = (time.time_ns() - start_time) / 1_000_000
        error_info = _HANDLER.classify_error(e, context)
        logger.error(
            f"{error_info.user_message} after {duration_ms:.2f}ms: {e}",
            extra={"error_info": error_info.to_dict(), "duration_ms": duration_ms},
        )
        raise
    duration_ms = (time.time_ns() - start_time) / 1_000_000
    logger.info(f"Completed {operation} on {exchange_name} in {duration_ms:.2f}ms")


__all__ = [
    "ErrorSeverity",
    "ErrorCategory",
    "VENUE_ERROR_MAP",
    "normalize_venue_error",
    "unwrap_response",
    "ExchangeErrorContext",
    "ExchangeErrorInfo",
    "ExchangeErrorHandler",
    "exchange_operation_context",
]
