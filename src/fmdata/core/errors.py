"""
Structured error types for the fmdata client.

Provides a small hierarchy of typed errors with metadata for retry
decisions, error categorization, and root cause analysis through error
chaining.

The hierarchy separates the three failure kinds a record call can meet:
- **Server failures:** The Data API answered with a non-zero message code.
  These carry the server's ``code`` and ``message`` untouched.
- **Transport failures:** The request never produced a Data API envelope
  (connection refused, timeout, body that is not JSON).
- **Local failures:** Options the client cannot turn into a wire request
  (unknown script phase, missing configuration).

Script errors reported inside a successful reply are *not* errors here.
They are data on the result object.

Manifesto:
    - **Typed Error Hierarchy:** Different error types for different failure kinds
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry layout, record id and URL for logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       FMDataError                                │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  TransientError    ServerError       ValidationError            │
        │  (retryable=True)  (SERVER)          (VALIDATION)               │
        │       │            code, message           │                     │
        │  NetworkError                        ScriptSpecError            │
        │  TransportTimeoutError                                          │
        │                                                                  │
        │  ConfigError       AuthError         ParseError                 │
        │  (CONFIG)          (AUTH)            (PARSE)                    │
        │       │                │                                         │
        │  MissingConfig     Authentication                               │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    A server failure keeps the Data API message verbatim:

    >>> error = ServerError("102", "Field is missing")
    >>> error.to_failure()
    {'code': '102', 'message': 'Field is missing'}
    >>> error.retryable
    False

    Adding context to an error:

    >>> error = NetworkError("Connection refused")
    >>> error.with_context(layout="Heroes", url="https://fms.example.com")
    NetworkError('Connection refused', category=NETWORK)
    >>> error.context.layout
    'Heroes'

Guardrails:
    ❌ DON'T: Reword or re-code a ServerError on its way to the caller
    ✅ DO: Pass the server's code and message through as received

    ❌ DON'T: Raise for a non-zero scriptError in a successful reply
    ✅ DO: Surface it on the result object

Tags:
    error-handling, exception-hierarchy, retry-logic, error-context,
    fmdata, data-api

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Categories are grouped by their typical retry behavior:
    - **Infrastructure (usually transient):** NETWORK
    - **Remote service:** SERVER, PARSE
    - **Caller input (never retryable):** VALIDATION, CONFIG, AUTH
    - **Internal errors:** INTERNAL, UNKNOWN
    """

    NETWORK = "NETWORK"           # Connection, timeout, DNS
    SERVER = "SERVER"             # Data API returned a non-zero message code
    PARSE = "PARSE"               # Reply body was not a Data API envelope
    VALIDATION = "VALIDATION"     # Options that cannot be encoded
    CONFIG = "CONFIG"             # Missing config, invalid settings
    AUTH = "AUTH"                 # Session could not be opened
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields for the request an error belongs to; anything else goes
    into ``metadata``. ``to_dict()`` serializes the non-None fields for
    logging.

    Examples:
        >>> ctx = ErrorContext(operation="edit", layout="Heroes", record_id="7")
        >>> ctx.to_dict()
        {'operation': 'edit', 'layout': 'Heroes', 'record_id': '7'}

    Attributes:
        operation: Record operation (``create``, ``edit``, ``delete``)
        layout: Target layout name
        record_id: Record identifier for edit/delete
        url: URL that was being accessed
        http_status: HTTP status code if applicable
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    layout: str | None = None
    record_id: str | None = None

    url: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "layout", "record_id", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class FMDataError(Exception):
    """
    Base exception for all fmdata errors.

    Every instance carries:
    - **category:** ErrorCategory enum for classification
    - **retryable:** Boolean indicating if the call can be retried
    - **context:** ErrorContext with structured metadata
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` and ``default_retryable``.

    Examples:
        >>> error = FMDataError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> FMDataError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NetworkError("Failed").with_context(
                layout="Heroes",
                url="https://fms.example.com/fmi/data/v1"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS (Usually Retryable)
# =============================================================================


class TransientError(FMDataError):
    """Temporary transport condition that may succeed on retry."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class NetworkError(TransientError):
    """Connection-level failure talking to the Data API."""

    default_category = ErrorCategory.NETWORK


class TransportTimeoutError(TransientError):
    """The Data API did not answer within the configured timeout."""

    default_category = ErrorCategory.NETWORK


# =============================================================================
# SERVER ERRORS
# =============================================================================


class ServerError(FMDataError):
    """
    Failure reported by the Data API in its ``messages`` envelope.

    ``code`` and ``message`` are kept exactly as the server sent them;
    ``to_failure()`` is the ``{code, message}`` object callers match on.
    """

    default_category = ErrorCategory.SERVER
    default_retryable = False

    def __init__(self, code: str, message: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.code = code

    def to_failure(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["code"] = self.code
        return result

    def __repr__(self) -> str:
        return f"ServerError(code={self.code!r}, message={self.message!r})"


class ParseError(FMDataError):
    """Reply body could not be read as a Data API envelope."""

    default_category = ErrorCategory.PARSE
    default_retryable = False


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(FMDataError):
    """
    Request options the client cannot encode.

    Field data is never validated locally; this covers request options only.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class ScriptSpecError(ValidationError):
    """A script declaration has an unknown phase or no resolvable name."""
    pass


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(FMDataError):
    """Configuration error. Never retryable."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


# =============================================================================
# AUTHENTICATION ERRORS
# =============================================================================


class AuthError(FMDataError):
    """Authentication or authorization error."""

    default_category = ErrorCategory.AUTH
    default_retryable = False


class AuthenticationError(AuthError):
    """The Data API refused to open a session."""
    pass


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "FMDataError",
    "TransientError",
    "NetworkError",
    "TransportTimeoutError",
    "ServerError",
    "ParseError",
    "ValidationError",
    "ScriptSpecError",
    "ConfigError",
    "MissingConfigError",
    "AuthError",
    "AuthenticationError",
]
