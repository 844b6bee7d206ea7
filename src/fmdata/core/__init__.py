"""fmdata core -- errors, result envelope, logging, and settings.

Architecture::

    errors.py      Structured error hierarchy (FMDataError, ServerError)
    result.py      Result[T] envelope (Ok / Err) between transport and shaper
    logging.py     structlog configuration and context binding
    settings.py    FileMakerSettings (pydantic-settings, FILEMAKER_* env)
"""

from fmdata.core.errors import (
    AuthenticationError,
    AuthError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    FMDataError,
    MissingConfigError,
    NetworkError,
    ParseError,
    ScriptSpecError,
    ServerError,
    TransientError,
    TransportTimeoutError,
    ValidationError,
)
from fmdata.core.result import Err, Ok, Result

__all__ = [
    "AuthenticationError",
    "AuthError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "FMDataError",
    "MissingConfigError",
    "NetworkError",
    "ParseError",
    "ScriptSpecError",
    "ServerError",
    "TransientError",
    "TransportTimeoutError",
    "ValidationError",
    "Err",
    "Ok",
    "Result",
]
