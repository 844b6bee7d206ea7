"""
Result envelope for the hand-off between transport and response shaping.

A Data API reply is either a record payload or a ``{code, message}``
failure. The transport returns that distinction as ``Ok(reply)`` or
``Err(ServerError)`` instead of raising, so the response shaper can map the
success path and leave the failure path untouched. The facade is the one
place that turns an ``Err`` back into an exception via ``unwrap()``.

Manifesto:
    - **Explicit over Implicit:** A server failure is a value until the facade
      decides to raise it
    - **Pass-through failures:** map on Err is a no-op, so no shaping step
      can enrich or swallow a failure

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T]                                │
        ├──────────────────────────────┬──────────────────────────────┤
        │     Ok[T]                    │     Err[T]                   │
        │   (Success)                  │   (Failure)                  │
        ├──────────────────────────────┼──────────────────────────────┤
        │ • value: T                   │ • error: Exception           │
        │ • map()                      │ • map() returns self's error │
        │ • unwrap()                   │ • unwrap() raises error      │
        └──────────────────────────────┴──────────────────────────────┘

Examples:
    >>> from fmdata.core.result import Ok, Err
    >>> Ok({"modId": "1"}).map(lambda reply: sorted(reply)).unwrap()
    ['modId']
    >>> Err(ValueError("boom")).map(lambda reply: reply).is_err()
    True

Guardrails:
    ❌ DON'T: Use unwrap() without deciding that an Err should raise
    ✅ DO: Use map() to shape success values and leave Err alone

Tags:
    result-pattern, error-handling, fmdata

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value.

    Examples:
        >>> Ok(10).map(lambda x: x * 2).unwrap()
        20
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed result containing an error.

    Examples:
        >>> Err(ValueError("bad")).map(lambda x: x * 2).is_err()
        True
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error."""
        raise self.error

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


__all__ = [
    "Result",
    "Ok",
    "Err",
]
