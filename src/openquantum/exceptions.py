"""
Exception hierarchy for Open Quantum.

All exceptions inherit from OpenQuantumError for easy catching.  Each one
also derives from the closest built-in exception so that callers who only
know the standard library (``except ValueError``) still catch them.
"""

from __future__ import annotations

from typing import Any


class OpenQuantumError(Exception):
    """Base exception for all Open Quantum errors."""

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


# Configuration Errors
class ConfigurationError(OpenQuantumError):
    """Error in configuration."""

    pass


# Argument Errors
class InvalidArgumentError(OpenQuantumError, TypeError):
    """Argument has the wrong type or shape."""

    def __init__(
        self,
        message: str,
        *,
        argument: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.argument = argument


class OutOfRangeError(OpenQuantumError, ValueError):
    """Numeric argument outside its allowed bounds."""

    def __init__(
        self,
        message: str,
        *,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.value = value


class EmptyInputError(OpenQuantumError, ValueError):
    """A required non-empty collection was empty."""

    pass


class LengthMismatchError(OpenQuantumError, ValueError):
    """Two parallel sequences have different lengths."""

    def __init__(
        self,
        message: str,
        *,
        expected: int | None = None,
        received: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.expected = expected
        self.received = received


# State Errors
class DegenerateStateError(OpenQuantumError, ArithmeticError):
    """Operation would leave a superposition with zero probability mass."""

    pass


class EmptyResultError(DegenerateStateError):
    """A branch/loop combinator produced no outcomes at all."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.operation = operation


class NotAMemberError(OpenQuantumError, KeyError):
    """Referenced outcome is not present in a superposition's basis."""

    def __init__(
        self,
        message: str,
        *,
        outcome: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.outcome = outcome
