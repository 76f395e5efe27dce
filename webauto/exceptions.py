# webauto/exceptions.py
"""
@file exceptions.py
@brief Custom exception classes for the web step helpers.
"""

from __future__ import annotations

import traceback
from typing import Optional


class WebAutoError(Exception):
    """Base exception for the framework."""
    pass


class ConfigError(WebAutoError):
    """Raised when the site YAML or a scenario file is invalid."""
    pass


class StepDefinitionError(WebAutoError):
    """Raised when a step sentence matches no known step definition."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"No step definition matches: '{text}'")


class RecoverableProbeError(WebAutoError):
    """
    Raised by a probe when its check failed transiently.

    The poller turns it into another attempt; it never reaches the caller
    of wait_for.
    """
    pass


class RetryExhausted(WebAutoError):
    """
    Raised when a probe did not succeed within its attempt budget.

    Attributes:
        attempts: Number of probe invocations made
        description: Human-readable description of what was being waited for
        interval: Pause between attempts in seconds
        elapsed_time: Actual elapsed time in seconds
        original_exception: The last recoverable error raised by the probe, if any
    """

    def __init__(
        self,
        attempts: int,
        description: str = "step",
        interval: Optional[float] = None,
        elapsed_time: Optional[float] = None,
        original_exception: Optional[BaseException] = None,
    ):
        super().__init__(f"Step did not succeed after {attempts} attempts.")
        self.attempts = attempts
        self.description = description
        self.interval = interval
        self.elapsed_time = elapsed_time
        self.original_exception = original_exception

    def __str__(self) -> str:
        base_msg = super().__str__()

        details = []
        if self.description and self.description != "step":
            details.append(f"Waiting for: {self.description}")
        if self.original_exception is not None:
            details.append(
                f"Last error: {type(self.original_exception).__name__}: {self.original_exception}"
            )
        if self.elapsed_time is not None:
            details.append(f"Elapsed: {self.elapsed_time:.2f}s")

        if details:
            return f"{base_msg} [{', '.join(details)}]"
        return base_msg

    def get_root_cause(self) -> Optional[BaseException]:
        """
        Get the root cause exception by traversing the chain.

        @return The deepest original_exception or __cause__ in the chain, or None
        """
        current = self.original_exception
        while current is not None:
            nested = getattr(current, "original_exception", None) or current.__cause__
            if nested is None:
                return current
            current = nested
        return None

    def get_traceback_str(self) -> str:
        """
        Get a formatted traceback string from the original exception.

        @return Formatted traceback string or empty string if no original exception
        """
        if self.original_exception is None:
            return ""

        return "".join(traceback.format_exception(
            type(self.original_exception),
            self.original_exception,
            self.original_exception.__traceback__
        ))


class RetryCancelled(WebAutoError):
    """Raised when a retry sequence is cancelled through its cancel event."""

    def __init__(self, attempts: int, description: str = "step"):
        self.attempts = attempts
        self.description = description
        super().__init__(f"Waiting for {description} cancelled after {attempts} attempts.")


class ExpectationError(WebAutoError, AssertionError):
    """Raised when an assertion about the page or a value fails."""
    pass


class ElementNotFoundError(ExpectationError):
    """Raised when no element matches a CSS selector."""

    def __init__(self, selector: str, message: Optional[str] = None):
        self.selector = selector
        super().__init__(message or f"Element matching css \"{selector}\" not found.")
