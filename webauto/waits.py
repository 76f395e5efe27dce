# webauto/waits.py
"""
@file waits.py
@brief Retry/poll utilities for web step definitions.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional, Tuple, Type

from .exceptions import RecoverableProbeError, RetryCancelled, RetryExhausted
from .timinglogger import TIMING_LOGGER

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_INTERVAL = 1


def _now() -> float:
    """Monotonic time source for elapsed time reporting."""
    return time.monotonic()


def _pause(seconds: float, cancel_event: Optional[threading.Event]) -> bool:
    """Block for the given number of seconds. Returns True if cancelled."""
    if cancel_event is not None:
        return cancel_event.wait(seconds)
    if seconds > 0:
        time.sleep(seconds)
    return False


def wait(seconds: float) -> None:
    """
    Block for a fixed number of seconds.

    Polling with wait_for is usually the better choice, since it stops as soon
    as the awaited condition holds.
    """
    seconds = float(seconds)
    if seconds < 0:
        raise ValueError(f"Cannot wait a negative number of seconds: {seconds}")
    if TIMING_LOGGER.is_enabled():
        TIMING_LOGGER.log(event="wait_fixed", metadata={"sleep_s": seconds})
    time.sleep(seconds)


def wait_for(
    probe: Callable[[], Any],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    *,
    description: str = "step",
    recoverable: Tuple[Type[BaseException], ...] = (RecoverableProbeError,),
    cancel_event: Optional[threading.Event] = None,
) -> None:
    """
    Invoke probe until it returns True or the attempt budget is spent.

    Only a return value of exactly True counts as success; any other value is
    a failed attempt. Errors listed in ``recoverable`` are failed attempts too,
    anything else the probe raises propagates unchanged. The poller pauses
    ``interval`` seconds between attempts and not after the last one.

    @param probe Zero-argument callable checked on every attempt
    @param max_attempts Number of probe invocations before giving up (>= 1)
    @param interval Seconds to pause between attempts (>= 0)
    @param description Human-readable name used in logs and errors
    @param recoverable Exception types treated as a failed attempt
    @param cancel_event Optional event; once set the sequence stops with RetryCancelled
    @throws RetryExhausted if no attempt succeeded
    """
    if isinstance(max_attempts, bool) or int(max_attempts) != max_attempts or max_attempts < 1:
        raise ValueError(f"max_attempts must be a positive integer, got {max_attempts!r}")
    if interval < 0:
        raise ValueError(f"interval must be non-negative, got {interval!r}")
    max_attempts = int(max_attempts)

    start_time = _now()
    last_exception: Optional[BaseException] = None

    if TIMING_LOGGER.is_enabled():
        TIMING_LOGGER.log(
            event="wait_start",
            description=description,
            metadata={"max_attempts": max_attempts, "interval_s": interval},
        )

    for attempt in range(1, max_attempts + 1):
        attempt_error: Optional[BaseException] = None
        try:
            if probe() is True:
                if TIMING_LOGGER.is_enabled():
                    TIMING_LOGGER.log(
                        event="wait_success",
                        description=description,
                        status="success",
                        metadata={
                            "attempts": attempt,
                            "elapsed_s": round(_now() - start_time, 3),
                        },
                    )
                return
        except recoverable as e:
            attempt_error = last_exception = e

        if TIMING_LOGGER.is_enabled():
            TIMING_LOGGER.log(
                event="wait_attempt_failed",
                description=description,
                metadata={
                    "attempt": attempt,
                    "error": type(attempt_error).__name__ if attempt_error else None,
                },
            )

        if attempt < max_attempts and _pause(interval, cancel_event):
            raise RetryCancelled(attempt, description=description)

    elapsed = _now() - start_time
    if TIMING_LOGGER.is_enabled():
        TIMING_LOGGER.log(
            event="wait_exhausted",
            description=description,
            status="error",
            metadata={"attempts": max_attempts, "elapsed_s": round(elapsed, 3)},
        )

    raise RetryExhausted(
        max_attempts,
        description=description,
        interval=interval,
        elapsed_time=elapsed,
        original_exception=last_exception,
    )
