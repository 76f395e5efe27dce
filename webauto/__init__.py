# webauto/__init__.py
"""
webauto - behaviour-driven web test helpers on Playwright.

This package provides:
- wait_for: Retry/poll primitive for probes
- WebContext: Selector lookups, assertions, clicks and polling steps for a page
- Runner: YAML scenario execution with screenshots of failed steps
- Repository: Site YAML loading (settings and selector aliases)
- Exceptions: Common exception types
"""

from .exceptions import (
    WebAutoError,
    ConfigError,
    StepDefinitionError,
    RecoverableProbeError,
    RetryExhausted,
    RetryCancelled,
    ExpectationError,
    ElementNotFoundError,
)
from .waits import wait, wait_for
from .config import TimeConfig, WaitSettings
from .repository import Repository, SiteConfig
from .web import WebContext, expectation_probe
from .session import BrowserSession
from .runner import Runner

__all__ = [
    "WebAutoError",
    "ConfigError",
    "StepDefinitionError",
    "RecoverableProbeError",
    "RetryExhausted",
    "RetryCancelled",
    "ExpectationError",
    "ElementNotFoundError",
    "wait",
    "wait_for",
    "TimeConfig",
    "WaitSettings",
    "Repository",
    "SiteConfig",
    "WebContext",
    "expectation_probe",
    "BrowserSession",
    "Runner",
]

__version__ = "1.0.0"
