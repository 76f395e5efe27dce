# webauto/web.py
"""
@file web.py
@brief Web step context: selector lookups, assertions, clicks and polling steps
       on top of a Playwright page.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, List, Optional
from urllib.parse import parse_qs, urljoin, urlsplit

from playwright.sync_api import ElementHandle, Page
from playwright.sync_api import Error as PlaywrightError

from . import artifacts
from .assertions import assert_true, map_items
from .config import TimeConfig, WaitSettings
from .exceptions import ElementNotFoundError, ExpectationError, RecoverableProbeError
from .waits import wait, wait_for

log = logging.getLogger("webauto")

_WHITESPACE = re.compile(r"\s+")


def _normalize(text: Optional[str]) -> str:
    return _WHITESPACE.sub(" ", text or "").strip().lower()


def _css(selector: str) -> str:
    return selector if selector.startswith("css=") else f"css={selector}"


def expectation_probe(check: Callable[[], Any]) -> Callable[[], bool]:
    """
    Wrap an assertion as a probe for wait_for.

    A failed expectation reads as "not yet", a driver error as a recoverable
    failure. Everything else propagates.
    """
    def probe() -> bool:
        try:
            check()
        except ExpectationError:
            return False
        except PlaywrightError as e:
            raise RecoverableProbeError(str(e)) from e
        return True

    return probe


class WebContext:
    """
    Step helpers for a Playwright page.

    Selectors are CSS. Polling helpers take their attempt budget from
    TimeConfig.current() unless max_attempts/interval are passed explicitly.
    """

    def __init__(self, page: Page, base_url: Optional[str] = None, artifacts_dir: str = "."):
        """
        @param page Playwright page to drive
        @param base_url Prefix for relative paths passed to visit()
        @param artifacts_dir Directory for screenshots
        """
        self.page = page
        self.base_url = base_url
        self.artifacts_dir = artifacts_dir

    # ----- navigation -----

    def visit(self, path: str) -> None:
        url = urljoin(self.base_url, path) if self.base_url else path
        log.info("Visiting %s", url)
        self.page.goto(url)

    @property
    def current_url(self) -> str:
        return self.page.url

    def set_viewport_size(self, width: Any, height: Any) -> None:
        """Set the size of the viewport in pixels."""
        self.page.set_viewport_size({"width": int(width), "height": int(height)})

    def wait(self, seconds: Any) -> None:
        wait(seconds)

    # ----- lookups -----

    def get_element_by_css_selector(self, selector: str) -> Optional[ElementHandle]:
        """Get the first element that matches the given css selector."""
        return self.page.query_selector(_css(selector))

    def get_elements_by_css_selector(self, selector: str) -> List[ElementHandle]:
        return self.page.query_selector_all(_css(selector))

    def is_visible(self, selector: str) -> bool:
        element = self.get_element_by_css_selector(selector)
        return False if element is None else element.is_visible()

    def map_elements(self, selector: str, function: Callable[[ElementHandle], Any]) -> List[Any]:
        """Call function on every element matching selector."""
        return map_items(self.get_elements_by_css_selector(selector), function)

    # ----- assertions -----

    def assert_element_exists(self, selector: str) -> ElementHandle:
        element = self.get_element_by_css_selector(selector)
        if element is None:
            raise ElementNotFoundError(selector)
        return element

    def assert_is_visible(self, selector: str) -> None:
        assert_true(self.is_visible(selector), f"{selector} is not visible on page")

    def assert_is_not_visible(self, selector: str) -> None:
        assert_true(not self.is_visible(selector), f"{selector} is visible on page")

    def assert_page_contains_text(self, text: str) -> None:
        page_text = self.page.inner_text("body")
        assert_true(
            _normalize(text) in _normalize(page_text),
            f"The text \"{text}\" was not found anywhere in the text of the current page.",
        )

    def assert_element_contains_text(self, selector: str, text: str) -> None:
        element = self.assert_element_exists(selector)
        assert_true(
            _normalize(text) in _normalize(element.inner_text()),
            f"The text \"{text}\" was not found in the text of the element matching css \"{selector}\".",
        )

    def assert_query_string_parameter_value(self, name: str, expected: Any) -> None:
        params = parse_qs(urlsplit(self.current_url).query, keep_blank_values=True)
        assert_true(name in params, f"Parameter {name} does not exist in querystring")
        actual = params[name][0]
        assert_true(actual == str(expected), f"{actual} does not match expected {expected}")

    # ----- actions -----

    def click(self, selector: str) -> None:
        """Click the first element matching the given css selector."""
        element = self.get_element_by_css_selector(selector)
        assert_true(element is not None, f"{selector} not found on the page")
        element.click()

    def doubleclick(self, selector: str) -> None:
        """Doubleclick the first element matching the given css selector."""
        element = self.get_element_by_css_selector(selector)
        assert_true(element is not None, f"{selector} not found on the page")
        element.dblclick()

    def click_first_visible_element(self, selector: str) -> None:
        for element in self.get_elements_by_css_selector(selector):
            if element.is_visible():
                element.click()
                return
        raise ExpectationError(f"No visible {selector} element found.")

    # ----- polling steps -----

    def _settings(self, name: str, max_attempts: Optional[int], interval: Optional[float]) -> WaitSettings:
        return TimeConfig.current().get(name).with_overrides(max_attempts=max_attempts, interval=interval)

    def _poll(
        self,
        name: str,
        probe: Callable[[], bool],
        description: str,
        max_attempts: Optional[int],
        interval: Optional[float],
    ) -> None:
        settings = self._settings(name, max_attempts, interval)
        wait_for(
            probe,
            settings.max_attempts,
            settings.interval,
            description=description,
        )

    def wait_for(
        self,
        probe: Callable[[], Any],
        description: str = "step",
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> None:
        """Poll a custom probe with the generic wait_for budget."""
        self._poll("wait_for", probe, description, max_attempts, interval)

    def wait_for_selector_existence(
        self,
        selector: str,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> None:
        """
        Wait until an element matching selector is in the DOM.

        The element does not have to be visible.
        """
        self._poll(
            "selector_exists",
            expectation_probe(lambda: self.assert_element_exists(selector)),
            f"selector '{selector}' to exist",
            max_attempts,
            interval,
        )

    def wait_for_selector_visibility(
        self,
        selector: str,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> None:
        self._poll(
            "selector_visible",
            expectation_probe(lambda: self.assert_is_visible(selector)),
            f"selector '{selector}' to be visible",
            max_attempts,
            interval,
        )

    def wait_for_at_least_one_visible_element(
        self,
        selector: str,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> None:
        """
        Wait until any element matching selector is visible.

        Use when there are several matches and only some of them may be shown.
        """
        def check() -> None:
            elements = self.get_elements_by_css_selector(selector)
            assert_true(
                any(element.is_visible() for element in elements),
                f"No visible {selector} element found.",
            )

        self._poll(
            "any_visible",
            expectation_probe(check),
            f"at least one '{selector}' to be visible",
            max_attempts,
            interval,
        )

    def wait_for_element_text(
        self,
        selector: str,
        text: str,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> None:
        self._poll(
            "element_text",
            expectation_probe(lambda: self.assert_element_contains_text(selector, text)),
            f"'{selector}' to contain '{text}'",
            max_attempts,
            interval,
        )

    def wait_for_visible_text(
        self,
        text: str,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> None:
        self._poll(
            "visible_text",
            expectation_probe(lambda: self.assert_page_contains_text(text)),
            f"page to contain '{text}'",
            max_attempts,
            interval,
        )

    # ----- screenshots -----

    def take_screenshot(self, name: str = "page") -> Optional[str]:
        return artifacts.capture_page_screenshot(self.page, self.artifacts_dir, name)

    def screenshot_after_failed_step(self, step_line: int, step_text: str, passed: bool) -> Optional[str]:
        return artifacts.screenshot_after_failed_step(
            self.page, step_line, step_text, passed, out_dir=self.artifacts_dir
        )
