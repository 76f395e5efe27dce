# webauto/session.py
from __future__ import annotations
import logging
from typing import Dict, Optional

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from .repository import SiteConfig


class BrowserSession:
    """
    Owns the Playwright driver, browser, context and page for one run.
    """

    def __init__(
        self,
        browser: str = "chromium",
        headless: bool = True,
        viewport: Optional[Dict[str, int]] = None,
        base_url: Optional[str] = None,
        default_timeout_ms: float = 10000.0,
        logger: Optional[logging.Logger] = None,
    ):
        self.browser_name = browser
        self.headless = headless
        self.viewport = viewport
        self.base_url = base_url
        self.default_timeout_ms = float(default_timeout_ms)
        self.log = logger or logging.getLogger("webauto")
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @classmethod
    def from_site_config(cls, site: SiteConfig) -> BrowserSession:
        return cls(
            browser=site.browser,
            headless=site.headless,
            viewport=site.viewport,
            base_url=site.base_url,
            default_timeout_ms=site.default_timeout_ms,
        )

    def start(self) -> Page:
        if self._page is not None:
            return self._page

        self.log.info("Starting %s (headless=%s)", self.browser_name, self.headless)
        try:
            self._launch()
        except Exception:
            self.close()
            raise
        return self._page

    def _launch(self) -> None:
        self._playwright = sync_playwright().start()
        browser_type = getattr(self._playwright, self.browser_name)
        self._browser = browser_type.launch(headless=self.headless)

        context_options = {}
        if self.viewport:
            context_options["viewport"] = self.viewport
        if self.base_url:
            context_options["base_url"] = self.base_url
        self._context = self._browser.new_context(**context_options)
        self._context.set_default_timeout(self.default_timeout_ms)

        self._page = self._context.new_page()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Session not started.")
        return self._page

    def close(self) -> None:
        """
        Close page, context, browser and driver. Safe to call more than once.

        Later steps still run when an earlier one raises; the error then propagates.
        """
        context, browser, driver = self._context, self._browser, self._playwright
        started = self._page is not None
        self._context = self._browser = self._playwright = None
        self._page = None

        try:
            if context is not None:
                context.close()
        finally:
            try:
                if browser is not None:
                    browser.close()
            finally:
                if driver is not None:
                    driver.stop()
        if started:
            self.log.info("Closed %s session", self.browser_name)

    def __enter__(self) -> BrowserSession:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
