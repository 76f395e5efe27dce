# webauto/repository.py
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigError


BROWSERS = {"chromium", "firefox", "webkit"}


@dataclass(frozen=True)
class SiteConfig:
    base_url: Optional[str] = None
    browser: str = "chromium"
    headless: bool = True
    viewport_width: Optional[int] = None
    viewport_height: Optional[int] = None
    default_timeout_ms: float = 10000.0
    max_attempts: int = 10
    wait_interval: float = 1.0
    screenshot_dir: str = "."
    screenshot_on_failure: bool = True

    @property
    def viewport(self) -> Optional[Dict[str, int]]:
        if self.viewport_width is None or self.viewport_height is None:
            return None
        return {"width": self.viewport_width, "height": self.viewport_height}


class Repository:
    """
    Loads site.yaml. Provides access to the site config and named selector aliases.
    """

    def __init__(self, path: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        self.path = os.path.abspath(path) if path else None
        if data is None:
            data = self._load_yaml(self.path) if self.path else {}
        self._raw: Dict[str, Any] = data
        self._app = self._parse_site_config(self._raw.get("app", {}) or {})
        self._selectors = self._raw.get("selectors", {}) or {}

        self._validate()

    @staticmethod
    def _load_yaml(path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            raise ConfigError(f"Site YAML not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if not isinstance(data, dict):
                raise ConfigError("Site YAML must be a mapping at root.")
            return data
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e

    @staticmethod
    def _parse_site_config(d: Dict[str, Any]) -> SiteConfig:
        if not isinstance(d, dict):
            raise ConfigError("'app' must be a mapping")
        viewport = d.get("viewport") or {}
        if not isinstance(viewport, dict):
            raise ConfigError("app.viewport must be a mapping with width and height")
        try:
            return SiteConfig(
                base_url=d.get("base_url"),
                browser=str(d.get("browser", "chromium")).lower(),
                headless=bool(d.get("headless", True)),
                viewport_width=int(viewport["width"]) if "width" in viewport else None,
                viewport_height=int(viewport["height"]) if "height" in viewport else None,
                default_timeout_ms=float(d.get("default_timeout_ms", 10000.0)),
                max_attempts=int(d.get("max_attempts", 10)),
                wait_interval=float(d.get("wait_interval", 1.0)),
                screenshot_dir=str(d.get("screenshot_dir", ".")),
                screenshot_on_failure=bool(d.get("screenshot_on_failure", True)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid app settings: {e}") from e

    def _validate(self) -> None:
        if self._app.browser not in BROWSERS:
            raise ConfigError(f"app.browser must be one of {sorted(BROWSERS)}, got '{self._app.browser}'")
        if (self._app.viewport_width is None) != (self._app.viewport_height is None):
            raise ConfigError("app.viewport needs both width and height")
        if self._app.max_attempts < 1:
            raise ConfigError("app.max_attempts must be at least 1")
        if self._app.wait_interval < 0:
            raise ConfigError("app.wait_interval must be non-negative")

        if not isinstance(self._selectors, dict):
            raise ConfigError("'selectors' must be a mapping")
        for name, css in self._selectors.items():
            if not isinstance(css, str) or not css.strip():
                raise ConfigError(f"selectors.{name} must be a non-empty CSS selector string")

    @property
    def app(self) -> SiteConfig:
        return self._app

    def resolve_selector(self, name_or_css: str) -> str:
        """Return the CSS behind a selector alias, or the input when it is not an alias."""
        return self._selectors.get(name_or_css, name_or_css)

    def list_selectors(self) -> List[str]:
        return sorted(self._selectors.keys())
