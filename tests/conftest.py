# tests/conftest.py
"""
Shared fixtures: in-memory stand-ins for a Playwright page and its elements.
"""

from typing import Callable, Dict, List, Optional

import pytest

from webauto.config import TimeConfig
from webauto.timings import WAIT_FIELDS


class FakeElement:
    """Mimics the parts of playwright's ElementHandle the helpers use."""

    def __init__(self, visible: bool = True, text: str = ""):
        self.visible = visible
        self.text = text
        self.clicks = 0
        self.double_clicks = 0

    def is_visible(self) -> bool:
        return self.visible

    def click(self) -> None:
        self.clicks += 1

    def dblclick(self) -> None:
        self.double_clicks += 1

    def inner_text(self) -> str:
        return self.text


class FakePage:
    """Mimics the parts of playwright's sync Page the helpers use."""

    def __init__(self, url: str = "about:blank"):
        self.url = url
        self.body_text = ""
        self.elements: Dict[str, List[FakeElement]] = {}
        self.viewport: Optional[Dict[str, int]] = None
        self.visited: List[str] = []
        self.queries: List[str] = []
        self.before_query: Optional[Callable[["FakePage"], None]] = None
        self.screenshot_data = b"\x89PNG fake image"
        self.screenshot_error: Optional[BaseException] = None

    def _lookup(self, selector: str) -> List[FakeElement]:
        assert selector.startswith("css="), selector
        self.queries.append(selector)
        if self.before_query is not None:
            self.before_query(self)
        return list(self.elements.get(selector[len("css="):], []))

    def query_selector(self, selector: str) -> Optional[FakeElement]:
        matches = self._lookup(selector)
        return matches[0] if matches else None

    def query_selector_all(self, selector: str) -> List[FakeElement]:
        return self._lookup(selector)

    def set_viewport_size(self, viewport_size: Dict[str, int]) -> None:
        self.viewport = viewport_size

    def goto(self, url: str) -> None:
        self.visited.append(url)
        self.url = url

    def inner_text(self, selector: str) -> str:
        assert selector == "body"
        return self.body_text

    def screenshot(self) -> bytes:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        return self.screenshot_data


@pytest.fixture
def page():
    return FakePage()


@pytest.fixture
def no_pause():
    """Install a run config with zero intervals so polling steps never sleep."""
    TimeConfig.install_run_config(
        TimeConfig.build_from(overrides={name: {"interval": 0} for name in WAIT_FIELDS})
    )
    yield
    TimeConfig.clear_run_config()


@pytest.fixture(autouse=True)
def reset_time_config():
    yield
    TimeConfig.reset_to_defaults()
