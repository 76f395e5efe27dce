# tests/test_repository.py
"""
Tests for site YAML loading.
"""

import pytest

from webauto.exceptions import ConfigError
from webauto.repository import Repository

SITE_YAML = """
app:
  base_url: https://shop.example.com/
  browser: firefox
  headless: false
  viewport:
    width: 1280
    height: 720
  max_attempts: 5
  wait_interval: 0.5
  screenshot_dir: shots
selectors:
  cart_badge: "#header .cart .count"
  add_to_cart: "button.add-to-cart"
"""


@pytest.fixture
def site_file(tmp_path):
    path = tmp_path / "site.yaml"
    path.write_text(SITE_YAML, encoding="utf-8")
    return path


class TestRepository:

    def test_loads_site_config(self, site_file):
        repo = Repository(str(site_file))
        app = repo.app
        assert app.base_url == "https://shop.example.com/"
        assert app.browser == "firefox"
        assert app.headless is False
        assert app.viewport == {"width": 1280, "height": 720}
        assert app.max_attempts == 5
        assert app.wait_interval == 0.5
        assert app.screenshot_dir == "shots"
        assert app.screenshot_on_failure is True

    def test_defaults_without_file(self):
        repo = Repository()
        assert repo.app.browser == "chromium"
        assert repo.app.viewport is None
        assert repo.list_selectors() == []

    def test_resolve_selector_alias(self, site_file):
        repo = Repository(str(site_file))
        assert repo.resolve_selector("cart_badge") == "#header .cart .count"
        assert repo.resolve_selector("#plain .css") == "#plain .css"
        assert repo.list_selectors() == ["add_to_cart", "cart_badge"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            Repository(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("app: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            Repository(str(path))

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping at root"):
            Repository(str(path))

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"app": {"browser": "ie6"}}, "app.browser"),
            ({"app": {"viewport": {"width": 100}}}, "both width and height"),
            ({"app": {"max_attempts": 0}}, "max_attempts"),
            ({"app": {"wait_interval": -1}}, "wait_interval"),
            ({"app": {"max_attempts": "many"}}, "Invalid app settings"),
            ({"selectors": ["#a"]}, "'selectors' must be a mapping"),
            ({"selectors": {"empty": ""}}, "selectors.empty"),
        ],
    )
    def test_validation_errors(self, data, message):
        with pytest.raises(ConfigError, match=message):
            Repository(data=data)
