# tests/test_runner.py
"""
Tests for the YAML scenario runner using an in-memory page.
"""

import json
import os

import pytest

from conftest import FakeElement, FakePage
from webauto.config import TimeConfig
from webauto.exceptions import ConfigError
from webauto.repository import Repository
from webauto.runner import Runner, _substitute


class FakeSession:
    """Session stand-in returning a prepared page."""

    def __init__(self, page):
        self.page = page
        self.started = False
        self.closed = False

    def start(self):
        self.started = True
        return self.page

    def close(self):
        self.closed = True


@pytest.fixture
def shop_page():
    page = FakePage()
    page.elements["#header .cart .count"] = [FakeElement(text="1")]
    page.elements["button.add-to-cart"] = [FakeElement(visible=False), FakeElement(visible=True)]
    page.body_text = "Welcome to the shop"
    return page


@pytest.fixture
def repo(tmp_path):
    return Repository(data={
        "app": {
            "base_url": "https://shop.example.com/",
            "max_attempts": 2,
            "wait_interval": 0,
            "screenshot_dir": str(tmp_path / "shots"),
        },
        "selectors": {
            "cart_badge": "#header .cart .count",
            "add_to_cart": "button.add-to-cart",
        },
    })


@pytest.fixture
def sessions():
    return []


@pytest.fixture
def runner(repo, shop_page, sessions):
    def factory(site):
        session = FakeSession(shop_page)
        sessions.append(session)
        return session

    return Runner(repo, session_factory=factory)


def write_scenario(tmp_path, text, name="scenario.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestSubstitute:

    def test_nested_values(self):
        value = {"url": "/p/${sku}", "list": ["${sku}", "${missing}"], "n": 3}
        assert _substitute(value, {"sku": "A1"}) == {"url": "/p/A1", "list": ["A1", "${missing}"], "n": 3}


class TestValidate:

    def test_rejects_missing_steps(self, runner):
        with pytest.raises(ConfigError, match="schema validation failed"):
            runner.validate({"name": "x"})

    def test_rejects_multi_key_step(self, runner):
        with pytest.raises(ConfigError):
            runner.validate({"steps": [{"click": {"selector": "a"}, "visit": {"url": "/"}}]})

    def test_rejects_unknown_sentence(self, runner):
        with pytest.raises(ConfigError, match="No step definition matches: 'I fly to the moon'"):
            runner.validate({"steps": ["I fly to the moon"]})

    def test_rejects_unknown_keyword(self, runner):
        with pytest.raises(ConfigError, match="step 1: Unknown keyword: teleport"):
            runner.validate({"steps": [{"teleport": {"to": "mars"}}]})

    def test_rejects_missing_keyword_args(self, runner):
        with pytest.raises(ConfigError, match="step 1: click is missing selector"):
            runner.validate({"steps": [{"click": {}}]})

    def test_reports_every_bad_step(self, runner):
        with pytest.raises(ConfigError) as exc_info:
            runner.validate({"steps": [
                {"teleport": {"to": "mars"}},
                'I am on "/"',
                {"element_text": {"selector": ".total"}},
                "I fly to the moon",
            ]})
        message = str(exc_info.value)
        assert "step 1: Unknown keyword: teleport" in message
        assert "step 2" not in message
        assert "step 3: element_text is missing text" in message
        assert "step 4: No step definition matches" in message

    def test_accepts_mixed_steps(self, runner):
        runner.validate({"steps": ['I am on "/"', {"click": {"selector": "#buy"}}, {"screenshot": None}]})

    def test_invalid_yaml_file(self, runner, tmp_path):
        path = write_scenario(tmp_path, "steps: [unclosed")
        with pytest.raises(ConfigError, match="Invalid scenario YAML"):
            runner.validate_file(path)


class TestRun:

    def test_passing_scenario(self, runner, shop_page, sessions, tmp_path):
        path = write_scenario(tmp_path, """
name: add to cart
vars:
  product: red-shoes
steps:
  - 'Given I am on "/products/${product}"'
  - 'the viewport has width "1024" and height "768"'
  - 'selector "cart_badge" exists'
  - 'at least one selector matching "add_to_cart" is visible'
  - 'I click the first visible element matching "add_to_cart"'
  - visible_text: {text: welcome}
  - element_text: {selector: cart_badge, text: "1"}
""")
        report = runner.run(path)

        assert report["status"] == "passed", report
        assert report["name"] == "add to cart"
        assert [s["status"] for s in report["steps"]] == ["passed"] * 7
        assert shop_page.visited == ["https://shop.example.com/products/red-shoes"]
        assert shop_page.viewport == {"width": 1024, "height": 768}
        assert shop_page.elements["button.add-to-cart"][1].clicks == 1
        assert sessions[0].started and sessions[0].closed

    def test_caller_vars_override_scenario_vars(self, runner, shop_page, tmp_path):
        path = write_scenario(tmp_path, """
vars: {path: /a}
steps:
  - visit: {url: "${path}"}
""")
        runner.run(path, variables={"path": "/b"})
        assert shop_page.visited == ["https://shop.example.com/b"]

    def test_failed_step_stops_and_screenshots(self, runner, repo, shop_page, sessions, tmp_path):
        path = write_scenario(tmp_path, """
steps:
  - 'I click on "#checkout"'
  - 'I click on "add_to_cart"'
""")
        report = runner.run(path)

        assert report["status"] == "failed"
        assert len(report["steps"]) == 1
        step = report["steps"][0]
        assert step["status"] == "failed"
        assert "#checkout not found on the page" in step["error"]
        assert os.path.basename(step["screenshot"]).startswith("step-1-")
        assert os.path.exists(step["screenshot"])
        assert report["errors"] == [step["error"]]
        assert sessions[0].closed

    def test_polling_uses_site_attempt_budget(self, runner, tmp_path):
        path = write_scenario(tmp_path, """
steps:
  - selector_exists: {selector: "#never"}
""")
        report = runner.run(path)
        assert report["status"] == "failed"
        assert "Step did not succeed after 2 attempts." in report["steps"][0]["error"]

    def test_step_budget_override(self, runner, tmp_path):
        path = write_scenario(tmp_path, """
steps:
  - selector_visible: {selector: "#never", max_attempts: 1}
""")
        report = runner.run(path)
        assert "after 1 attempts" in report["steps"][0]["error"]

    def test_timing_overrides(self, runner, tmp_path):
        path = write_scenario(tmp_path, """
steps:
  - any_visible: {selector: "#never"}
""")
        report = runner.run(
            path,
            timing_preset="fast",
            timing_overrides={"any_visible": {"max_attempts": 3, "interval": 0}},
        )
        assert "after 3 attempts" in report["steps"][0]["error"]

    def test_timing_overrides_win_over_site_defaults(self, runner, tmp_path):
        path = write_scenario(tmp_path, """
steps:
  - selector_exists: {selector: "#never"}
""")
        report = runner.run(path, timing_overrides={"selector_exists": {"max_attempts": 3, "interval": 0}})
        assert "Step did not succeed after 3 attempts." in report["steps"][0]["error"]

    def test_unknown_keyword_fails_before_browser_starts(self, runner, sessions, tmp_path):
        path = write_scenario(tmp_path, """
steps:
  - teleport: {to: mars}
""")
        report = runner.run(path)
        assert report["status"] == "failed"
        assert report["steps"] == []
        assert "Unknown keyword: teleport" in report["errors"][0]
        assert sessions == []

    def test_invalid_scenario_reports_failure(self, runner, sessions, tmp_path):
        path = write_scenario(tmp_path, "name: nothing to do\n")
        report = runner.run(path)
        assert report["status"] == "failed"
        assert report["steps"] == []
        assert sessions == []

    def test_writes_report(self, runner, tmp_path):
        path = write_scenario(tmp_path, """
steps:
  - 'I should see "welcome"'
""")
        report_path = tmp_path / "out" / "report.json"
        runner.run(path, report_path=str(report_path))

        with open(report_path, encoding="utf-8") as f:
            data = json.load(f)
        assert data["status"] == "passed"
        assert data["steps"][0]["keyword"] == "visible_text"

    def test_run_config_cleared_after_run(self, runner, tmp_path):
        path = write_scenario(tmp_path, """
steps:
  - wait: {seconds: 0}
""")
        runner.run(path)
        assert TimeConfig.current() is TimeConfig.default()

    def test_no_screenshot_when_disabled(self, shop_page, tmp_path):
        repo = Repository(data={"app": {
            "wait_interval": 0,
            "screenshot_on_failure": False,
            "screenshot_dir": str(tmp_path / "shots"),
        }})
        runner = Runner(repo, session_factory=lambda site: FakeSession(shop_page))
        path = write_scenario(tmp_path, """
steps:
  - click: {selector: "#missing"}
""")
        report = runner.run(path)
        assert "screenshot" not in report["steps"][0]
        assert os.listdir(tmp_path / "shots") == []
