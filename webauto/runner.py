# webauto/runner.py
"""
@file runner.py
@brief Scenario runner for YAML-based web test execution.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

import yaml
from jsonschema import Draft202012Validator

from .config import TimeConfig
from .exceptions import ConfigError, StepDefinitionError
from .repository import Repository, SiteConfig
from .session import BrowserSession
from .steps import match_step
from .web import WebContext

log = logging.getLogger("webauto")

_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

DEFAULT_SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "scenario.schema.json")

# Keyword -> arguments it cannot run without.
KEYWORD_ARGS: Dict[str, Tuple[str, ...]] = {
    "visit": ("url",),
    "wait": ("seconds",),
    "set_viewport": ("width", "height"),
    "selector_exists": ("selector",),
    "selector_visible": ("selector",),
    "any_visible": ("selector",),
    "selector_not_visible": ("selector",),
    "click": ("selector",),
    "doubleclick": ("selector",),
    "click_first_visible": ("selector",),
    "visible_text": ("text",),
    "element_text": ("selector", "text"),
    "assert_query_param": ("name", "value"),
    "screenshot": (),
}


def _substitute(value: Any, variables: Dict[str, Any]) -> Any:
    """Substitute variables in step arguments."""
    if isinstance(value, str):

        def repl(m):
            key = m.group(1)
            if key not in variables:
                return m.group(0)
            return str(variables[key])

        return _VAR_PATTERN.sub(repl, value)
    if isinstance(value, list):
        return [_substitute(v, variables) for v in value]
    if isinstance(value, dict):
        return {k: _substitute(v, variables) for k, v in value.items()}
    return value


def _parse_step(step: Any, idx: int) -> Tuple[str, Dict[str, Any], str]:
    """Return (keyword, args, text) for a sentence or single-key mapping step."""
    if isinstance(step, str):
        keyword, args = match_step(step)
        return keyword, args, step

    if not isinstance(step, dict) or len(step) != 1:
        raise ValueError(f"Invalid step format at index {idx}: {step}")
    keyword, args = next(iter(step.items()))
    args = args or {}
    if not isinstance(args, dict):
        raise ValueError(f"Step args must be a mapping at index {idx}: {step}")
    return keyword, args, f"{keyword} {args}" if args else keyword


class Runner:
    """
    Loads scenario.yaml, validates, runs steps against a browser, emits report JSON.
    """

    def __init__(
        self,
        repo: Repository,
        schema_path: Optional[str] = None,
        session_factory: Callable[[SiteConfig], Any] = BrowserSession.from_site_config,
    ):
        """
        @param repo Repository with site config and selector aliases
        @param schema_path Path to JSON schema for scenario validation
        @param session_factory Builds a session (start/page/close) from the site config
        """
        self.repo = repo
        self.schema_path = os.path.abspath(schema_path or DEFAULT_SCHEMA_PATH)
        self._schema = self._load_schema(self.schema_path)
        self._validator = Draft202012Validator(self._schema)
        self._session_factory = session_factory

    @staticmethod
    def _load_yaml(path: str) -> Dict[str, Any]:
        """Load and parse YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid scenario YAML: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Scenario must be a mapping at root")
        return data

    @staticmethod
    def _load_schema(path: str) -> Dict[str, Any]:
        """Load JSON schema file."""
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def validate(self, scenario: Dict[str, Any]) -> None:
        """Validate scenario against JSON schema, step sentences and keyword arguments."""
        errors = sorted(self._validator.iter_errors(scenario), key=lambda e: str(list(e.path)))
        if errors:
            lines = ["Scenario schema validation failed:"]
            for e in errors:
                lines.append(f"- {list(e.path)}: {e.message}")
            raise ConfigError("\n".join(lines))

        problems: List[str] = []
        for idx, step in enumerate(scenario["steps"], start=1):
            try:
                keyword, args, _ = _parse_step(step, idx)
            except StepDefinitionError as e:
                problems.append(f"- step {idx}: {e}")
                continue
            if keyword not in KEYWORD_ARGS:
                problems.append(f"- step {idx}: Unknown keyword: {keyword}")
                continue
            missing = [name for name in KEYWORD_ARGS[keyword] if name not in args]
            if missing:
                problems.append(f"- step {idx}: {keyword} is missing {', '.join(missing)}")

        if problems:
            raise ConfigError("\n".join(["Scenario steps are invalid:"] + problems))

    def validate_file(self, scenario_path: str) -> Dict[str, Any]:
        scenario = self._load_yaml(os.path.abspath(scenario_path))
        self.validate(scenario)
        return scenario

    def _build_time_config(
        self,
        *,
        preset: str = "default",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> TimeConfig:
        """Build deterministic run-scope attempt budget snapshot."""
        site_defaults = {
            "max_attempts": self.repo.app.max_attempts,
            "wait_interval": self.repo.app.wait_interval,
        }
        return TimeConfig.build_from(
            preset=preset,
            overrides=overrides or {},
            site_defaults=site_defaults,
        )

    def run(
        self,
        scenario_path: str,
        variables: Optional[Dict[str, Any]] = None,
        report_path: Optional[str] = None,
        timing_preset: str = "default",
        timing_overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Run a scenario file."""
        scenario_path = os.path.abspath(scenario_path)
        start_ts = time.time()
        report: Dict[str, Any] = {
            "run_id": str(uuid4()),
            "scenario": os.path.basename(scenario_path),
            "started_at": time.strftime("%Y-%m-%d %H:%M:%S"),
            "status": "unknown",
            "steps": [],
            "errors": [],
        }
        session = None

        try:
            scenario = self.validate_file(scenario_path)
            report["name"] = scenario.get("name", report["scenario"])

            scenario_vars = scenario.get("vars", {}) or {}
            merged_vars = {**scenario_vars, **(variables or {})}
            steps: List[Any] = _substitute(scenario.get("steps", []), merged_vars)

            TimeConfig.install_run_config(
                self._build_time_config(preset=timing_preset, overrides=timing_overrides)
            )

            site = self.repo.app
            os.makedirs(site.screenshot_dir, exist_ok=True)
            session = self._session_factory(site)
            page = session.start()
            ctx = WebContext(page, base_url=site.base_url, artifacts_dir=site.screenshot_dir)

            log.info("Running scenario %s (%d steps)", report["name"], len(steps))
            for idx, step in enumerate(steps, start=1):
                self._run_step(idx, step, ctx, report)

            report["status"] = "passed"
            return report

        except Exception as e:
            report["status"] = "failed"
            report["errors"].append(f"{type(e).__name__}: {e}")
            log.error("Scenario %s failed: %s: %s", report["scenario"], type(e).__name__, e)
            return report
        finally:
            report["duration_sec"] = round(time.time() - start_ts, 3)

            if session is not None:
                try:
                    session.close()
                except Exception as e:
                    log.warning("Closing browser session failed: %s", e)

            TimeConfig.clear_run_config()

            if report_path:
                os.makedirs(os.path.dirname(os.path.abspath(report_path)) or ".", exist_ok=True)
                with open(report_path, "w", encoding="utf-8") as f:
                    json.dump(report, f, indent=2)

    def _run_step(self, idx: int, step: Any, ctx: WebContext, report: Dict[str, Any]) -> None:
        step_rec: Dict[str, Any] = {"index": idx, "status": "running"}
        report["steps"].append(step_rec)
        started_at = time.time()
        text = str(step)

        try:
            keyword, args, text = _parse_step(step, idx)
            step_rec.update({"keyword": keyword, "args": args, "text": text})
            self._execute(keyword, args, ctx)
            step_rec["status"] = "passed"
        except Exception as e:
            step_rec["status"] = "failed"
            step_rec["error"] = f"{type(e).__name__}: {e}"
            if self.repo.app.screenshot_on_failure:
                step_rec["screenshot"] = ctx.screenshot_after_failed_step(idx, text, passed=False)
            raise
        finally:
            step_rec["duration_sec"] = round(time.time() - started_at, 3)

    def _selector(self, args: Dict[str, Any]) -> str:
        return self.repo.resolve_selector(str(args["selector"]))

    def _execute(self, keyword: str, args: Dict[str, Any], ctx: WebContext) -> None:
        """Execute single scenario step."""
        budget = {
            "max_attempts": args.get("max_attempts"),
            "interval": args.get("interval"),
        }

        if keyword == "visit":
            ctx.visit(str(args["url"]))
            return

        if keyword == "wait":
            ctx.wait(args["seconds"])
            return

        if keyword == "set_viewport":
            ctx.set_viewport_size(args["width"], args["height"])
            return

        if keyword == "selector_exists":
            ctx.wait_for_selector_existence(self._selector(args), **budget)
            return

        if keyword == "selector_visible":
            ctx.wait_for_selector_visibility(self._selector(args), **budget)
            return

        if keyword == "any_visible":
            ctx.wait_for_at_least_one_visible_element(self._selector(args), **budget)
            return

        if keyword == "selector_not_visible":
            ctx.assert_is_not_visible(self._selector(args))
            return

        if keyword == "click":
            ctx.click(self._selector(args))
            return

        if keyword == "doubleclick":
            ctx.doubleclick(self._selector(args))
            return

        if keyword == "click_first_visible":
            ctx.click_first_visible_element(self._selector(args))
            return

        if keyword == "visible_text":
            ctx.wait_for_visible_text(str(args["text"]), **budget)
            return

        if keyword == "element_text":
            ctx.wait_for_element_text(self._selector(args), str(args["text"]), **budget)
            return

        if keyword == "assert_query_param":
            ctx.assert_query_string_parameter_value(str(args["name"]), args["value"])
            return

        if keyword == "screenshot":
            ctx.take_screenshot(str(args.get("name", "page")))
            return

        raise ValueError(f"Unknown keyword: {keyword}")
