# webauto/cli.py
"""
@file cli.py
@brief Command-line interface for webauto.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import WebAutoError
from .logsetup import setup_logging
from .repository import Repository
from .runner import DEFAULT_SCHEMA_PATH, Runner
from .steps import list_sentences
from .timinglogger import TIMING_LOGGER
from .timings import WAIT_FIELDS


def _resolve_timing_options(args: argparse.Namespace) -> Tuple[str, Dict[str, Any]]:
    """Resolve the timing preset and CLI attempt-budget overrides."""
    preset = "default"
    if getattr(args, "ci", False):
        preset = "ci"
    elif getattr(args, "fast", False):
        preset = "fast"
    elif getattr(args, "slow", False):
        preset = "slow"

    budget: Dict[str, Any] = {}
    if getattr(args, "attempts", None) is not None:
        budget["max_attempts"] = args.attempts
    if getattr(args, "interval", None) is not None:
        budget["interval"] = args.interval

    overrides: Dict[str, Any] = {}
    if budget:
        overrides = {
            name: dict(budget)
            for name in WAIT_FIELDS
        }
    return preset, overrides


def _parse_vars(var_specs: Optional[List[str]]) -> Dict[str, Any]:
    variables: Dict[str, Any] = {}
    for var_spec in var_specs or []:
        if "=" not in var_spec:
            raise ValueError(f"Variable must be in KEY=VALUE format: {var_spec}")
        key, value = var_spec.split("=", 1)
        variables[key.strip()] = value.strip()
    return variables


def _resolve_scenario_paths(single_scenario: Optional[str], scenarios_dir: Optional[str]) -> List[str]:
    """Resolve scenarios for single or bulk execution."""
    if single_scenario:
        return [os.path.abspath(single_scenario)]
    if not scenarios_dir:
        return []

    base = Path(scenarios_dir).resolve()
    if not base.is_dir():
        return []
    scenario_files = list(base.rglob("*.yaml")) + list(base.rglob("*.yml"))
    return sorted({str(path.resolve()) for path in scenario_files})


def _build_report_path(base_report_path: str, scenario_path: str, index: int, bulk_mode: bool) -> str:
    if not bulk_mode:
        return base_report_path

    base = Path(base_report_path)
    suffix = base.suffix or ".json"
    filename = f"{base.stem}__{index:03d}_{Path(scenario_path).stem}{suffix}"
    return str((base.parent / filename).resolve())


def _print_report(report: Dict[str, Any]) -> None:
    print(f"\nScenario: {report.get('name', report.get('scenario'))}")
    for step in report.get("steps", []):
        status = str(step.get("status", "unknown")).upper()
        print(f"  {step['index']:>3}. [{status:<6}] {step.get('text', '')}")
        if step.get("error"):
            print(f"         {step['error']}")
        if step.get("screenshot"):
            print(f"         screenshot: {step['screenshot']}")
    for error in report.get("errors", []):
        print(f"  error: {error}")
    print(f"Status: {str(report.get('status')).upper()} in {report.get('duration_sec', 0):.2f}s")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = argv if argv is not None else sys.argv[1:]

    p = argparse.ArgumentParser(
        prog="webauto",
        description="webauto - behaviour-driven web test helpers on Playwright",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # -------------------------
    # run
    # -------------------------
    runp = sub.add_parser("run", help="Run YAML scenarios against a site")
    runp.add_argument("--site", "-c", default=None, help="Path to site.yaml (app settings and selector aliases)")
    runp.add_argument("--scenario", "-s", default=None, help="Path to scenario.yaml")
    runp.add_argument("--scenarios-dir", default=None, help="Run all scenarios under directory (*.yaml/*.yml)")
    runp.add_argument("--schema", default=DEFAULT_SCHEMA_PATH, help="Path to scenario schema JSON")
    runp.add_argument("--var", "-v", action="append", help="Variable in KEY=VALUE format (can be used multiple times)")
    runp.add_argument("--report", "-r", default="report.json", help="Report output path (JSON)")
    runp.add_argument("--attempts", type=int, default=None, help="Override attempt budget of every polling step")
    runp.add_argument("--interval", type=float, default=None, help="Override pause between attempts in seconds")
    runp.add_argument("--ci", action="store_true", help="Use CI attempt budgets")
    runp.add_argument("--fast", action="store_true", help="Use fast attempt budgets for local development")
    runp.add_argument("--slow", action="store_true", help="Use slow attempt budgets for unstable environments")
    runp.add_argument("--log-file", default=None, help="Also write logs to this file")
    runp.add_argument("--timing-log", action="store_true", help="Log wait/retry timing events")

    # -------------------------
    # validate
    # -------------------------
    valp = sub.add_parser("validate", help="Validate site and scenario files")
    valp.add_argument("--site", "-c", default=None, help="Path to site.yaml")
    valp.add_argument("--scenario", "-s", required=True, help="Path to scenario YAML file")
    valp.add_argument("--schema", default=DEFAULT_SCHEMA_PATH, help="Path to scenario JSON schema")

    # -------------------------
    # steps
    # -------------------------
    sub.add_parser("steps", help="List the step sentences scenarios may use")

    args = p.parse_args(argv)

    if args.cmd == "steps":
        for sentence in list_sentences():
            print(sentence)
        return 0

    try:
        repo = Repository(args.site)
    except WebAutoError as e:
        print(f"Error loading site file: {e}", file=sys.stderr)
        return 1

    if args.cmd == "validate":
        try:
            Runner(repo, schema_path=args.schema).validate_file(args.scenario)
        except (WebAutoError, OSError) as e:
            print(f"Invalid: {e}", file=sys.stderr)
            return 2
        print(f"Valid: {args.scenario}")
        return 0

    if args.cmd == "run":
        if bool(args.scenario) == bool(args.scenarios_dir):
            print("Error: exactly one of --scenario or --scenarios-dir is required", file=sys.stderr)
            return 1

        setup_logging(log_file=Path(args.log_file) if args.log_file else None)
        if args.timing_log:
            TIMING_LOGGER.enable()
            logging.getLogger("webauto.timing").setLevel(logging.INFO)

        try:
            variables = _parse_vars(args.var)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        scenario_paths = _resolve_scenario_paths(args.scenario, args.scenarios_dir)
        if not scenario_paths:
            print("Error: no scenario files found", file=sys.stderr)
            return 1

        timing_preset, timing_overrides = _resolve_timing_options(args)
        runner = Runner(repo, schema_path=args.schema)
        bulk_mode = bool(args.scenarios_dir)

        failed = 0
        for idx, scenario_path in enumerate(scenario_paths, start=1):
            report = runner.run(
                scenario_path,
                variables=variables,
                report_path=_build_report_path(args.report, scenario_path, idx, bulk_mode),
                timing_preset=timing_preset,
                timing_overrides=timing_overrides,
            )
            _print_report(report)
            if report["status"] != "passed":
                failed += 1

        if bulk_mode:
            print(f"\nTotal: {len(scenario_paths)}  Passed: {len(scenario_paths) - failed}  Failed: {failed}")
        return 0 if failed == 0 else 2

    return 1


if __name__ == "__main__":
    sys.exit(main())
