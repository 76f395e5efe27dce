# webauto/artifacts.py
from __future__ import annotations
import logging
import os
import time
from typing import Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

log = logging.getLogger("webauto")


def _ts() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def capture_page_screenshot(page: Page, out_dir: str, name_prefix: str) -> Optional[str]:
    """
    Capture the current viewport of a Playwright page as PNG.
    Returns file path or None if capture fails.
    """
    try:
        ensure_dir(out_dir)
    except OSError as e:
        log.warning("Screenshot failed: cannot create %s (%s)", out_dir, e)
        return None
    path = os.path.join(out_dir, f"{name_prefix}_{_ts()}.png")
    return _write_screenshot(page, path)


def _write_screenshot(page: Page, path: str) -> Optional[str]:
    try:
        data = page.screenshot()
    except PlaywrightError as e:
        log.warning("Screenshot failed: %s", e)
        return None

    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        log.warning("Screenshot failed: %s is not writable (%s)", path, e)
        return None
    return path


def screenshot_after_failed_step(
    page: Page,
    step_line: int,
    step_text: str,
    passed: bool,
    out_dir: str = ".",
) -> Optional[str]:
    """
    Screenshot a failed step into out_dir as "step-<step_line>-<unix time>.png".

    Does nothing for passed steps or when out_dir is not writable.
    """
    if passed:
        return None
    if not os.path.isdir(out_dir) or not os.access(out_dir, os.W_OK):
        log.warning("Screenshot skipped: %s is not writable", out_dir)
        return None

    path = os.path.join(out_dir, f"step-{step_line}-{int(time.time())}.png")
    written = _write_screenshot(page, path)
    if written:
        log.info("Screenshot for '%s' placed in %s", step_text, written)
    return written
