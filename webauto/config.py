# webauto/config.py
"""
@file config.py
@brief Centralized attempt budget configuration for polling steps.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Generator, Optional

from .timings import WAIT_FIELDS, build_preset_values, list_presets


@dataclass
class WaitSettings:
    """Attempt budget for a specific polling operation."""
    max_attempts: int
    interval: float

    def with_overrides(
        self,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> WaitSettings:
        """Copy with the given budget values replaced; None keeps the current one."""
        return WaitSettings(
            max_attempts=int(max_attempts) if max_attempts is not None else self.max_attempts,
            interval=float(interval) if interval is not None else self.interval,
        )


class TimeConfig:
    """
    Attempt budget configuration for the framework.

    Deterministic precedence is applied per run via build/install APIs:
      base defaults -> preset -> site defaults -> CLI overrides
    """

    _default_instance: Optional[TimeConfig] = None
    _local = threading.local()
    _lock = threading.Lock()

    def __init__(self, preset: str = "default"):
        self._apply_values(build_preset_values(preset))

    @classmethod
    def fields(cls) -> Dict[str, Dict[str, Any]]:
        return WAIT_FIELDS

    def _apply_values(self, values: Dict[str, Any]) -> None:
        for name in self.fields():
            val = values.get(name)
            if isinstance(val, WaitSettings):
                setting = deepcopy(val)
            elif isinstance(val, dict):
                setting = WaitSettings(
                    max_attempts=int(val["max_attempts"]),
                    interval=float(val["interval"]),
                )
            else:
                raise ValueError(f"Invalid wait setting for {name}: {val}")
            setattr(self, name, setting)

    def get(self, name: str) -> WaitSettings:
        if name not in self.fields():
            raise ValueError(f"Unknown TimeConfig field: {name}")
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for name in self.fields():
            setting: WaitSettings = getattr(self, name)
            data[name] = {"max_attempts": setting.max_attempts, "interval": setting.interval}
        return data

    def clone(self) -> TimeConfig:
        """Independent copy, safe to mutate inside an override block."""
        clone = TimeConfig()
        clone._apply_values(self.to_dict())
        return clone

    @classmethod
    def build_from(
        cls,
        *,
        preset: str = "default",
        overrides: Optional[Dict[str, Any]] = None,
        site_defaults: Optional[Dict[str, Any]] = None,
    ) -> TimeConfig:
        """Budgets for one scenario run: preset, then site defaults, then CLI overrides."""
        cfg = cls(preset)
        if site_defaults and preset == "default":
            _apply_overrides(
                cfg,
                {
                    name: {
                        "max_attempts": site_defaults.get("max_attempts"),
                        "interval": site_defaults.get("wait_interval"),
                    }
                    for name in cls.fields()
                },
            )
        if overrides:
            _apply_overrides(cfg, overrides)
        return cfg

    @classmethod
    def default(cls) -> TimeConfig:
        """Shared preset-'default' budgets used outside any run."""
        if cls._default_instance is None:
            with cls._lock:
                if cls._default_instance is None:
                    cls._default_instance = cls()
        return cls._default_instance

    @classmethod
    def install_run_config(cls, config: TimeConfig) -> None:
        """Make config the budgets of the running scenario on this thread."""
        cls._local.run_config = config

    @classmethod
    def clear_run_config(cls) -> None:
        """Drop the scenario budgets installed on this thread."""
        cls._local.run_config = None

    @classmethod
    def current(cls) -> TimeConfig:
        """Budgets polling steps should use right now on this thread."""
        override = getattr(cls._local, "override", None)
        if override is not None:
            return override

        run_cfg = getattr(cls._local, "run_config", None)
        if run_cfg is not None:
            return run_cfg

        return cls.default()

    @classmethod
    @contextmanager
    def override(cls, **kwargs: Any) -> Generator[TimeConfig, None, None]:
        """Temporarily replace some budgets, e.g. `override(visible_text={"max_attempts": 30})`."""
        previous = getattr(cls._local, "override", None)
        scoped = cls.current().clone()
        _apply_overrides(scoped, kwargs)

        cls._local.override = scoped
        try:
            yield scoped
        finally:
            cls._local.override = previous

    @classmethod
    def reset_to_defaults(cls) -> None:
        """Rebuild the shared default and forget this thread's run and override budgets."""
        with cls._lock:
            cls._default_instance = cls()
        cls._local.override = None
        cls._local.run_config = None


def _apply_overrides(config: TimeConfig, overrides: Dict[str, Any]) -> None:
    for key, value in overrides.items():
        if key not in config.fields():
            raise ValueError(f"Unknown TimeConfig field: {key}")
        base_setting: WaitSettings = getattr(config, key)
        if isinstance(value, WaitSettings):
            setattr(config, key, deepcopy(value))
        elif isinstance(value, dict):
            setattr(
                config,
                key,
                base_setting.with_overrides(
                    max_attempts=value.get("max_attempts"),
                    interval=value.get("interval"),
                ),
            )
        else:
            raise ValueError(f"Invalid override for {key}: {value}")


def available_presets() -> Dict[str, Dict[str, Any]]:
    return list_presets()
