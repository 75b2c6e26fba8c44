from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from core.errors import ConfigurationError

CONFIG_ENV = "TASKCTL_CONFIG"
DATA_DIR_ENV = "TASKCTL_DATA_DIR"
USER_CONFIG_PATH = Path.home() / ".config" / "taskctl" / "config.yaml"
DEFAULT_DATA_DIR = "~/.local/share/taskctl"


@dataclass(frozen=True)
class Weights:
    urgency: float = 1.0
    blocking: float = 0.8
    staleness: float = 0.5
    quick_win: float = 0.3


@dataclass(frozen=True)
class Settings:
    """Read-only configuration consumed by scoring and the CLI."""

    weights: Weights = field(default_factory=Weights)
    point_to_hours: float = 1.0
    date_format: str = "%Y-%m-%d"
    data_directory: str = DEFAULT_DATA_DIR

    @property
    def data_dir(self) -> Path:
        return Path(self.data_directory).expanduser()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: Optional[Path] = None) -> "Settings":
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping", path)
        priority = _section(data, "priority", path)
        raw_weights = _section(priority, "weights", path)
        defaults = Weights()
        weights = Weights(
            urgency=_number(raw_weights, "urgency", defaults.urgency, path),
            blocking=_number(raw_weights, "blocking", defaults.blocking, path),
            staleness=_number(raw_weights, "staleness", defaults.staleness, path),
            quick_win=_number(raw_weights, "quick_win", defaults.quick_win, path),
        )
        for name in ("urgency", "blocking", "staleness", "quick_win"):
            if getattr(weights, name) < 0:
                raise ConfigurationError(f"Weight '{name}' must be non-negative", path)
        estimate = _section(data, "estimate", path)
        point_to_hours = _number(estimate, "point_to_hours", 1.0, path)
        if point_to_hours < 0:
            raise ConfigurationError("'point_to_hours' must be non-negative", path)
        display = _section(data, "display", path)
        data_section = _section(data, "data", path)
        return cls(
            weights=weights,
            point_to_hours=point_to_hours,
            date_format=str(display.get("date_format", "%Y-%m-%d")),
            data_directory=str(data_section.get("directory", DEFAULT_DATA_DIR)),
        )

    @classmethod
    def load(cls, config_path: Optional[Path] = None, data_dir: Optional[str] = None) -> "Settings":
        """Load settings: explicit path > $TASKCTL_CONFIG > user config > defaults.

        The data directory is overridden by `data_dir`, then $TASKCTL_DATA_DIR.
        """
        path = resolve_config_path(config_path)
        if path.exists():
            try:
                raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}", path) from exc
            except OSError as exc:
                raise ConfigurationError(f"Unable to read config file {path}: {exc}", path) from exc
            settings = cls.from_dict(raw, path)
        else:
            settings = cls()

        override = data_dir or os.environ.get(DATA_DIR_ENV)
        if override:
            settings = cls(
                weights=settings.weights,
                point_to_hours=settings.point_to_hours,
                date_format=settings.date_format,
                data_directory=override,
            )
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "priority": {
                "weights": {
                    "urgency": self.weights.urgency,
                    "blocking": self.weights.blocking,
                    "staleness": self.weights.staleness,
                    "quick_win": self.weights.quick_win,
                }
            },
            "estimate": {"point_to_hours": self.point_to_hours},
            "display": {"date_format": self.date_format},
            "data": {"directory": self.data_directory},
        }

    @classmethod
    def default_yaml(cls) -> str:
        return yaml.safe_dump(cls().to_dict(), allow_unicode=True, default_flow_style=False, sort_keys=False)


def _section(data: Dict[str, Any], key: str, path: Optional[Path]) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Section '{key}' must be a mapping", path)
    return value


def _number(data: Dict[str, Any], key: str, default: float, path: Optional[Path]) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"'{key}' must be a number, got {value!r}", path)
    return float(value)


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    if config_path:
        return Path(config_path).expanduser()
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return USER_CONFIG_PATH


def init_config(config_path: Optional[Path] = None, force: bool = False) -> Path:
    """Write the default configuration file; refuses to overwrite unless forced."""
    path = resolve_config_path(config_path)
    if path.exists() and not force:
        raise ConfigurationError(
            f"Configuration file already exists: {path}. Use --force to overwrite.",
            path,
        )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(Settings.default_yaml(), encoding="utf-8")
    return path


__all__ = ["Weights", "Settings", "resolve_config_path", "init_config", "USER_CONFIG_PATH"]
