"""Templater settings loaded from YAML with environment overrides.

Example ``templater.yaml``:

```yaml
diff:
  order_significant: true
  max_depth: null
  ignored_attributes: [loc, location, position, range, line]
logging:
  level: INFO
```

Environment variables:
- JUNOS_TEMPLATER_ORDER_SIGNIFICANT: "0" or "1"
- JUNOS_TEMPLATER_MAX_DEPTH: integer depth limit
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

KNOWN_SECTIONS = {"diff", "logging"}
KNOWN_DIFF_KEYS = {"order_significant", "max_depth", "ignored_attributes"}
KNOWN_LOGGING_KEYS = {"level"}


class SettingsError(Exception):
    """Error loading templater settings."""
    pass


@dataclass
class TemplaterSettings:
    """Settings shared by the CLI and the template engine."""
    ignored_attributes: Optional[list[str]] = None  # None keeps the engine default
    order_significant: bool = True
    max_depth: Optional[int] = None
    log_level: str = "INFO"
    source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict, source: Optional[str] = None) -> "TemplaterSettings":
        """Build settings from the parsed YAML document."""
        unknown = set(data) - KNOWN_SECTIONS
        if unknown:
            raise SettingsError(f"Unknown settings sections: {', '.join(sorted(unknown))}")

        diff = data.get("diff") or {}
        log = data.get("logging") or {}
        for section, keys, known in (
            ("diff", diff, KNOWN_DIFF_KEYS),
            ("logging", log, KNOWN_LOGGING_KEYS),
        ):
            unknown = set(keys) - known
            if unknown:
                raise SettingsError(
                    f"Unknown keys in '{section}': {', '.join(sorted(unknown))}"
                )

        settings = cls(source=source)
        if "ignored_attributes" in diff:
            settings.ignored_attributes = [str(a) for a in diff["ignored_attributes"] or []]
        if "order_significant" in diff:
            settings.order_significant = bool(diff["order_significant"])
        if diff.get("max_depth") is not None:
            settings.max_depth = _parse_depth(diff["max_depth"])
        if log.get("level"):
            settings.log_level = str(log["level"]).upper()

        return settings

    def apply_env(self) -> "TemplaterSettings":
        """Apply environment variable overrides in place."""
        order = os.environ.get("JUNOS_TEMPLATER_ORDER_SIGNIFICANT")
        if order is not None:
            self.order_significant = order.strip() not in ("0", "false", "no", "")

        depth = os.environ.get("JUNOS_TEMPLATER_MAX_DEPTH")
        if depth:
            self.max_depth = _parse_depth(depth)

        return self

    def to_diff_options(self):
        """Build DiffOptions for the diff engine."""
        from ..config_engine.schema import DiffOptions

        options = DiffOptions(
            order_significant=self.order_significant,
            max_depth=self.max_depth,
        )
        if self.ignored_attributes is not None:
            options.ignored_attributes = tuple(self.ignored_attributes)
        return options


def _parse_depth(value) -> int:
    try:
        depth = int(value)
    except (TypeError, ValueError):
        raise SettingsError(f"Invalid max_depth: {value!r}")
    if depth < 0:
        raise SettingsError(f"max_depth must be >= 0, got {depth}")
    return depth


def find_settings_file() -> Optional[Path]:
    """Find templater.yaml in the usual places."""
    search_paths = [
        Path.cwd() / "configs" / "templater.yaml",
        Path.cwd() / "templater.yaml",
        Path.home() / ".config" / "junos-templater" / "templater.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_settings(path: Optional[str] = None) -> TemplaterSettings:
    """
    Load settings from YAML, falling back to defaults.

    Args:
        path: Explicit settings file; must exist when given

    Raises:
        SettingsError: If the file is missing, unreadable or invalid
    """
    if path is not None:
        settings_path: Optional[Path] = Path(path)
        if not settings_path.exists():
            raise SettingsError(f"Settings file not found: {path}")
    else:
        settings_path = find_settings_file()

    if settings_path is None:
        logger.debug("No settings file found, using defaults")
        return TemplaterSettings().apply_env()

    try:
        with open(settings_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {settings_path}: {e}")

    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {settings_path} must contain a mapping")

    logger.debug(f"Loaded settings from {settings_path}")
    return TemplaterSettings.from_dict(data, source=str(settings_path)).apply_env()
