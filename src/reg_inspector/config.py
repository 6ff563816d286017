"""
reg-inspector Configuration

Loads settings from defaults, an optional config.yaml and the environment.

Resolution order (later wins):
    1. Built-in defaults
    2. YAML file (--config, $REG_INSPECTOR_CONFIG, or ~/.reg-inspector/config.yaml)
    3. REG_INSPECTOR_* environment variables
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from reg_inspector.exceptions import ConfigError
from reg_inspector.logging_config import get_logger

logger = get_logger("config")

DEFAULT_CAPTURE_BUFFER_SIZE = 4096
DEFAULT_FLAGS_COMMAND = "REG FLAGS {key} QUERY"
# Registry keys nest at most 512 levels deep
DEFAULT_MAX_DEPTH = 512

ENV_OVERRIDES = {
    "capture_buffer_size": "REG_INSPECTOR_CAPTURE_BUFFER_SIZE",
    "flags_command": "REG_INSPECTOR_FLAGS_COMMAND",
    "process_timeout": "REG_INSPECTOR_TIMEOUT",
    "max_depth": "REG_INSPECTOR_MAX_DEPTH",
    "store_file": "REG_INSPECTOR_STORE",
}


def get_default_config_path() -> Path:
    """Get the default config file path."""
    return Path(os.environ.get(
        "REG_INSPECTOR_CONFIG",
        Path.home() / ".reg-inspector" / "config.yaml",
    ))


@dataclass
class Settings:
    """Runtime settings for reg-inspector."""
    capture_buffer_size: int = DEFAULT_CAPTURE_BUFFER_SIZE
    flags_command: str = DEFAULT_FLAGS_COMMAND
    process_timeout: Optional[float] = None
    max_depth: int = DEFAULT_MAX_DEPTH
    store_file: Optional[str] = None

    def validate(self) -> "Settings":
        """Check value ranges, raising ConfigError on the first bad key."""
        if self.capture_buffer_size < 2:
            raise ConfigError(
                f"capture_buffer_size must be at least 2, got {self.capture_buffer_size}",
                config_key="capture_buffer_size",
            )
        if "{key}" not in self.flags_command:
            raise ConfigError(
                "flags_command must contain a {key} placeholder",
                config_key="flags_command",
                details=self.flags_command,
            )
        try:
            self.flags_command.format(key="HKEY_LOCAL_MACHINE")
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigError(
                "flags_command has a placeholder other than {key}",
                config_key="flags_command",
                remediation="Double any literal braces as {{ and }}",
                details=f"{self.flags_command}: {e!r}",
            )
        if self.process_timeout is not None and self.process_timeout <= 0:
            raise ConfigError(
                f"process_timeout must be positive, got {self.process_timeout}",
                config_key="process_timeout",
            )
        if self.max_depth < 1:
            raise ConfigError(
                f"max_depth must be at least 1, got {self.max_depth}",
                config_key="max_depth",
            )
        return self


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    """Read a YAML mapping from disk."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}", details=str(e))
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}", details=str(e))

    if not isinstance(data, dict):
        raise ConfigError(
            f"{config_path} must contain a mapping at the top level",
            remediation="Write settings as 'key: value' lines",
        )
    return data


def _coerce(key: str, raw: Any) -> Any:
    """Convert a raw YAML or environment value to the field's type."""
    if raw is None or raw == "":
        if key in ("process_timeout", "store_file"):
            return None
        raise ConfigError(f"Missing value for {key}", config_key=key)

    try:
        if key in ("capture_buffer_size", "max_depth"):
            return int(raw)
        if key == "process_timeout":
            return float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for {key}: {raw!r}", config_key=key)
    return str(raw)


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from file and environment.

    Args:
        config_path: Explicit config file. It must exist when given.

    Returns:
        Validated Settings
    """
    values: Dict[str, Any] = {}
    known = {f.name for f in fields(Settings)}

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(
                f"Config file not found: {config_path}",
                remediation="Pass an existing file with --config",
            )
    else:
        candidate = get_default_config_path()
        config_path = candidate if candidate.exists() else None

    if config_path is not None:
        data = _read_yaml(config_path)
        for key, raw in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key '%s' in %s", key, config_path)
                continue
            values[key] = _coerce(key, raw)
        logger.debug("Loaded config from %s", config_path)

    for key, env_name in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is not None:
            values[key] = _coerce(key, raw)

    return Settings(**values).validate()
