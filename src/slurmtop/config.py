"""Settings, optionally loaded from a YAML file."""

import dataclasses
import os
from pathlib import Path

import yaml

CONFIG_ENV = "SLURMTOP_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/slurmtop/config.yaml")


class ConfigError(ValueError):
    """Raised for unreadable or invalid configuration."""


@dataclasses.dataclass
class Settings:
    """Runtime settings.

    Attributes:
        squeue: squeue executable.
        scontrol: scontrol executable.
        refresh_interval: Seconds between automatic refreshes; 0 disables.
        poll_timeout: Seconds to wait for a key press before looping.
        log_file: Where to write debug logs; None discards them.
    """

    squeue: str = "squeue"
    scontrol: str = "scontrol"
    refresh_interval: float = 0.0
    poll_timeout: float = 0.1
    log_file: str | None = None

    def validate(self) -> "Settings":
        if self.refresh_interval < 0:
            raise ConfigError("refresh_interval must not be negative")
        if self.poll_timeout <= 0:
            raise ConfigError("poll_timeout must be positive")
        return self

    def override(self, **values) -> "Settings":
        """Returns a copy with every non-None value in `values` applied."""
        changes = {k: v for k, v in values.items() if v is not None}
        return dataclasses.replace(self, **changes).validate()


_TYPES = {
    "squeue": (str,),
    "scontrol": (str,),
    "refresh_interval": (int, float),
    "poll_timeout": (int, float),
    "log_file": (str,),
}


def parse_settings(data: object) -> Settings:
    """Validates a mapping (as read from YAML) into Settings."""
    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping")

    unknown = sorted(set(data) - set(_TYPES))
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(map(str, unknown))}")

    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, _TYPES[key]):
            raise ConfigError(f"invalid value for {key}: {value!r}")
    return Settings(**data).validate()


def find_config(path: Path | None = None) -> Path | None:
    """Picks the config file: explicit path, then $SLURMTOP_CONFIG, then default."""
    if path is not None:
        return path
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env)
    default = DEFAULT_CONFIG_PATH.expanduser()
    return default if default.exists() else None


def load_settings(path: Path | None = None) -> Settings:
    """Loads settings from the config file, if any."""
    config_path = find_config(path)
    if config_path is None:
        return Settings()
    try:
        data = yaml.safe_load(config_path.read_text())
    except OSError as exc:
        raise ConfigError(f"cannot read {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {config_path}: {exc}") from exc
    return parse_settings(data)
