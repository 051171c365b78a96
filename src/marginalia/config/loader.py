"""YAML configuration loader with inheritance support.

Supports:
- Loading YAML config files
- Config inheritance via 'extends' key
- Deep merging of nested config
"""

from pathlib import Path
from typing import Any

import yaml

from . import (
    AIConfig,
    AudioConfig,
    CaptureConfig,
    FanoutConfig,
    LoggingConfig,
    MarginaliaConfig,
    StorageConfig,
    STTConfig,
    TestingConfig,
)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Values from override take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_with_inheritance(path: Path) -> dict[str, Any]:
    """Load YAML file with inheritance support.

    If the file contains an 'extends' key, the base config is loaded first
    and merged with the current config.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        config = yaml.safe_load(f) or {}

    if "extends" in config:
        base_name = config.pop("extends")
        base_config = load_yaml_with_inheritance(path.parent / base_name)
        config = deep_merge(base_config, config)

    return config


def dict_to_config(data: dict[str, Any]) -> MarginaliaConfig:
    """Convert raw dict to typed MarginaliaConfig dataclass.

    Raises:
        TypeError: If a section contains an unknown key
    """
    root = data.get("marginalia", {}) or {}

    # YAML sections written as empty keys come back as None
    def section(key: str) -> dict[str, Any]:
        value = root.get(key, {})
        return value if value is not None else {}

    return MarginaliaConfig(
        audio=AudioConfig(**section("audio")),
        stt=STTConfig(**section("stt")),
        capture=CaptureConfig(**section("capture")),
        ai=AIConfig(**section("ai")),
        storage=StorageConfig(**section("storage")),
        fanout=FanoutConfig(**section("fanout")),
        logging=LoggingConfig(**section("logging")),
        testing=TestingConfig(**section("testing")),
    )


def default_config_dir() -> Path:
    """config/ in the project root."""
    return Path(__file__).parent.parent.parent.parent / "config"


class YAMLConfigLoader:
    """YAML configuration loader implementation."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize loader with optional config directory.

        Args:
            config_dir: Directory containing config files.
                        Defaults to 'config' relative to project root.
        """
        self._config_dir = config_dir or default_config_dir()

    def load(self, path: Path) -> MarginaliaConfig:
        """Load configuration from file path."""
        return dict_to_config(load_yaml_with_inheritance(path))

    def load_profile(self, profile: str) -> MarginaliaConfig:
        """Load configuration by profile name (e.g. 'dev', 'prod')."""
        return self.load(self._config_dir / f"{profile}.yaml")

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        return self._config_dir


def load_config(
    path: str | Path | None = None,
    profile: str | None = None,
    config_dir: Path | None = None,
) -> MarginaliaConfig:
    """Load Marginalia configuration.

    Args:
        path: Direct path to config file (takes precedence)
        profile: Profile name ('dev', 'prod', 'test') if path not given;
                 detected from MARGINALIA_PROFILE when both are None
        config_dir: Directory holding the profile files

    Returns:
        Parsed MarginaliaConfig

    Examples:
        >>> config = load_config(profile="dev")
        >>> config = load_config(path="/path/to/config.yaml")
    """
    loader = YAMLConfigLoader(config_dir)

    if path is not None:
        return loader.load(Path(path))
    if profile is None:
        from .profiles import detect_profile

        profile = detect_profile().value
    return loader.load_profile(profile)


__all__ = [
    "YAMLConfigLoader",
    "deep_merge",
    "default_config_dir",
    "dict_to_config",
    "load_config",
    "load_yaml_with_inheritance",
]
