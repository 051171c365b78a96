"""Configuration profile management.

Selects the configuration profile from the environment.
"""

import os
from enum import Enum
from pathlib import Path

PROFILE_ENV_VAR = "MARGINALIA_PROFILE"


class Profile(Enum):
    """Available configuration profiles."""

    DEV = "dev"
    PROD = "prod"
    TEST = "test"


def detect_profile() -> Profile:
    """Detect the configuration profile.

    Uses MARGINALIA_PROFILE when it names a known profile, else DEV.
    """
    env_profile = os.environ.get(PROFILE_ENV_VAR, "").strip().lower()
    for profile in Profile:
        if profile.value == env_profile:
            return profile
    return Profile.DEV


def get_profile_path(profile: Profile | None = None, config_dir: Path | None = None) -> Path:
    """Get path to profile configuration file.

    Args:
        profile: Profile to use, or None to auto-detect
        config_dir: Configuration directory, or None for default

    Returns:
        Path to profile YAML file
    """
    if profile is None:
        profile = detect_profile()

    if config_dir is None:
        from .loader import default_config_dir

        config_dir = default_config_dir()

    return config_dir / f"{profile.value}.yaml"


def is_development() -> bool:
    """Check if running in development mode."""
    return detect_profile() == Profile.DEV


def is_production() -> bool:
    """Check if running in production mode."""
    return detect_profile() == Profile.PROD


__all__ = [
    "PROFILE_ENV_VAR",
    "Profile",
    "detect_profile",
    "get_profile_path",
    "is_development",
    "is_production",
]
