"""Configuration loader with layered priority.

Priority order (highest to lowest):
1. Environment variables (HEAL_VERBOSE, HEAL_HEALING_ENABLED, ...)
2. Project config (.heal.yaml in current directory)
3. Global config (~/.heal.yaml)
4. Default values
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Config file paths
GLOBAL_CONFIG = Path.home() / ".heal.yaml"
PROJECT_CONFIG = Path.cwd() / ".heal.yaml"


def _safe_int(value: Any, default: int) -> int:
    """Convert value to int, returning default if None or invalid."""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_bool(value: Any, default: bool = False) -> bool:
    """Parse boolean value from various formats.

    Handles:
    - None -> default
    - bool -> as-is
    - str -> "true", "1", "yes", "on" are True
    - other -> bool(value)
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on")
    return bool(value)


@dataclass
class HealingConfig:
    """Fuzzy healing settings used when no stored locator resolves."""

    enabled: bool = True
    threshold: int = 60  # Minimum match score


@dataclass
class InsightsConfig:
    """Locator audit settings."""

    critical_threshold: int = 10  # Scores at or below are critical


@dataclass
class HealConfig:
    """Main configuration for heal CLI."""

    verbose: bool = False

    # Nested configs with defaults
    healing: HealingConfig = field(default_factory=HealingConfig)
    insights: InsightsConfig = field(default_factory=InsightsConfig)


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    @classmethod
    def load(cls) -> HealConfig:
        """Load configuration with layered priority.

        Returns:
            Merged HealConfig instance.
        """
        # Start with defaults
        config_dict: dict[str, Any] = {}

        # Layer 1: Global config (~/.heal.yaml)
        if GLOBAL_CONFIG.exists():
            global_data = cls._load_yaml(GLOBAL_CONFIG)
            config_dict = cls._deep_merge(config_dict, global_data)

        # Layer 2: Project config (.heal.yaml)
        if PROJECT_CONFIG.exists():
            project_data = cls._load_yaml(PROJECT_CONFIG)
            config_dict = cls._deep_merge(config_dict, project_data)

        # Layer 3: Environment variables (highest priority)
        env_overrides = cls._get_env_overrides()
        config_dict = cls._deep_merge(config_dict, env_overrides)

        return cls._build_config(config_dict)

    @classmethod
    def _load_yaml(cls, path: Path) -> dict[str, Any]:
        """Load YAML file safely."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except (yaml.YAMLError, OSError):
            return {}

    @classmethod
    def _get_env_overrides(cls) -> dict[str, Any]:
        """Get configuration overrides from environment variables."""
        overrides: dict[str, Any] = {}

        if "HEAL_VERBOSE" in os.environ:
            overrides["verbose"] = _parse_bool(os.environ["HEAL_VERBOSE"])

        healing_overrides: dict[str, Any] = {}
        if "HEAL_HEALING_ENABLED" in os.environ:
            healing_overrides["enabled"] = os.environ["HEAL_HEALING_ENABLED"]
        if "HEAL_HEALING_THRESHOLD" in os.environ:
            healing_overrides["threshold"] = os.environ["HEAL_HEALING_THRESHOLD"]
        if healing_overrides:
            overrides["healing"] = healing_overrides

        if "HEAL_CRITICAL_THRESHOLD" in os.environ:
            overrides["insights"] = {"critical_threshold": os.environ["HEAL_CRITICAL_THRESHOLD"]}

        return overrides

    @classmethod
    def _deep_merge(cls, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @classmethod
    def _build_config(cls, config_dict: dict[str, Any]) -> HealConfig:
        """Build HealConfig from dictionary."""
        healing_dict = config_dict.get("healing") or {}
        insights_dict = config_dict.get("insights") or {}

        healing = HealingConfig(
            enabled=_parse_bool(healing_dict.get("enabled"), True),
            threshold=_safe_int(healing_dict.get("threshold"), 60),
        )

        insights = InsightsConfig(
            critical_threshold=_safe_int(insights_dict.get("critical_threshold"), 10),
        )

        return HealConfig(
            verbose=_parse_bool(config_dict.get("verbose"), False),
            healing=healing,
            insights=insights,
        )


def setup_logging(verbose: bool, log_dir: Path | None) -> Path | None:
    """Configure file-based DEBUG logging.

    Args:
        verbose: Enable logging when True
        log_dir: Directory to write debug.log

    Returns:
        Path to log file if created, None otherwise
    """
    if not verbose or log_dir is None:
        return None

    log_file = log_dir / "debug.log"
    log_dir.mkdir(parents=True, exist_ok=True)

    # Create file handler
    handler = logging.FileHandler(log_file, mode="w")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s.%(msecs)03d [%(levelname)-5s] %(name)-20s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))

    # Configure root heal logger (clear existing handlers to prevent duplicates)
    heal_logger = logging.getLogger("heal")
    for old in heal_logger.handlers:
        old.close()
    heal_logger.handlers.clear()
    heal_logger.setLevel(logging.DEBUG)
    heal_logger.addHandler(handler)

    return log_file
