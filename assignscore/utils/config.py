"""
Configuration management for AssignScore.

This module provides configuration management, settings handling,
and application-wide parameter storage.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigurationError


log = logging.getLogger(__name__)


REEVALUATION_POLICIES = ("append", "reject")
STORE_BACKENDS = ("memory", "sqlite", "rest")


@dataclass
class Settings:
    """
    Application settings and configuration parameters.

    Attributes:
        similarity: Plagiarism-risk settings
        grading: Heuristic grader settings
        evaluation: Orchestration settings (re-evaluation policy, workers, timeout)
        store: Content store backend and connection settings
    """
    similarity: Dict[str, Any] = field(default_factory=lambda: {
        "risk_decimals": 2,
    })

    grading: Dict[str, Any] = field(default_factory=lambda: {
        "default_max_score": 100,
    })

    evaluation: Dict[str, Any] = field(default_factory=lambda: {
        "reevaluation_policy": "append",
        "max_workers": 4,
        "timeout_seconds": 30,
    })

    store: Dict[str, Any] = field(default_factory=lambda: {
        "backend": "memory",
        "sqlite_path": "assignscore.db",
        "rest_url": "",
        "rest_key": "",
        "timeout_seconds": 10,
    })


class Config:
    """
    Configuration manager for AssignScore.

    Provides centralized configuration management with support for:
    - Default settings
    - User configuration files
    - Environment variables
    - Runtime configuration changes
    """

    DEFAULT_CONFIG_FILE = "assignscore_config.json"
    USER_CONFIG_DIR = Path.home() / ".config" / "assignscore"

    # environment variable -> (section, key)
    ENVIRONMENT_OVERRIDES = {
        "ASSIGNSCORE_STORE_BACKEND": ("store", "backend"),
        "ASSIGNSCORE_SQLITE_PATH": ("store", "sqlite_path"),
        "ASSIGNSCORE_STORE_URL": ("store", "rest_url"),
        "ASSIGNSCORE_STORE_KEY": ("store", "rest_key"),
        "ASSIGNSCORE_REEVALUATION_POLICY": ("evaluation", "reevaluation_policy"),
    }

    SECTIONS = ("similarity", "grading", "evaluation", "store")

    def __init__(self, config_file: Optional[Union[str, Path]] = None,
                 use_environment: bool = True) -> None:
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to configuration file
            use_environment: Whether ASSIGNSCORE_* environment variables override the file
        """
        self.settings = Settings()
        self.config_file = config_file or self.USER_CONFIG_DIR / self.DEFAULT_CONFIG_FILE
        self._load_configuration()
        if use_environment:
            self._apply_environment_overrides()

    def _load_configuration(self) -> None:
        """Load configuration from file if it exists."""
        try:
            if isinstance(self.config_file, str):
                self.config_file = Path(self.config_file)

            if self.config_file.exists():
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    config_data = json.load(f)

                self._update_settings_from_dict(config_data)
                log.info(f"Configuration loaded from {self.config_file}")
            else:
                log.info("Using default configuration")

        except (OSError, ValueError) as e:
            log.warning(f"Failed to load configuration from {self.config_file}: {e}")
            log.info("Using default configuration")

    def _update_settings_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update settings from dictionary."""
        for section in self.SECTIONS:
            if section in config_dict:
                getattr(self.settings, section).update(config_dict[section])

    def _apply_environment_overrides(self) -> None:
        for variable, (section, key) in self.ENVIRONMENT_OVERRIDES.items():
            value = os.environ.get(variable)
            if value:
                getattr(self.settings, section)[key] = value
                log.debug(f"Configuration {section}.{key} overridden from {variable}")

    def save_configuration(self, config_file: Optional[Union[str, Path]] = None) -> None:
        """
        Save current configuration to file.

        Args:
            config_file: Optional path to save configuration file
        """
        try:
            save_path = config_file or self.config_file
            if isinstance(save_path, str):
                save_path = Path(save_path)

            save_path.parent.mkdir(parents=True, exist_ok=True)

            config_dict = asdict(self.settings)

            with open(save_path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)

            log.info(f"Configuration saved to {save_path}")

        except Exception as e:
            log.error(f"Failed to save configuration: {e}")
            raise

    def get_similarity_config(self) -> Dict[str, Any]:
        """Get plagiarism-risk configuration."""
        return self.settings.similarity.copy()

    def get_grading_config(self) -> Dict[str, Any]:
        """Get grader configuration."""
        return self.settings.grading.copy()

    def get_evaluation_config(self) -> Dict[str, Any]:
        """Get orchestration configuration."""
        return self.settings.evaluation.copy()

    def get_store_config(self) -> Dict[str, Any]:
        """Get content store configuration."""
        return self.settings.store.copy()

    @property
    def reevaluation_policy(self) -> str:
        return str(self.settings.evaluation.get("reevaluation_policy", "append")).lower()

    def set_reevaluation_policy(self, policy: str) -> None:
        """
        Set the re-evaluation policy.

        Args:
            policy: ``append`` to insert a new evaluation on every call,
                ``reject`` to refuse evaluating a submission twice

        Raises:
            ConfigurationError: If the policy name is unknown
        """
        policy = policy.lower()
        if policy not in REEVALUATION_POLICIES:
            raise ConfigurationError(
                f"Re-evaluation policy must be one of {', '.join(REEVALUATION_POLICIES)}",
                "evaluation.reevaluation_policy", policy,
            )
        self.settings.evaluation["reevaluation_policy"] = policy
        log.info(f"Re-evaluation policy set to {policy}")

    def reset_to_defaults(self) -> None:
        """Reset all settings to default values."""
        self.settings = Settings()
        log.info("Configuration reset to defaults")

    def get_config_summary(self) -> str:
        """
        Get a summary of current configuration.

        Returns:
            Formatted configuration summary
        """
        summary = []
        summary.append("=== AssignScore Configuration Summary ===")
        summary.append(f"Config file: {self.config_file}")

        for section in self.SECTIONS:
            summary.append("")
            summary.append(f"{section.capitalize()}:")
            for key, value in getattr(self.settings, section).items():
                if key == "rest_key" and value:
                    value = "***"
                summary.append(f"  {key}: {value}")

        return "\n".join(summary)

    def validate_configuration(self) -> bool:
        """
        Validate current configuration.

        Returns:
            True if configuration is valid
        """
        for section in self.SECTIONS:
            if not isinstance(getattr(self.settings, section), dict):
                return False

        if self.reevaluation_policy not in REEVALUATION_POLICIES:
            return False

        if str(self.settings.store.get("backend", "")).lower() not in STORE_BACKENDS:
            return False

        positive_ints = [
            self.settings.evaluation.get("max_workers"),
            self.settings.evaluation.get("timeout_seconds"),
            self.settings.store.get("timeout_seconds"),
            self.settings.grading.get("default_max_score"),
        ]
        for value in positive_ints:
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                return False

        decimals = self.settings.similarity.get("risk_decimals")
        if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
            return False

        return True
