# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Configuration management for cuetrack.
Handles loading and saving settings from a YAML config file.
"""

import logging
from pathlib import Path
from typing import Any, Literal, TypedDict

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME: str = ".cuetrack.yaml"

ListeningModeName = Literal["classic", "silence_paused", "word_tracking"]


class AlignmentSettings(TypedDict):
    """Type definition for alignment tuning settings."""
    char_lookahead: int
    word_lookahead: int
    max_retries: int
    retry_delay_step: float
    max_retry_delay: float
    restart_delay: float


class RecognitionSettings(TypedDict):
    """Type definition for speech recognition settings."""
    locale: str
    listening_mode: ListeningModeName


class ThreadingSettings(TypedDict):
    """Type definition for the threaded session settings."""
    max_queue_size: int


class Config(TypedDict):
    """Type definition for the complete configuration."""
    alignment: AlignmentSettings
    recognition: RecognitionSettings
    threading: ThreadingSettings


# Default configuration values
DEFAULT_CONFIG: Config = {
    "alignment": {
        # Characters / words to look ahead when resynchronizing
        "char_lookahead": 3,
        "word_lookahead": 3,
        # Recognition restarts before giving up
        "max_retries": 10,
        # Backoff is min(retry * step, max) seconds
        "retry_delay_step": 0.5,
        "max_retry_delay": 1.5,
        # Settle time before a fresh pass after a jump
        "restart_delay": 0.5,
    },

    "recognition": {
        "locale": "en-US",
        "listening_mode": "word_tracking",
    },

    "threading": {
        "max_queue_size": 10,
    },
}


def get_config_path() -> Path:
    """Get the path to the config file in the current working directory."""
    return Path.cwd() / CONFIG_FILENAME


def _deep_merge(base, override):
    """
    Deep merge two dictionaries, with override taking precedence.
    Returns a new dictionary without modifying the originals.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        elif isinstance(value, dict):
            result[key] = _deep_merge({}, value)
        else:
            result[key] = value
    return result


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file, merged with defaults.

    Args:
        config_path: Optional path to config file. If None, uses default location.

    Returns:
        Configuration dictionary with all values (defaults + overrides from file).
    """
    if config_path is None:
        config_path = get_config_path()

    # Start with defaults
    config: dict[str, Any] = _deep_merge({}, DEFAULT_CONFIG)

    if config_path.exists():
        try:
            with open(config_path, encoding='utf-8') as f:
                file_config: dict[str, Any] | None = yaml.safe_load(f)
                if isinstance(file_config, dict):
                    config = _deep_merge(config, file_config)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not load config from %s: %s", config_path, e)

    return config  # type: ignore[return-value]


def save_config(config: Config, config_path: Path | None = None) -> bool:
    """
    Save configuration to file.

    Returns:
        True if save was successful, False otherwise.
    """
    if config_path is None:
        config_path = get_config_path()

    try:
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(dict(config), f, default_flow_style=False, sort_keys=False)
        return True
    except (OSError, yaml.YAMLError) as e:
        logger.error("Error saving config to %s: %s", config_path, e)
        return False


def get_alignment_settings(config: Config) -> AlignmentSettings:
    """Extract alignment settings from config."""
    return _deep_merge(DEFAULT_CONFIG["alignment"],
                       config.get("alignment") or {})  # type: ignore[return-value]


def get_recognition_settings(config: Config) -> RecognitionSettings:
    """Extract recognition settings from config."""
    return _deep_merge(DEFAULT_CONFIG["recognition"],
                       config.get("recognition") or {})  # type: ignore[return-value]


def get_threading_settings(config: Config) -> ThreadingSettings:
    """Extract threaded session settings from config."""
    return _deep_merge(DEFAULT_CONFIG["threading"],
                       config.get("threading") or {})  # type: ignore[return-value]
