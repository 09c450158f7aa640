# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Tests for configuration management.
"""

import tempfile
from pathlib import Path

import yaml

from cuetrack.config import (
    DEFAULT_CONFIG,
    get_alignment_settings,
    get_recognition_settings,
    get_threading_settings,
    load_config,
    save_config,
)
from cuetrack.session import ListeningMode, SessionConfig


def test_default_alignment_values():
    """Defaults match the documented tuning."""
    alignment = DEFAULT_CONFIG["alignment"]
    assert alignment["char_lookahead"] == 3
    assert alignment["word_lookahead"] == 3
    assert alignment["max_retries"] == 10
    assert alignment["retry_delay_step"] == 0.5
    assert alignment["max_retry_delay"] == 1.5


def test_load_config_missing_file_returns_defaults():
    """No config file means pure defaults."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = load_config(Path(tmpdir) / ".cuetrack.yaml")
        assert config == DEFAULT_CONFIG


def test_load_config_merges_partial_sections():
    """Values in the file override defaults key by key."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / ".cuetrack.yaml"
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump({"alignment": {"max_retries": 3},
                       "recognition": {"locale": "en-GB"}}, f)

        config = load_config(config_path)

        assert config["alignment"]["max_retries"] == 3
        assert config["alignment"]["word_lookahead"] == 3
        assert config["recognition"]["locale"] == "en-GB"
        assert config["recognition"]["listening_mode"] == "word_tracking"
        # Defaults themselves are untouched
        assert DEFAULT_CONFIG["alignment"]["max_retries"] == 10


def test_load_config_invalid_yaml_falls_back_to_defaults():
    """A broken file is reported and ignored."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / ".cuetrack.yaml"
        config_path.write_text("alignment: [unclosed", encoding='utf-8')

        config = load_config(config_path)

        assert config == DEFAULT_CONFIG


def test_load_config_non_mapping_ignored():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / ".cuetrack.yaml"
        config_path.write_text("- just\n- a list\n", encoding='utf-8')
        assert load_config(config_path) == DEFAULT_CONFIG


def test_save_and_reload():
    """Saved config loads back identically."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / ".cuetrack.yaml"
        config = load_config(config_path)
        config["threading"]["max_queue_size"] = 25

        assert save_config(config, config_path)
        assert load_config(config_path)["threading"]["max_queue_size"] == 25


def test_save_config_unwritable_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "missing" / ".cuetrack.yaml"
        assert not save_config(DEFAULT_CONFIG, config_path)


def test_section_getters_fill_missing_keys():
    config = {"alignment": {"char_lookahead": 5}, "recognition": None}
    assert get_alignment_settings(config)["char_lookahead"] == 5
    assert get_alignment_settings(config)["max_retries"] == 10
    assert get_recognition_settings(config)["locale"] == "en-US"
    assert get_threading_settings(config)["max_queue_size"] == 10


def test_session_config_from_settings():
    """YAML sections convert into a SessionConfig."""
    config = {
        "alignment": {"max_retries": 4, "restart_delay": 0.25},
        "recognition": {"listening_mode": "classic"},
    }
    session_config = SessionConfig.from_settings(
        get_alignment_settings(config), get_recognition_settings(config))

    assert session_config.max_retries == 4
    assert session_config.restart_delay == 0.25
    assert session_config.word_lookahead == 3
    assert session_config.listening_mode == ListeningMode.CLASSIC
    assert session_config.locale == "en-US"
