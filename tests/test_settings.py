from __future__ import annotations

import json
from pathlib import Path

import pytest

from melody.config import MelodyConfig
from models import ApplicationSettings, KeyboardHostSettings
from settings_manager import SettingsManager


def test_defaults_preserve_melody_limits():
    config = MelodyConfig()

    assert config.max_actions == 5
    assert config.rewind_limit == 8
    assert config.end_limit == 15
    assert config.healthy_cast_ms == 1000
    assert config.post_cast_cooldown_ms == 150
    assert config.retryable_reason == 3


@pytest.mark.parametrize(
    "kwargs",
    [{"max_actions": 0}, {"rewind_limit": 0}, {"end_limit": 0}, {"healthy_cast_ms": -1}, {"slot_count": 0}],
)
def test_invalid_melody_config_raises(kwargs):
    with pytest.raises(ValueError):
        MelodyConfig(**kwargs)


def test_invalid_keyboard_settings_raise():
    with pytest.raises(ValueError):
        KeyboardHostSettings(cast_duration_ms=0)
    with pytest.raises(ValueError):
        KeyboardHostSettings(targeted_slots=[-1])


def test_missing_file_returns_defaults(tmp_path: Path):
    manager = SettingsManager(tmp_path / "settings.json")

    settings = manager.load()

    assert settings == ApplicationSettings()


def test_save_and_load_preserves_values(tmp_path: Path):
    manager = SettingsManager(tmp_path / "nested" / "settings.json")
    settings = ApplicationSettings(
        melody=MelodyConfig(required_class=None, end_limit=20),
        keyboard=KeyboardHostSettings(slot_keys=["q", "w", "e"], targeted_slots=[2], cast_duration_ms=2500),
        poll_interval_ms=25,
        stop_hotkey="ctrl+F7",
        last_melody=[0, 2],
    )

    manager.save(settings)
    loaded = manager.load()

    assert loaded == settings
    assert not manager.storage_path.with_suffix(".tmp").exists()


def test_partial_file_fills_in_defaults(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"melody": {"end_limit": 10}, "start_hotkey": "F8"}), encoding="utf-8")

    loaded = SettingsManager(path).load()

    assert loaded.melody.end_limit == 10
    assert loaded.melody.rewind_limit == 8
    assert loaded.start_hotkey == "F8"
    assert loaded.keyboard == KeyboardHostSettings()


def test_corrupt_file_is_backed_up(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    loaded = SettingsManager(path).load()

    assert loaded == ApplicationSettings()
    assert not path.exists()
    assert path.with_suffix(".bak").read_text(encoding="utf-8") == "{not json"


def test_invalid_values_are_treated_as_corrupt(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"melody": {"rewind_limit": 0}}), encoding="utf-8")

    loaded = SettingsManager(path).load()

    assert loaded.melody.rewind_limit == 8
    assert path.with_suffix(".bak").exists()


def test_stored_melody_is_trimmed_to_limits_on_load(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"last_melody": [0, 9, 1, -1, 2, 3, 4, 5]}), encoding="utf-8")
    manager = SettingsManager(path)
    messages: list[str] = []
    manager.on_log(messages.append)

    loaded = manager.load()

    assert loaded.last_melody == [0, 1, 2, 3, 4]
    assert messages == ["Stored melody [0, 9, 1, -1, 2, 3, 4, 5] trimmed to [0, 1, 2, 3, 4]"]


def test_stored_melody_respects_custom_slot_count(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"melody": {"slot_count": 4}, "last_melody": [3, 4]}), encoding="utf-8")

    assert SettingsManager(path).load().last_melody == [3]


def test_remember_melody_persists_sanitized_slots(tmp_path: Path):
    manager = SettingsManager(tmp_path / "settings.json")
    settings = ApplicationSettings()

    manager.remember_melody(settings, [1, 2, 42])

    assert settings.last_melody == [1, 2]
    assert manager.load().last_melody == [1, 2]


def test_load_fallbacks_are_logged(tmp_path: Path):
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)
    messages: list[str] = []
    manager.on_log(messages.append)

    manager.load()
    path.write_text("[1, 2]", encoding="utf-8")
    manager.load()

    assert messages[0].startswith("No settings file at")
    assert "moved to settings.bak" in messages[1]
