"""
Application models for the Melody Loop desktop runner.
Each class follows the Single Responsibility Principle (SRP).
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any

from melody.config import MelodyConfig


DEFAULT_SLOT_KEYS = ["1", "2", "3", "4", "5", "6", "7", "8"]


@dataclass
class KeyboardHostSettings:
    """
    How the desktop host talks to the game client.

    SRP: This class encapsulates key bindings and the timing estimates
    used when the game state cannot be observed directly.
    """
    slot_keys: List[str] = field(default_factory=lambda: list(DEFAULT_SLOT_KEYS))
    abort_key: str = "esc"
    cast_duration_ms: int = 3200
    targeted_slots: List[int] = field(default_factory=list)
    assume_target_selected: bool = True
    class_name: str = "Bard"

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.cast_duration_ms <= 0:
            raise ValueError("Cast duration must be positive")

        if any(slot < 0 for slot in self.targeted_slots):
            raise ValueError("Targeted slots cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the bindings for JSON storage."""
        return {
            "slot_keys": list(self.slot_keys),
            "abort_key": self.abort_key,
            "cast_duration_ms": self.cast_duration_ms,
            "targeted_slots": list(self.targeted_slots),
            "assume_target_selected": self.assume_target_selected,
            "class_name": self.class_name,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "KeyboardHostSettings":
        """Create bindings from a dictionary."""
        keys_raw = data.get("slot_keys", DEFAULT_SLOT_KEYS) or DEFAULT_SLOT_KEYS
        targeted_raw = data.get("targeted_slots", []) or []

        return KeyboardHostSettings(
            slot_keys=[str(key) for key in keys_raw] if isinstance(keys_raw, list) else list(DEFAULT_SLOT_KEYS),
            abort_key=str(data.get("abort_key", "esc") or "esc"),
            cast_duration_ms=int(data.get("cast_duration_ms", 3200) or 3200),
            targeted_slots=[int(slot) for slot in targeted_raw] if isinstance(targeted_raw, list) else [],
            assume_target_selected=bool(data.get("assume_target_selected", True)),
            class_name=str(data.get("class_name", "Bard") or "Bard"),
        )


@dataclass
class ApplicationSettings:
    """Persisted application preferences."""

    melody: MelodyConfig = field(default_factory=MelodyConfig)
    keyboard: KeyboardHostSettings = field(default_factory=KeyboardHostSettings)
    poll_interval_ms: int = 50
    start_hotkey: str = "F6"
    stop_hotkey: str = "F7"
    last_melody: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize settings to primitive types for JSON storage."""
        return {
            "melody": self.melody.to_dict(),
            "keyboard": self.keyboard.to_dict(),
            "poll_interval_ms": self.poll_interval_ms,
            "start_hotkey": self.start_hotkey,
            "stop_hotkey": self.stop_hotkey,
            "last_melody": list(self.last_melody),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ApplicationSettings":
        """Create settings instance from JSON dictionary."""
        melody_data = data.get("melody") or {}
        keyboard_data = data.get("keyboard") or {}
        last_raw = data.get("last_melody", []) or []

        return ApplicationSettings(
            melody=MelodyConfig.from_dict(melody_data) if isinstance(melody_data, dict) else MelodyConfig(),
            keyboard=(
                KeyboardHostSettings.from_dict(keyboard_data)
                if isinstance(keyboard_data, dict)
                else KeyboardHostSettings()
            ),
            poll_interval_ms=int(data.get("poll_interval_ms", 50) or 50),
            start_hotkey=str(data.get("start_hotkey", "F6")),
            stop_hotkey=str(data.get("stop_hotkey", "F7")),
            last_melody=[int(slot) for slot in last_raw] if isinstance(last_raw, list) else [],
        )
