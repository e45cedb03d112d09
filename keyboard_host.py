"""
Keyboard Host - drives a game client through its action hotkeys.

SRP: This class only translates Sequencer commands into key presses and
answers state queries from what it can infer. It doesn't know about the
melody rules, hotkeys, or logging (Dependency Inversion Principle).

The game state is not observable from outside the client, so the host
assumes the character is in the world and standing, treats every slot with
a bound key as populated, and estimates the casting indicator as visible for
``cast_duration_ms`` after each key press.
"""

from __future__ import annotations

import sys
import time
from typing import Callable, Optional

from melody.host import ActionDefinition, EntityInfo, HostAdapter, HostError, Severity, Stance
from models import KeyboardHostSettings


def send_key(key: str) -> None:
    """Press and release ``key`` using the best available backend."""
    if sys.platform.startswith("win"):
        try:
            from pywinauto.keyboard import send_keys as pw_send_keys  # type: ignore
            pw_send_keys(_pywinauto_token(key), pause=0.02)
            return
        except Exception:  # pragma: no cover - Windows only
            pass

    try:
        from pynput.keyboard import Controller as KeyboardController, Key as KeyModule  # type: ignore
        controller = KeyboardController()
        mapped = getattr(KeyModule, key.lower(), None) if len(key) > 1 else key
        if mapped is not None:
            controller.press(mapped)
            controller.release(mapped)
            return
    except Exception:  # pragma: no cover - environment dependent
        pass

    try:
        import pyautogui  # local import to avoid hard dep at import time
        pyautogui.press(key)
    except Exception as e:  # pragma: no cover
        raise HostError(f"Failed to press '{key}': {e}")


def _pywinauto_token(key: str) -> str:
    if len(key) == 1:
        return key
    return "{" + key.upper() + "}"


class KeyboardHost(HostAdapter):
    """Host adapter for a client that is only reachable through the keyboard."""

    ENTITY = "self"

    def __init__(
        self,
        settings: KeyboardHostSettings,
        key_sender: Optional[Callable[[str], None]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._settings = settings
        self._send = key_sender or send_key
        self._clock = clock or time.monotonic
        self._cast_ends_at: Optional[int] = None
        self._notify_callback: Optional[Callable[[str, Severity], None]] = None

    def register_notify_callback(self, callback: Callable[[str, Severity], None]) -> None:
        self._notify_callback = callback

    def is_world_active(self) -> bool:
        return True

    def get_controlled_entity(self) -> Optional[str]:
        return self.ENTITY

    def get_entity_info(self, handle) -> Optional[EntityInfo]:
        if handle != self.ENTITY:
            return None
        return EntityInfo(standing_state=Stance.STAND, class_name=self._settings.class_name)

    def get_loadout_slot(self, index: int) -> Optional[int]:
        keys = self._settings.slot_keys
        if 0 <= index < len(keys) and keys[index]:
            return index
        return None

    def get_action_definition(self, action_id) -> ActionDefinition:
        return ActionDefinition(requires_single_target=action_id in self._settings.targeted_slots)

    def has_target_selected(self) -> bool:
        return self._settings.assume_target_selected

    def is_cast_window_visible(self) -> Optional[bool]:
        if self._cast_ends_at is None:
            return False
        return self.now() < self._cast_ends_at

    def perform(self, slot_index: int) -> None:
        key = self._settings.slot_keys[slot_index]
        self._send(key)
        self._cast_ends_at = self.now() + self._settings.cast_duration_ms

    def abort_current_action(self) -> None:
        if self._settings.abort_key:
            self._send(self._settings.abort_key)
        self._cast_ends_at = None

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        if self._notify_callback:
            self._notify_callback(message, severity)

    def now(self) -> int:
        return int(self._clock() * 1000)
