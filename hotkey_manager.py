"""Global melody hotkeys built on top of pynput."""

from __future__ import annotations

from typing import Callable, Dict, Optional

try:
    from pynput import keyboard  # type: ignore
except Exception as _e:  # pragma: no cover - environment dependent
    keyboard = None  # type: ignore


class HotkeyManager:
    """Binds the replay and stop hotkeys to melody commands."""

    _SPECIAL_KEY_ALIASES: Dict[str, str] = {
        "ctrl": "ctrl",
        "control": "ctrl",
        "alt": "alt",
        "option": "alt",
        "shift": "shift",
        "win": "cmd",
        "cmd": "cmd",
        "command": "cmd",
        "super": "cmd",
        "esc": "esc",
        "escape": "esc",
    }

    def __init__(self, start_hotkey: str = "F6", stop_hotkey: str = "F7") -> None:
        self._bindings: Dict[str, str] = {"replay": start_hotkey, "stop": stop_hotkey}
        self._callbacks: Dict[str, Callable[[], None]] = {}
        self._listener: Optional[object] = None
        self._is_registered = False
        self._on_log: Optional[Callable[[str], None]] = None

    def on_log(self, cb: Callable[[str], None]) -> None:
        self._on_log = cb

    def bind_replay(self, callback: Callable[[], None]) -> None:
        self._callbacks["replay"] = callback

    def bind_stop(self, callback: Callable[[], None]) -> None:
        self._callbacks["stop"] = callback

    def hotkey_map(self) -> Dict[str, Callable[[], None]]:
        """pynput hotkey strings mapped to their bound callbacks."""
        mapping: Dict[str, Callable[[], None]] = {}
        for name, callback in self._callbacks.items():
            mapping[self.to_pynput_hotkey(self._bindings[name])] = callback
        return mapping

    def enable_hotkeys(self) -> bool:
        if self._is_registered:
            return True

        try:
            hotkey_map = self.hotkey_map()
        except ValueError as exc:
            self._log(f"Invalid hotkey definition: {exc}")
            return False

        if not hotkey_map:
            return False

        if keyboard is None:
            self._log("pynput/keyboard backend not available; global hotkeys disabled")
            return False
        try:
            self._listener = keyboard.GlobalHotKeys(hotkey_map)
            self._listener.start()
            self._is_registered = True
            return True
        except Exception as exc:  # pragma: no cover - system specific
            self._log(f"Failed to register hotkeys: {exc}")
            self._listener = None
            self._is_registered = False
            return False

    def disable_hotkeys(self) -> None:
        if not self._is_registered:
            return

        if self._listener is not None:
            try:
                self._listener.stop()  # type: ignore[attr-defined]
            except Exception:
                pass
            self._listener = None

        self._is_registered = False

    def get_start_hotkey(self) -> str:
        return self._bindings["replay"]

    def get_stop_hotkey(self) -> str:
        return self._bindings["stop"]

    @classmethod
    def to_pynput_hotkey(cls, hotkey: str) -> str:
        if not hotkey:
            raise ValueError("Empty hotkey string")

        tokens = [token.strip() for token in hotkey.replace("+", " ").split() if token.strip()]
        if not tokens:
            raise ValueError("Hotkey contains no tokens")

        parsed: list[str] = []
        for token in tokens:
            lower_token = token.lower()

            if lower_token in cls._SPECIAL_KEY_ALIASES:
                parsed.append(f"<{cls._SPECIAL_KEY_ALIASES[lower_token]}>")
            elif lower_token.startswith("f") and lower_token[1:].isdigit():
                parsed.append(f"<{lower_token}>")
            else:
                parsed.append(lower_token)

        return "+".join(parsed)

    def _log(self, msg: str) -> None:
        if self._on_log:
            try:
                self._on_log(msg)
            except Exception:
                pass
