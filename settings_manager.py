"""Melody settings file: loading with repair, saving, and remembering the last melody."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from models import ApplicationSettings


class SettingsManager:
    """
    Reads and writes ``melody_settings.json``.

    A file that cannot be parsed is moved aside to ``.bak`` and defaults are
    used. A stored last melody that no longer fits the configured limits is
    trimmed on load, so ``--replay`` never hands the sequencer slots it will
    reject.
    """

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._storage_path = storage_path or Path(__file__).resolve().parent / "melody_settings.json"
        self._on_log: Optional[Callable[[str], None]] = None

    def on_log(self, cb: Callable[[str], None]) -> None:
        self._on_log = cb

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    def load(self) -> ApplicationSettings:
        path = self._storage_path
        if not path.exists():
            self._log(f"No settings file at {path}; using defaults")
            return ApplicationSettings()

        try:
            raw_data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw_data, dict):
                raise ValueError("top level is not an object")
            settings = ApplicationSettings.from_dict(raw_data)
        except (OSError, ValueError, TypeError) as exc:
            self._quarantine(path, exc)
            return ApplicationSettings()

        repaired = self.sanitize_melody(settings, settings.last_melody)
        if repaired != settings.last_melody:
            self._log(f"Stored melody {settings.last_melody} trimmed to {repaired}")
            settings.last_melody = repaired
        return settings

    def save(self, settings: ApplicationSettings) -> None:
        path = self._storage_path
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write-then-rename keeps the previous file intact if the write fails.
        staging = path.with_suffix(".tmp")
        staging.write_text(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        staging.replace(path)

    def remember_melody(self, settings: ApplicationSettings, slots: Sequence[int]) -> None:
        """Store ``slots`` as the last melody and persist the settings."""
        settings.last_melody = self.sanitize_melody(settings, slots)
        self.save(settings)

    @staticmethod
    def sanitize_melody(settings: ApplicationSettings, slots: Sequence[int]) -> List[int]:
        """Drop slots outside the loadout and cut the list to the melody length limit."""
        limits = settings.melody
        valid = [int(slot) for slot in slots if 0 <= int(slot) < limits.slot_count]
        return valid[:limits.max_actions]

    def _quarantine(self, path: Path, exc: Exception) -> None:
        backup_path = path.with_suffix(".bak")
        try:
            path.replace(backup_path)
            self._log(f"Unreadable settings ({exc}); moved to {backup_path.name}, using defaults")
        except OSError as move_exc:
            self._log(f"Unreadable settings ({exc}); could not back up: {move_exc}")

    def _log(self, msg: str) -> None:
        if self._on_log:
            try:
                self._on_log(msg)
            except Exception:
                pass
