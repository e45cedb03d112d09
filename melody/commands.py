"""
Chat command handlers: ``/melody`` and ``/stopsong``.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .host import HostAdapter, HostError, Severity
from .sequencer import Sequencer


class MelodyCommands:
    """Translates user commands into Sequencer lifecycle calls."""

    def __init__(self, sequencer: Sequencer, host: HostAdapter):
        self._sequencer = sequencer
        self._host = host
        self._last_melody: List[int] = []

    @property
    def last_melody(self) -> List[int]:
        """0-based slots of the most recently accepted melody."""
        return list(self._last_melody)

    def melody(self, args: Sequence[str]) -> bool:
        """
        Handle ``/melody 1 2 3``.

        Any active melody is always terminated first. Arguments are 1-based
        slot numbers; no arguments just ends the melody.

        Returns:
            bool: True if a new melody was started
        """
        self._sequencer.end()

        config = self._sequencer.config
        if config.required_class is not None and self._class_name() != config.required_class:
            self._host.notify(f"Only {config.required_class.lower()}s can keep a melody.", Severity.FAILURE)
            return False

        if len(args) > config.max_actions:
            self._host.notify(f"A melody can only consist of up to {config.max_actions} songs.", Severity.FAILURE)
            return False

        slots: List[int] = []
        for raw in args:
            try:
                slots.append(int(str(raw).strip()) - 1)
            except ValueError:
                self._host.notify("Melody parsing error: Usage example: /melody 1 2 3 4", Severity.FAILURE)
                return False

        if not self._sequencer.start(slots):
            return False
        if slots:
            self._last_melody = slots
        return bool(slots)

    def replay(self) -> bool:
        """Restart the last accepted melody."""
        if not self._last_melody:
            return False
        return self.melody([str(slot + 1) for slot in self._last_melody])

    def stopsong(self) -> None:
        """Abort the active action immediately and end the melody."""
        try:
            self._host.abort_current_action()
        except HostError as e:
            self._host.notify(f"Could not stop the current song: {e}", Severity.FAILURE)
        self._sequencer.end()

    def on_zone(self) -> None:
        self._sequencer.end()

    def _class_name(self) -> Optional[str]:
        if not self._host.is_world_active():
            return None
        handle = self._host.get_controlled_entity()
        if handle is None:
            return None
        info = self._host.get_entity_info(handle)
        return info.class_name if info else None
