"""
Sequencer: cycles a bounded list of action slots on behalf of one entity.

The host calls ``tick()`` on every polling cycle and ``on_stop_notified()``
whenever it halts an in-flight action. Both run on the host's control thread;
nothing here blocks or keeps its own timer.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from .config import MelodyConfig
from .host import EntityInfo, HostAdapter, HostError, Severity, Stance


class Sequencer:
    def __init__(self, host: HostAdapter, config: Optional[MelodyConfig] = None):
        self._host = host
        self._config = config or MelodyConfig()
        self._actions: List[int] = []
        self._current_index = -1
        self._retry_count = 0
        self._cast_window_last_visible_at: Optional[int] = None
        self._action_started_at: Optional[int] = None
        self._aborting = False
        self._on_log: Optional[Callable[[str], None]] = None

    def on_log(self, cb: Callable[[str], None]) -> None:
        self._on_log = cb

    @property
    def config(self) -> MelodyConfig:
        return self._config

    @property
    def actions(self) -> Tuple[int, ...]:
        return tuple(self._actions)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def retry_count(self) -> int:
        return self._retry_count

    def is_active(self) -> bool:
        return bool(self._actions)

    def current_slot(self) -> Optional[int]:
        """Slot at ``current_index``, or None before the first advancing tick."""
        if 0 <= self._current_index < len(self._actions):
            return self._actions[self._current_index]
        return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, requested: Sequence[int]) -> bool:
        """
        Begin cycling ``requested`` (0-based slot indices).

        A declined start emits exactly one explanation and leaves the current
        state untouched. An empty request ends any active run.

        Returns:
            bool: True if the run was accepted
        """
        host = self._host
        slots = [int(slot) for slot in requested]

        if not host.is_world_active():
            return self._decline("Can not start melody outside of the world.")

        if len(slots) > self._config.max_actions:
            return self._decline(f"A melody can only consist of up to {self._config.max_actions} songs.")

        info = self._entity_info()
        if info is None or info.stunned:
            return self._decline("Can not start melody while stunned.")

        if info.standing_state != Stance.STAND:
            return self._decline("Can only start melody when standing.")

        for slot in slots:
            if slot < 0 or slot >= self._config.slot_count:
                return self._decline(f"Error: Invalid spell gem {slot + 1}")
            if host.get_loadout_slot(slot) is None:
                return self._decline(f"Error: spell gem {slot + 1} is empty")

        if not slots:
            self.end()
            return True

        self._actions = slots
        self._current_index = -1
        self._retry_count = 0
        host.notify("You begin playing a melody.", Severity.INFO)
        self._log(f"Melody started: slots {[slot + 1 for slot in slots]}")
        return True

    def end(self) -> None:
        if not self._actions:
            return
        self._actions = []
        self._current_index = -1
        self._retry_count = 0
        self._host.notify("Your melody has ended.", Severity.FAILURE)
        self._log("Melody ended")

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def tick(self) -> None:
        if not self._actions:
            return

        host = self._host
        info = self._entity_info()
        if info is None:
            self._terminate("entity left the world")
            return
        if info.standing_state == Stance.SIT:
            self._terminate("entity sat down")
            return
        if info.stunned:
            self._terminate("entity stunned")
            return
        if self._retry_count >= self._config.end_limit:
            self._terminate(f"{self._retry_count} failures without a healthy cast")
            return

        now = host.now()
        visible = host.is_cast_window_visible()
        if visible is None or visible:
            self._cast_window_last_visible_at = now
            if self._action_started_at is not None and \
               now - self._action_started_at > self._config.healthy_cast_ms:
                self._retry_count = 0
            return

        last_visible = self._cast_window_last_visible_at
        if last_visible is not None and now - last_visible < self._config.post_cast_cooldown_ms:
            return

        if info.busy or info.standing_state != Stance.STAND:
            return

        if info.casting_marker:
            try:
                self._abort_current_action()
            except HostError as e:
                self._terminate(f"abort failed: {e}")
                return

        self._current_index += 1
        if self._current_index >= len(self._actions) or self._current_index < 0:
            self._current_index = 0

        slot = self._actions[self._current_index]
        action_id = host.get_loadout_slot(slot)
        if action_id is None:
            return  # empty slots are skipped, not counted

        definition = host.get_action_definition(action_id)
        if definition.requires_single_target and not host.has_target_selected():
            host.notify(f"You must first select a target for spell {slot + 1}", Severity.FAILURE)
            # Shares the failure budget so an all-targeted melody still hits the end limit.
            self._retry_count += 1
            return

        try:
            host.perform(slot)
        except HostError as e:
            self._terminate(f"spell gem {slot + 1} could not be performed: {e}")
            return
        self._action_started_at = now

    # ------------------------------------------------------------------
    # Stop notifications
    # ------------------------------------------------------------------

    def on_stop_notified(self, reason: int) -> None:
        if self._aborting:
            return  # echo of our own abort request

        if not self._actions or reason != self._config.retryable_reason:
            self._terminate(f"stop reason {reason}")
            return

        if self._current_index < 0:
            return  # nothing performed yet, so nothing to count or rewind

        self._retry_count += 1
        failed_slot = self._actions[self._current_index]
        if self._retry_count % self._config.rewind_limit:
            self._current_index -= 1
            if self._current_index < 0:  # wraparound
                self._current_index = len(self._actions) - 1
            self._log(f"Retrying spell gem {failed_slot + 1} (failure {self._retry_count})")
        else:
            # Every rewind_limit-th failure leaves the index alone, so the next tick advances.
            self._log(f"Moving past spell gem {failed_slot + 1} after {self._retry_count} failures")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _entity_info(self) -> Optional[EntityInfo]:
        host = self._host
        if not host.is_world_active():
            return None
        handle = host.get_controlled_entity()
        if handle is None:
            return None
        return host.get_entity_info(handle)

    def _abort_current_action(self) -> None:
        self._aborting = True
        try:
            self._host.abort_current_action()
        finally:
            self._aborting = False

    def _decline(self, message: str) -> bool:
        self._host.notify(message, Severity.FAILURE)
        self._log(f"Melody declined: {message}")
        return False

    def _terminate(self, reason: str) -> None:
        if self._actions:
            self._log(f"Terminating melody: {reason}")
        self.end()

    def _log(self, msg: str) -> None:
        if self._on_log:
            try:
                self._on_log(msg)
            except Exception:
                pass
