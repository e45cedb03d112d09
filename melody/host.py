"""
Host adapter interface: everything the Sequencer needs from the game client.

The Sequencer never reaches into global state. A host implementation is passed
to it explicitly and answers point-in-time queries plus two commands
(perform and abort). Completion or interruption of a performed action comes
back later through ``Sequencer.on_stop_notified``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class HostError(Exception):
    pass


class Stance(Enum):
    """Entity stances the Sequencer distinguishes."""
    STAND = "stand"
    SIT = "sit"
    DUCK = "duck"
    BIND = "bind"  # looting, binding wounds
    OTHER = "other"


class Severity(Enum):
    """Feedback channel colors."""
    INFO = "info"
    FAILURE = "failure"


@dataclass(frozen=True)
class EntityInfo:
    """Snapshot of the controlled entity."""
    standing_state: Stance = Stance.STAND
    stunned: bool = False
    casting_marker: bool = False  # performing this engine's class of long-running action
    busy: bool = False  # trading, looting or any other non-transactable condition
    class_name: Optional[str] = None


@dataclass(frozen=True)
class ActionDefinition:
    requires_single_target: bool = False


class HostAdapter(ABC):
    """Capability set consumed by the Sequencer."""

    @abstractmethod
    def is_world_active(self) -> bool: ...

    @abstractmethod
    def get_controlled_entity(self) -> Optional[Any]: ...

    @abstractmethod
    def get_entity_info(self, handle: Any) -> Optional[EntityInfo]: ...

    @abstractmethod
    def get_loadout_slot(self, index: int) -> Optional[Any]:
        """Return the action id in ``index`` or None when the slot is empty."""

    @abstractmethod
    def get_action_definition(self, action_id: Any) -> ActionDefinition: ...

    @abstractmethod
    def has_target_selected(self) -> bool: ...

    @abstractmethod
    def is_cast_window_visible(self) -> Optional[bool]:
        """Visibility of the casting indicator; None when the indicator does not exist."""

    @abstractmethod
    def perform(self, slot_index: int) -> None: ...

    @abstractmethod
    def abort_current_action(self) -> None: ...

    @abstractmethod
    def notify(self, message: str, severity: Severity = Severity.INFO) -> None: ...

    @abstractmethod
    def now(self) -> int:
        """Monotonic clock in milliseconds."""
