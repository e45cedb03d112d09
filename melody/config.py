"""
Melody configuration: timing constants and limits for the sequencer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


RETRYABLE_INTERRUPTION = 3  # Stop reason shared by missed notes and similar recoverable failures.


@dataclass
class MelodyConfig:
    """
    Limits and timings used by the Sequencer.

    The defaults are tuned values; the retry behavior depends on them exactly.
    """
    max_actions: int = 5
    slot_count: int = 8
    rewind_limit: int = 8  # Every 8th consecutive failure advances instead of rewinding.
    end_limit: int = 15  # Failures without a healthy cast before the run ends.
    healthy_cast_ms: int = 1000
    post_cast_cooldown_ms: int = 150
    retryable_reason: int = RETRYABLE_INTERRUPTION
    required_class: Optional[str] = "Bard"

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.max_actions < 1:
            raise ValueError("A melody must allow at least one action")

        if self.slot_count < 1:
            raise ValueError("Slot count must be positive")

        if self.rewind_limit < 1:
            raise ValueError("Rewind limit must be positive")

        if self.end_limit < 1:
            raise ValueError("End limit must be positive")

        if self.healthy_cast_ms < 0 or self.post_cast_cooldown_ms < 0:
            raise ValueError("Timings cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_actions": self.max_actions,
            "slot_count": self.slot_count,
            "rewind_limit": self.rewind_limit,
            "end_limit": self.end_limit,
            "healthy_cast_ms": self.healthy_cast_ms,
            "post_cast_cooldown_ms": self.post_cast_cooldown_ms,
            "retryable_reason": self.retryable_reason,
            "required_class": self.required_class,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "MelodyConfig":
        defaults = MelodyConfig()
        required_raw = data.get("required_class", defaults.required_class)

        return MelodyConfig(
            max_actions=int(data.get("max_actions", defaults.max_actions)),
            slot_count=int(data.get("slot_count", defaults.slot_count)),
            rewind_limit=int(data.get("rewind_limit", defaults.rewind_limit)),
            end_limit=int(data.get("end_limit", defaults.end_limit)),
            healthy_cast_ms=int(data.get("healthy_cast_ms", defaults.healthy_cast_ms)),
            post_cast_cooldown_ms=int(data.get("post_cast_cooldown_ms", defaults.post_cast_cooldown_ms)),
            retryable_reason=int(data.get("retryable_reason", defaults.retryable_reason)),
            required_class=str(required_raw) if required_raw not in (None, "") else None,
        )
