"""
Melody package: automated cycling of a short list of action slots.

Key parts
---------
- host:      Abstract host adapter plus the records it returns
- config:    Limits and timings (rewind/end limits, debounce windows)
- sequencer: The melody state machine (start, end, tick, stop notifications)
- commands:  /melody and /stopsong handlers
- driver:    Worker thread that gives the sequencer a single control thread
"""

from .config import MelodyConfig, RETRYABLE_INTERRUPTION
from .host import ActionDefinition, EntityInfo, HostAdapter, HostError, Severity, Stance
from .sequencer import Sequencer
from .commands import MelodyCommands
from .driver import MelodyDriver

__all__ = [
    "ActionDefinition",
    "EntityInfo",
    "HostAdapter",
    "HostError",
    "MelodyCommands",
    "MelodyConfig",
    "MelodyDriver",
    "RETRYABLE_INTERRUPTION",
    "Sequencer",
    "Severity",
    "Stance",
]
