"""
Per-item bookkeeping for a dispatched batch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .track import TrackDescriptor


class ItemState(Enum):
    """Lifecycle of one dispatched track."""

    SCHEDULED = "scheduled"
    LOOKING_UP = "looking_up"
    ENQUEUED = "enqueued"  # Terminal
    FAILED = "failed"  # Terminal


_TRANSITIONS = {
    ItemState.SCHEDULED: {ItemState.LOOKING_UP, ItemState.FAILED},
    ItemState.LOOKING_UP: {ItemState.ENQUEUED, ItemState.FAILED},
    ItemState.ENQUEUED: set(),
    ItemState.FAILED: set(),
}


@dataclass
class DispatchItem:
    """Tracks the state of a single track within a dispatched batch."""

    index: int
    track: TrackDescriptor
    delay: float
    state: ItemState = ItemState.SCHEDULED
    url: Optional[str] = None
    error: Optional[str] = field(default=None, repr=False)

    @property
    def done(self) -> bool:
        return not _TRANSITIONS[self.state]

    def advance(self, new_state: ItemState) -> None:
        """Moves the item forward. Transitions back or out of a terminal state raise."""
        if new_state not in _TRANSITIONS[self.state]:
            raise ValueError(
                f"Invalid transition for item {self.index}: "
                f"{self.state.value} -> {new_state.value}"
            )
        self.state = new_state
