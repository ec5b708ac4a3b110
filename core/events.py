"""Events passed between the playlist, the playback engine and the event loop.

Events are plain values. Producers post them to an EventQueue and the event
loop drains the queue synchronously once per iteration, so no component ever
calls back into another one's state.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional, Union

from core.exceptions import PlayerError
from core.metadata import TrackDescriptor


class ChangeReason(Enum):
    """Why the playlist's current track changed."""

    NAVIGATE = "navigate"
    NAVIGATE_BACK = "navigate_back"
    HIDE = "hide"
    TRACK_END = "track_end"
    REPEAT = "repeat"


@dataclass(frozen=True)
class TrackChanged:
    """Posted by the playlist whenever its current entry changes.

    ``track`` is None when the visible playlist became empty.
    """

    track: Optional[TrackDescriptor]
    reason: ChangeReason


@dataclass(frozen=True)
class TrackEnded:
    """Returned by the engine when the loaded track reached its end."""

    track: TrackDescriptor


@dataclass(frozen=True)
class TrackFailed:
    """A track could not be loaded or played."""

    track: TrackDescriptor
    error: PlayerError


Event = Union[TrackChanged, TrackEnded, TrackFailed]


class EventQueue:
    """FIFO of events, drained by the event loop on the control thread."""

    def __init__(self):
        self._events: Deque[Event] = deque()

    def post(self, event: Event) -> None:
        self._events.append(event)

    def drain(self) -> List[Event]:
        """Remove and return all pending events in posting order."""
        events = list(self._events)
        self._events.clear()
        return events

    def has_pending(self, event_type: type) -> bool:
        return any(isinstance(event, event_type) for event in self._events)

    def __len__(self) -> int:
        return len(self._events)
