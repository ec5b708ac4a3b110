"""Read-only copy of everything the renderer draws in one frame."""

from dataclasses import dataclass
from typing import Optional, Tuple

from core.config import DisplayConfig
from core.metadata import TrackDescriptor
from core.playback_engine import PlaybackEngine, Progress
from core.playlist_manager import PlaylistManager

# Seconds a status message stays visible
STATUS_TTL = 5.0


@dataclass(frozen=True)
class StatusMessage:
    text: str
    level: str  # "info" | "warning" | "error"
    expires_at: float

    def active(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class Snapshot:
    """State of the player at the start of a redraw."""

    tracks: Tuple[TrackDescriptor, ...]
    current_index: Optional[int]
    progress: Progress
    repeat: bool
    display: DisplayConfig
    status: Optional[StatusMessage] = None

    @property
    def current_track(self) -> Optional[TrackDescriptor]:
        if self.current_index is None:
            return None
        return self.tracks[self.current_index]


def build_snapshot(
    playlist: PlaylistManager,
    engine: PlaybackEngine,
    display: DisplayConfig,
    status: Optional[StatusMessage] = None,
    now: Optional[float] = None,
) -> Snapshot:
    """
    Copy playlist and engine state into a Snapshot.

    Expired status messages are dropped when ``now`` is given.
    """
    if status is not None and now is not None and not status.active(now):
        status = None
    return Snapshot(
        tracks=tuple(playlist.visible_tracks()),
        current_index=playlist.current_index,
        progress=engine.current_progress(),
        repeat=playlist.repeat,
        display=display,
        status=status,
    )
