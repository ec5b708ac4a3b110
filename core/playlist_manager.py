"""Playlist management: the mutable ordered view over the track catalog."""

from typing import List, Optional, Sequence, Set

from core.events import ChangeReason, EventQueue, TrackChanged
from core.exceptions import PlaylistError
from core.logging import get_logger
from core.metadata import TrackDescriptor

logger = get_logger(__name__)


class PlaylistManager:
    """
    Ordered view over the catalog with a current entry, a hidden set and a
    repeat flag.

    Hidden entries are identified by catalog position and stay hidden for
    the lifetime of the playlist. Whenever the current entry changes, a
    TrackChanged event is posted to the event queue.
    """

    def __init__(self, tracks: Sequence[TrackDescriptor], events: Optional[EventQueue] = None) -> None:
        """
        Initialize playlist manager.

        Args:
            tracks: Catalog tracks in playlist order
            events: Queue receiving TrackChanged events
        """
        self._tracks: List[TrackDescriptor] = list(tracks)
        self._hidden: Set[int] = set()
        self._current: Optional[int] = 0 if self._tracks else None
        self._repeat: bool = False
        self._events = events if events is not None else EventQueue()

    @property
    def events(self) -> EventQueue:
        return self._events

    @property
    def repeat(self) -> bool:
        return self._repeat

    @property
    def hidden(self) -> frozenset:
        """Catalog positions of hidden tracks."""
        return frozenset(self._hidden)

    @property
    def current_index(self) -> Optional[int]:
        """Index of the current entry within the visible tracks, or None."""
        if self._current is None:
            return None
        return self._visible_positions().index(self._current)

    def current(self) -> Optional[TrackDescriptor]:
        """Get the current track."""
        if self._current is None:
            return None
        return self._tracks[self._current]

    def visible_tracks(self) -> List[TrackDescriptor]:
        """Tracks that are not hidden, in catalog order."""
        return [self._tracks[i] for i in self._visible_positions()]

    def visible_count(self) -> int:
        return len(self._tracks) - len(self._hidden)

    def has_next(self) -> bool:
        """Whether a visible entry follows the current one (no wrapping)."""
        return self._following(wrap=False) is not None

    def next(self) -> bool:
        """
        Move to the next visible track, wrapping at the end.

        Returns:
            True if the current track changed
        """
        return self._move(self._following(wrap=True), ChangeReason.NAVIGATE)

    def previous(self) -> bool:
        """
        Move to the previous visible track, wrapping at the start.

        Returns:
            True if the current track changed
        """
        return self._move(self._preceding(), ChangeReason.NAVIGATE_BACK)

    def skip(self, wrap: bool, backward: bool = False) -> bool:
        """
        Move past the current track after it failed to load.

        Posts no event; the caller is already loading.

        Args:
            wrap: Continue from the first entry when at the end
            backward: Move to the preceding entry instead (always wraps)

        Returns:
            True if another track is now current
        """
        target = self._preceding() if backward else self._following(wrap=wrap)
        if target is None:
            return False
        self._current = target
        self._check_invariant()
        return True

    def hide_current(self) -> bool:
        """
        Hide the current track and select the following visible one.

        When nothing remains visible the current entry becomes None.

        Returns:
            True if a track was hidden
        """
        if self._current is None:
            return False

        hidden = self._current
        target = self._following(wrap=True)
        self._hidden.add(hidden)
        logger.info("Hidden track: %s", self._tracks[hidden].file_path)

        if target is None:
            self._current = None
            self._check_invariant()
            self._events.post(TrackChanged(None, ChangeReason.HIDE))
            return True

        self._move(target, ChangeReason.HIDE)
        return True

    def toggle_repeat(self) -> bool:
        """Flip the repeat flag and return the new value."""
        self._repeat = not self._repeat
        logger.debug("Repeat %s", "on" if self._repeat else "off")
        return self._repeat

    def advance_after_end(self) -> Optional[TrackDescriptor]:
        """
        Select the track to play after the current one finished.

        With repeat on the same track is selected again; otherwise the
        following visible track, without wrapping.

        Returns:
            The selected track, or None when playback should stop
        """
        if self._current is None:
            return None
        if self._repeat:
            self._events.post(TrackChanged(self.current(), ChangeReason.REPEAT))
            return self.current()

        target = self._following(wrap=False)
        if target is None:
            return None
        self._move(target, ChangeReason.TRACK_END)
        return self.current()

    def _visible_positions(self) -> List[int]:
        return [i for i in range(len(self._tracks)) if i not in self._hidden]

    def _following(self, wrap: bool) -> Optional[int]:
        if self._current is None:
            return None
        total = len(self._tracks)
        for offset in range(1, total):
            position = self._current + offset
            if position >= total:
                if not wrap:
                    return None
                position -= total
            if position not in self._hidden:
                return position
        return None

    def _preceding(self) -> Optional[int]:
        if self._current is None:
            return None
        total = len(self._tracks)
        for offset in range(1, total):
            position = (self._current - offset) % total
            if position not in self._hidden:
                return position
        return None

    def _move(self, target: Optional[int], reason: ChangeReason) -> bool:
        if target is None or target == self._current:
            return False
        self._current = target
        self._check_invariant()
        self._events.post(TrackChanged(self.current(), reason))
        return True

    def _check_invariant(self) -> None:
        """Current entry is None only when nothing is visible, and never hidden."""
        if self._current is None:
            if self.visible_count() > 0:
                raise PlaylistError("No current track while tracks are visible")
            return
        if not 0 <= self._current < len(self._tracks):
            raise PlaylistError(f"Current position out of range: {self._current}")
        if self._current in self._hidden:
            raise PlaylistError(f"Current track is hidden: {self._tracks[self._current].file_path}")
