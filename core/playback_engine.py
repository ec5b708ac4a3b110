"""Playback engine: transport state, position tracking and track-end detection.

The engine owns the audio output. Position is advanced by the event loop's
wall-clock ticks rather than by the audio subsystem's clock, so the redraw
cadence stays independent from audio callback timing. All engine fields are
guarded by one lock and read back as a single Progress tuple.
"""

import threading
from enum import Enum
from typing import NamedTuple, Optional

from core.audio_player import AudioOutput
from core.events import TrackEnded
from core.exceptions import PlayerError
from core.logging import get_logger
from core.metadata import TrackDescriptor

logger = get_logger(__name__)


DEFAULT_SEEK_STEP = 5


class PlaybackState(Enum):
    """State machine for playback operations."""

    STOPPED = "stopped"  # No track loaded
    PAUSED = "paused"  # Track loaded but paused
    PLAYING = "playing"  # Track is playing


class Progress(NamedTuple):
    """Consistent view of the engine for one read."""

    position: float
    duration: float
    state: PlaybackState


class PlaybackEngine:
    """Drives an AudioOutput through the Stopped/Paused/Playing state machine."""

    def __init__(self, output: AudioOutput, seek_step: int = DEFAULT_SEEK_STEP):
        self._output = output
        self._lock = threading.Lock()
        self._track: Optional[TrackDescriptor] = None
        self._state = PlaybackState.STOPPED
        self._position: float = 0.0
        self._duration: float = 0.0
        self._ended = False
        self.seek_step = seek_step

    @property
    def track(self) -> Optional[TrackDescriptor]:
        return self._track

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def seek_step(self) -> int:
        return self._seek_step

    @seek_step.setter
    def seek_step(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"seek_step must be positive, got {value}")
        self._seek_step = value

    def load(self, track: TrackDescriptor) -> None:
        """
        Open a track, paused at position 0.

        Args:
            track: Track to load

        Raises:
            DecodeError: Unsupported or corrupt file (engine is left stopped)
            OutputDeviceError: The sink could not be opened (engine is left stopped)
        """
        with self._lock:
            self._reset()
            try:
                stream_duration = self._output.open(track.file_path)
            except PlayerError:
                logger.warning("Failed to load track: %s", track.file_path)
                raise

            self._track = track
            self._duration = track.duration or stream_duration or 0.0
            self._state = PlaybackState.PAUSED
            logger.info("Loaded %s (%.1fs)", track.file_path, self._duration)

    def play(self) -> None:
        """Start or resume playback. No-op without a track or when playing."""
        with self._lock:
            self._play()

    def pause(self) -> None:
        """Pause playback. No-op unless playing."""
        with self._lock:
            self._pause()

    def toggle(self) -> None:
        """Switch between playing and paused in one locked step."""
        with self._lock:
            if self._state == PlaybackState.PLAYING:
                self._pause()
            else:
                self._play()

    def seek(self, direction: int, step: Optional[int] = None) -> Optional[TrackEnded]:
        """
        Move the position by ``step * direction`` seconds.

        The result is clamped to [0, duration]. Landing on the duration ends
        the track the same way natural playback does. Forward seeks are
        ignored while the duration is unknown.

        Args:
            direction: -1 to go back, 1 to go forward
            step: Seconds per step (defaults to seek_step)

        Returns:
            TrackEnded if the seek reached the end of the track
        """
        with self._lock:
            if self._state == PlaybackState.STOPPED or self._ended:
                return None
            self._refresh_duration()
            if self._duration <= 0 and direction > 0:
                return None

            delta = (step if step is not None else self._seek_step) * direction
            position = max(0.0, self._position + delta)
            if self._duration > 0:
                position = min(position, self._duration)
                if position >= self._duration:
                    self._position = self._duration
                    return self._end()

            self._output.seek(position)
            self._position = position
            return None

    def tick(self, elapsed: float) -> Optional[TrackEnded]:
        """
        Advance the position while playing.

        Args:
            elapsed: Wall-clock seconds since the previous tick

        Returns:
            TrackEnded when the end of the track was reached

        Raises:
            PlayerError: The stream failed during playback
        """
        with self._lock:
            if self._state != PlaybackState.PLAYING or self._ended:
                return None

            reached_eos = self._output.poll()
            self._refresh_duration()

            self._position += max(0.0, elapsed)
            if self._duration > 0:
                self._position = min(self._position, self._duration)

            if reached_eos or (self._duration > 0 and self._position >= self._duration):
                if self._duration > 0:
                    self._position = self._duration
                return self._end()
            return None

    def current_progress(self) -> Progress:
        """
        Read position, duration and state in one consistent step.

        A duration of 0 means it is not known yet; otherwise the position
        never exceeds it.
        """
        with self._lock:
            position = self._position
            if self._duration > 0:
                position = min(position, self._duration)
            return Progress(position, self._duration, self._state)

    def stop(self) -> None:
        """Release the stream and return to Stopped at position 0."""
        with self._lock:
            self._reset()

    def shutdown(self) -> None:
        """Stop and close the output device."""
        with self._lock:
            self._reset()
            self._output.shutdown()

    def _refresh_duration(self) -> None:
        """Take the stream duration once it is known. Caller holds the lock."""
        if self._duration <= 0:
            self._duration = self._output.duration() or 0.0
            if self._duration > 0:
                self._position = min(self._position, self._duration)

    def _play(self) -> None:
        """Caller holds the lock."""
        if self._state != PlaybackState.PAUSED or self._ended:
            return
        self._output.play()
        self._state = PlaybackState.PLAYING

    def _pause(self) -> None:
        """Caller holds the lock."""
        if self._state != PlaybackState.PLAYING:
            return
        self._output.pause()
        self._state = PlaybackState.PAUSED

    def _end(self) -> TrackEnded:
        """Mark the loaded track finished. Caller holds the lock."""
        self._ended = True
        if self._state == PlaybackState.PLAYING:
            self._output.pause()
            self._state = PlaybackState.PAUSED
        logger.debug("Track ended: %s", self._track.file_path)
        return TrackEnded(self._track)

    def _reset(self) -> None:
        """Caller holds the lock."""
        if self._track is not None:
            self._output.close()
        self._track = None
        self._state = PlaybackState.STOPPED
        self._position = 0.0
        self._duration = 0.0
        self._ended = False
