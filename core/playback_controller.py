"""Playback controller: the event loop tying input, playlist, engine and renderer together.

One iteration polls a key, routes the resolved action, advances the engine by
the wall-clock delta, loads whatever track the playlist switched to and hands
a snapshot to the renderer. Everything runs on the calling thread; the only
wait is the bounded key poll.
"""

import time
from typing import Callable, List, Optional

from core.config import Config, Settings
from core.events import ChangeReason, TrackChanged, TrackEnded, TrackFailed
from core.exceptions import NoTracksFound, OutputDeviceError, PlayerError
from core.input_dispatcher import Action, InputDispatcher
from core.logging import get_logger
from core.playback_engine import PlaybackEngine, PlaybackState
from core.playlist_manager import PlaylistManager
from core.snapshot import STATUS_TTL, Snapshot, StatusMessage, build_snapshot

logger = get_logger(__name__)


# Key poll timeout and nominal redraw period (seconds)
TICK_INTERVAL = 0.1

# Changes that start playback regardless of the previous state
AUTOPLAY_REASONS = (ChangeReason.TRACK_END, ChangeReason.REPEAT)

# Changes whose failure skipping wraps around the playlist
WRAPPING_REASONS = (ChangeReason.NAVIGATE, ChangeReason.NAVIGATE_BACK, ChangeReason.HIDE)


class PlaybackController:
    """Runs the player: routes actions, handles track ends and track changes."""

    def __init__(
        self,
        playlist: PlaylistManager,
        engine: PlaybackEngine,
        config: Config,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._playlist = playlist
        self._engine = engine
        self._config = config
        self._clock = clock

        settings = settings if settings is not None else config.current
        self._settings = settings
        self._dispatcher = InputDispatcher(settings.keybindings)
        self._engine.seek_step = settings.seek_step

        self._status: Optional[StatusMessage] = None
        self._failures: List[TrackFailed] = []
        self._device_failures = 0
        self._pending_end: Optional[TrackEnded] = None
        self._last_tick: Optional[float] = None
        self._closed = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def dispatcher(self) -> InputDispatcher:
        return self._dispatcher

    @property
    def failures(self) -> List[TrackFailed]:
        """Tracks that failed to load or play, oldest first."""
        return list(self._failures)

    @property
    def status(self) -> Optional[StatusMessage]:
        return self._status

    def start(self) -> None:
        """
        Load the first playable track and start it when autoplay is on.

        Raises:
            NoTracksFound: No visible track could be loaded
            OutputDeviceError: The audio device is unavailable
        """
        self._playlist.events.drain()
        if not self._load_current(play=self._settings.autoplay, wrap=False, device_retry=False):
            raise NoTracksFound("No playable tracks")
        self._last_tick = self._clock()

    def run(self, read_key: Callable[[float], Optional[str]], render: Callable[[Snapshot], None]) -> None:
        """
        Loop until the quit action.

        Args:
            read_key: Returns a key identifier, or None after the timeout
            render: Draws one snapshot
        """
        if self._last_tick is None:
            self._last_tick = self._clock()
        render(self.snapshot())
        while self.run_once(read_key(TICK_INTERVAL)):
            render(self.snapshot())

    def run_once(self, key: Optional[str] = None, elapsed: Optional[float] = None) -> bool:
        """
        Run one loop iteration.

        Args:
            key: Key identifier read this iteration, if any
            elapsed: Seconds to advance the engine (defaults to the clock delta)

        Returns:
            False once the player quit
        """
        action = self._dispatcher.resolve(key)
        if action == Action.QUIT:
            logger.info("Quit requested")
            self.shutdown()
            return False
        if action is not None:
            self.handle_action(action)

        now = self._clock()
        if elapsed is None:
            elapsed = now - self._last_tick if self._last_tick is not None else 0.0
        self._last_tick = now

        self._advance(elapsed)
        self._apply_track_changes()
        return True

    def handle_action(self, action: Action) -> None:
        if action == Action.TOGGLE_PLAYBACK:
            self._toggle_playback()
        elif action == Action.TOGGLE_REPEAT:
            repeat = self._playlist.toggle_repeat()
            self.set_status(f"Repeat {'on' if repeat else 'off'}")
        elif action == Action.SEEK_BACKWARD:
            self._seek(-1)
        elif action == Action.SEEK_FORWARD:
            self._seek(1)
        elif action == Action.PREVIOUS_TRACK:
            self._playlist.previous()
        elif action == Action.NEXT_TRACK:
            self._playlist.next()
        elif action == Action.HIDE_TRACK:
            self._playlist.hide_current()
        elif action == Action.RELOAD_CONFIG:
            self.reload_config()

    def reload_config(self) -> None:
        """Re-read the config file and swap bindings, display and seek step."""
        settings, warning = self._config.reload()
        self._settings = settings
        self._dispatcher.reload(settings.keybindings)
        self._engine.seek_step = settings.seek_step
        if warning:
            self.set_status(warning, "warning")
        else:
            self.set_status("Configuration reloaded")

    def set_status(self, text: str, level: str = "info") -> None:
        self._status = StatusMessage(text, level, self._clock() + STATUS_TTL)

    def snapshot(self) -> Snapshot:
        return build_snapshot(
            self._playlist,
            self._engine,
            self._settings.display,
            status=self._status,
            now=self._clock(),
        )

    def shutdown(self) -> None:
        """Stop playback and release the audio device. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._engine.shutdown()

    def _toggle_playback(self) -> None:
        if self._engine.state == PlaybackState.STOPPED:
            # Playback stopped at the end of the playlist: start the current track again
            if self._playlist.current() is not None:
                self._load_current(play=True, wrap=False)
            return
        try:
            self._engine.toggle()
        except PlayerError as e:
            self._handle_playback_error(e)

    def _seek(self, direction: int) -> None:
        ended = self._engine.seek(direction)
        if ended is not None:
            self._pending_end = ended

    def _advance(self, elapsed: float) -> None:
        """Tick the engine and turn a track end into a playlist transition."""
        ended, self._pending_end = self._pending_end, None

        # The current track is about to be replaced
        if self._playlist.events.has_pending(TrackChanged):
            return

        if ended is None:
            try:
                ended = self._engine.tick(elapsed)
            except PlayerError as e:
                self._handle_playback_error(e)
                return
            if self._engine.state == PlaybackState.PLAYING:
                self._device_failures = 0

        if ended is not None:
            self._handle_track_end(ended)

    def _handle_track_end(self, ended: TrackEnded) -> None:
        logger.debug("Finished %s", ended.track.file_path)
        if self._playlist.advance_after_end() is None:
            logger.info("End of playlist")
            self._engine.stop()

    def _handle_playback_error(self, error: PlayerError) -> None:
        track = self._engine.track
        self._engine.stop()
        if track is not None:
            self._record_failure(track, error)
        if isinstance(error, OutputDeviceError):
            self._device_failures += 1
            if self._device_failures > 1:
                raise error
        if self._playlist.skip(wrap=False):
            self._load_current(play=True, wrap=False)

    def _apply_track_changes(self) -> None:
        changes = [e for e in self._playlist.events.drain() if isinstance(e, TrackChanged)]
        if not changes:
            return

        change = changes[-1]
        if change.track is None:
            logger.info("Playlist is empty, stopping")
            self._engine.stop()
            return

        play = change.reason in AUTOPLAY_REASONS or self._engine.state == PlaybackState.PLAYING
        wrap = change.reason in WRAPPING_REASONS
        backward = change.reason == ChangeReason.NAVIGATE_BACK
        if not self._load_current(play=play, wrap=wrap, backward=backward) and wrap:
            raise NoTracksFound("No playable tracks")

    def _load_current(
        self, play: bool, wrap: bool, backward: bool = False, device_retry: bool = True
    ) -> bool:
        """
        Load the playlist's current track, skipping tracks that fail.

        Returns:
            True if a track is loaded, False if none could be (engine stopped)
        """
        attempts = 0
        while True:
            track = self._playlist.current()
            if track is None:
                self._engine.stop()
                return False

            try:
                self._engine.load(track)
                if play:
                    self._engine.play()
            except OutputDeviceError as e:
                self._record_failure(track, e)
                self._device_failures += 1
                if not device_retry or self._device_failures > 1:
                    raise
            except PlayerError as e:
                self._record_failure(track, e)
            else:
                return True

            attempts += 1
            if attempts >= self._playlist.visible_count() or not self._playlist.skip(wrap, backward=backward):
                self._engine.stop()
                return False

    def _record_failure(self, track, error: PlayerError) -> None:
        logger.warning("Skipping %s: %s", track.file_path, error)
        self._failures.append(TrackFailed(track, error))
        self.set_status(f"Skipped {track.display_title}: {error}", "error")
