"""GStreamer-based audio output.

The playbin decodes and feeds the sink on GStreamer's own streaming threads.
The control thread only talks to it through the AudioOutput command/query
surface: state changes, seeks, duration queries and popping bus messages.
No GLib main loop runs, so no GStreamer callback ever re-enters player state.
"""

from pathlib import Path
from typing import Optional, Union

import gi
gi.require_version('Gst', '1.0')
from gi.repository import Gst

from core.exceptions import DecodeError, OutputDeviceError, PlayerError
from core.logging import get_logger

logger = get_logger(__name__)


# GStreamer playbin flags
GST_FLAG_AUDIO = 0x02
GST_FLAG_SOFT_VOLUME = 0x10

# Upper bound for prerolling a file on load (seconds)
LOAD_TIMEOUT = 2

# Resource error codes raised by sinks that cannot reach the device
DEVICE_ERROR_CODES = ("OPEN_WRITE", "OPEN_READ_WRITE", "BUSY", "WRITE")


class AudioOutput:
    """Command/query surface of an audio output backend."""

    def open(self, file_path: str) -> Optional[float]:
        """Prepare a file for playback, paused.

        Returns:
            Stream duration in seconds, or None if not known yet

        Raises:
            DecodeError: The file cannot be decoded
            OutputDeviceError: The sink cannot be opened
        """
        raise NotImplementedError("Subclasses must implement open()")

    def play(self) -> None:
        raise NotImplementedError("Subclasses must implement play()")

    def pause(self) -> None:
        raise NotImplementedError("Subclasses must implement pause()")

    def seek(self, position: float) -> bool:
        """Seek to an absolute position in seconds."""
        raise NotImplementedError("Subclasses must implement seek()")

    def duration(self) -> Optional[float]:
        raise NotImplementedError("Subclasses must implement duration()")

    def poll(self) -> bool:
        """Drain pending stream messages.

        Returns:
            True if the stream reached its end

        Raises:
            PlayerError: The stream failed while playing
        """
        raise NotImplementedError("Subclasses must implement poll()")

    def close(self) -> None:
        """Release the current stream."""
        raise NotImplementedError("Subclasses must implement close()")

    def shutdown(self) -> None:
        """Flush and release the output device."""
        raise NotImplementedError("Subclasses must implement shutdown()")


class GstAudioOutput(AudioOutput):
    """Audio output backed by a GStreamer playbin and autoaudiosink."""

    def __init__(self):
        if not Gst.is_initialized():
            Gst.init(None)

        self.playbin: Optional[Gst.Element] = None
        self._file_path: Optional[str] = None
        self._setup_pipeline()

    def _setup_pipeline(self) -> None:
        """Set up the playbin with an audio-only sink."""
        self.playbin = Gst.ElementFactory.make("playbin", "playbin")
        if not self.playbin:
            raise OutputDeviceError("Failed to create GStreamer playbin")

        audio_sink = Gst.ElementFactory.make("autoaudiosink", "audiosink")
        if not audio_sink:
            raise OutputDeviceError("No audio sink available (autoaudiosink)")

        self.playbin.set_property("audio-sink", audio_sink)
        try:
            self.playbin.set_property("flags", GST_FLAG_AUDIO | GST_FLAG_SOFT_VOLUME)
        except (AttributeError, TypeError):
            # Ignore errors setting flags (playbin might not support this property)
            pass

        self._bus = self.playbin.get_bus()

    def open(self, file_path: Union[str, Path]) -> Optional[float]:
        self.close()
        self._file_path = str(file_path)
        self.playbin.set_property("uri", Path(file_path).resolve().as_uri())

        ret = self.playbin.set_state(Gst.State.PAUSED)
        if ret == Gst.StateChangeReturn.FAILURE:
            raise self._take_error()

        ret, _state, _pending = self.playbin.get_state(LOAD_TIMEOUT * Gst.SECOND)
        if ret == Gst.StateChangeReturn.FAILURE:
            raise self._take_error()
        if ret == Gst.StateChangeReturn.ASYNC:
            path = self._file_path
            self.close()
            raise DecodeError(f"Timed out opening {path}", path)

        logger.debug("Opened %s", self._file_path)
        return self.duration()

    def play(self) -> None:
        if self.playbin.set_state(Gst.State.PLAYING) == Gst.StateChangeReturn.FAILURE:
            raise self._take_error()

    def pause(self) -> None:
        self.playbin.set_state(Gst.State.PAUSED)

    def seek(self, position: float) -> bool:
        success = self.playbin.seek_simple(
            Gst.Format.TIME,
            Gst.SeekFlags.FLUSH | Gst.SeekFlags.KEY_UNIT,
            int(position * Gst.SECOND),
        )
        if not success:
            logger.warning("Seek failed for position %.2fs", position)
        return bool(success)

    def duration(self) -> Optional[float]:
        success, duration = self.playbin.query_duration(Gst.Format.TIME)
        if success and duration > 0:
            return duration / Gst.SECOND
        return None

    def poll(self) -> bool:
        while True:
            message = self._bus.pop_filtered(Gst.MessageType.ERROR | Gst.MessageType.EOS)
            if message is None:
                return False
            if message.type == Gst.MessageType.EOS:
                return True
            raise self._error_from_message(message)

    def close(self) -> None:
        if self.playbin:
            self.playbin.set_state(Gst.State.NULL)
        self._file_path = None

    def shutdown(self) -> None:
        """
        Stop playback and release GStreamer elements.

        Setting the playbin to NULL drains and closes the audio sink.
        """
        self.close()
        self.playbin = None
        self._bus = None
        logger.info("Audio output closed")

    def _take_error(self) -> PlayerError:
        """Turn the pending bus error into an exception and release the stream."""
        path = self._file_path
        message = self._bus.pop_filtered(Gst.MessageType.ERROR)
        error = (
            self._error_from_message(message)
            if message is not None
            else DecodeError(f"Could not open {path}", path)
        )
        self.close()
        return error

    def _error_from_message(self, message) -> PlayerError:
        err, debug = message.parse_error()
        logger.error("Playback error: %s", err.message)
        if debug:
            logger.debug("GStreamer debug: %s", debug)

        domain = Gst.ResourceError.quark()
        if any(err.matches(domain, getattr(Gst.ResourceError, code)) for code in DEVICE_ERROR_CODES):
            return OutputDeviceError(err.message, self._file_path)

        _log_codec_help(err.message, debug or "")
        return DecodeError(err.message, self._file_path)


def _log_codec_help(error: str, debug: str) -> None:
    """
    Log helpful messages for missing codecs.

    Args:
        error: Error message from GStreamer
        debug: Debug information from GStreamer
    """
    combined = (error + debug).lower()

    if 'flac' in combined:
        logger.warning("Missing FLAC support: install gst-plugins-good")
    elif 'aac' in combined or 'mpeg-4' in combined:
        logger.warning("Missing AAC support: install gst-plugins-bad or gst-libav")
    elif 'missing' in combined or 'decoder' in combined:
        logger.warning("Missing codec: install gst-plugins-good, gst-plugins-bad and gst-libav")
