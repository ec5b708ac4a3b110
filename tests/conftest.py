"""Pytest configuration and fixtures."""

import os
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import List, Optional

# Mock GStreamer before imports
import sys
from unittest.mock import MagicMock

sys.modules['gi'] = MagicMock()
sys.modules['gi.repository'] = MagicMock()
sys.modules['gi.repository.Gst'] = MagicMock()

# Keep config and log files out of the real home directory
_XDG_ROOT = Path(tempfile.mkdtemp(prefix='sonido-tests-'))
os.environ['XDG_CONFIG_HOME'] = str(_XDG_ROOT / 'config')
os.environ['XDG_DATA_HOME'] = str(_XDG_ROOT / 'data')

from core.audio_player import AudioOutput
from core.exceptions import DecodeError
from core.metadata import TrackDescriptor


class FakeOutput(AudioOutput):
    """In-memory audio output recording the calls made to it."""

    def __init__(self, durations: Optional[dict] = None):
        self.durations = durations or {}
        self.calls: List[tuple] = []
        self.opened: List[str] = []
        self.current: Optional[str] = None
        self.playing = False
        self.eos = False
        self.error: Optional[Exception] = None
        self.closed = False

    def open(self, file_path):
        self.calls.append(('open', str(file_path)))
        if 'corrupt' in Path(file_path).name:
            raise DecodeError(f"Could not decode {file_path}", file_path)
        self.current = str(file_path)
        self.opened.append(self.current)
        self.playing = False
        self.eos = False
        return self.durations.get(self.current)

    def play(self):
        self.calls.append(('play',))
        self.playing = True

    def pause(self):
        self.calls.append(('pause',))
        self.playing = False

    def seek(self, position):
        self.calls.append(('seek', position))
        return True

    def duration(self):
        return self.durations.get(self.current)

    def poll(self):
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        return self.eos

    def close(self):
        self.calls.append(('close',))
        self.current = None
        self.playing = False

    def shutdown(self):
        self.calls.append(('shutdown',))
        self.close()
        self.closed = True


def make_track(name: str, duration: Optional[float] = 10.0, **tags) -> TrackDescriptor:
    """Build a descriptor for a file that need not exist."""
    return TrackDescriptor(
        file_path=f"/music/{name}.mp3",
        title=tags.pop('title', name),
        duration=duration,
        **tags,
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def fake_output():
    return FakeOutput()


@pytest.fixture
def tracks():
    """Three playable tracks of 10 seconds each."""
    return [make_track('one'), make_track('two'), make_track('three')]


@pytest.fixture
def config_file(temp_dir):
    """Path of a config file inside the temporary directory."""
    return temp_dir / 'config' / 'config.toml'


@pytest.fixture
def sample_audio_file(temp_dir):
    """Create a sample audio file path for testing."""
    audio_file = temp_dir / 'test.mp3'
    audio_file.touch()
    return str(audio_file)
