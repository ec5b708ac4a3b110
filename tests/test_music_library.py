"""Tests for directory scanning and the track catalog."""

import pytest
from pathlib import Path

from core.exceptions import InvalidPath, NoTracksFound
from core.metadata import TrackDescriptor
from core.music_library import TrackCatalog, is_audio_file, scan_directory


def touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()
    return path


@pytest.fixture
def music_dir(temp_dir):
    """Directory with audio files at two levels and some non-audio files."""
    touch(temp_dir / 'b.MP3')
    touch(temp_dir / 'a.flac')
    touch(temp_dir / 'cover.jpg')
    touch(temp_dir / 'notes.txt')
    touch(temp_dir / 'disc2' / 'z.ogg')
    touch(temp_dir / 'disc1' / 'y.opus')
    touch(temp_dir / 'disc1' / 'deep' / 'x.wav')
    return temp_dir


class TestScanDirectory:
    """Test scan_directory function."""

    def test_audio_extensions(self):
        for name in ['a.mp3', 'a.AAC', 'a.wav', 'a.flac', 'a.alac', 'a.aiff', 'a.aif',
                     'a.m4a', 'a.ogg', 'a.Opus']:
            assert is_audio_file(Path(name)) is True
        for name in ['a.txt', 'a.jpg', 'a', 'a.mp4']:
            assert is_audio_file(Path(name)) is False

    def test_top_level_only(self, music_dir):
        found = scan_directory(music_dir)
        assert [p.name for p in found] == ['a.flac', 'b.MP3']

    def test_recursive_order(self, music_dir):
        """Test files come before subdirectories, both sorted by name."""
        found = scan_directory(music_dir, recursive=True)
        assert [p.relative_to(music_dir).as_posix() for p in found] == [
            'a.flac',
            'b.MP3',
            'disc1/y.opus',
            'disc1/deep/x.wav',
            'disc2/z.ogg',
        ]

    def test_missing_directory(self, temp_dir):
        with pytest.raises(InvalidPath):
            scan_directory(temp_dir / 'missing')

    def test_file_is_not_directory(self, temp_dir):
        with pytest.raises(InvalidPath):
            scan_directory(touch(temp_dir / 'a.mp3'))


class TestTrackCatalog:
    """Test TrackCatalog class."""

    def test_from_directory(self, music_dir):
        catalog = TrackCatalog.from_directory(music_dir, reader=TrackDescriptor)

        assert len(catalog) == 2
        assert catalog[0].file_path == str(music_dir / 'a.flac')
        assert [t.file_path for t in catalog] == [t.file_path for t in catalog.tracks]
        assert isinstance(catalog.tracks, tuple)

    def test_recursive(self, music_dir):
        catalog = TrackCatalog.from_directory(music_dir, recursive=True, reader=TrackDescriptor)
        assert len(catalog) == 5

    def test_empty_directory(self, temp_dir):
        touch(temp_dir / 'readme.txt')
        with pytest.raises(NoTracksFound):
            TrackCatalog.from_directory(temp_dir, recursive=True)

    def test_only_nested_files_non_recursive(self, temp_dir):
        touch(temp_dir / 'sub' / 'a.mp3')
        with pytest.raises(NoTracksFound):
            TrackCatalog.from_directory(temp_dir)
