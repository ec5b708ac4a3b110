"""Metadata extraction for audio files using mutagen."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from mutagen import File, MutagenError

from core.logging import get_logger

logger = get_logger(__name__)


# Tag keys tried in order for each field, across Vorbis, ID3 and iTunes tags
TITLE_KEYS = ['TITLE', 'TIT2', '\xa9nam', 'TIT1']
ARTIST_KEYS = ['ARTIST', 'TPE1', '\xa9ART', 'ALBUMARTIST', 'TPE2', 'aART']
ALBUM_KEYS = ['ALBUM', 'TALB', '\xa9alb']
GENRE_KEYS = ['GENRE', 'TCON', '\xa9gen']
YEAR_KEYS = ['DATE', 'YEAR', 'TDRC', 'TDRL', 'TDOR', '\xa9day']
TRACK_KEYS = ['TRACKNUMBER', 'TRACK', 'TRCK', 'trkn']


@dataclass(frozen=True)
class TrackDescriptor:
    """Immutable description of one playable audio file."""

    file_path: str
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    year: Optional[str] = None
    genre: Optional[str] = None
    track_number: Optional[int] = None
    duration: Optional[float] = None
    bitrate: Optional[int] = None
    sample_rate: Optional[int] = None
    channels: Optional[int] = None

    @property
    def display_title(self) -> str:
        """Title tag, or the file name without extension."""
        return self.title or Path(self.file_path).stem or "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        """Convert descriptor to dictionary."""
        return {
            'file_path': self.file_path,
            'title': self.title,
            'artist': self.artist,
            'album': self.album,
            'year': self.year,
            'genre': self.genre,
            'track_number': self.track_number,
            'duration': self.duration,
            'bitrate': self.bitrate,
            'sample_rate': self.sample_rate,
            'channels': self.channels,
        }


def read_track(file_path: str) -> TrackDescriptor:
    """
    Read tags and stream info for a file.

    Never raises for unreadable files: missing tags degrade to the
    filename, where "Artist - Title" stems are split into both fields.

    Args:
        file_path: Path to the audio file

    Returns:
        TrackDescriptor for the file
    """
    fields: Dict[str, Any] = {}
    try:
        audio_file = File(file_path)
    except (MutagenError, OSError, ValueError) as e:
        logger.debug("Could not read tags from %s: %s", file_path, e)
        audio_file = None

    if audio_file is not None:
        fields['title'] = _get_tag_generic(audio_file, TITLE_KEYS)
        fields['artist'] = _get_tag_generic(audio_file, ARTIST_KEYS)
        fields['album'] = _get_tag_generic(audio_file, ALBUM_KEYS)
        fields['genre'] = _get_tag_generic(audio_file, GENRE_KEYS)
        fields['year'] = _get_tag_generic(audio_file, YEAR_KEYS)
        fields['track_number'] = _parse_track_number(
            _get_raw_tag(audio_file, TRACK_KEYS)
        )

        info = getattr(audio_file, 'info', None)
        if info is not None:
            length = getattr(info, 'length', None)
            if length:
                fields['duration'] = float(length)
            bitrate = getattr(info, 'bitrate', None)
            if bitrate:
                fields['bitrate'] = int(bitrate) // 1000
            fields['sample_rate'] = getattr(info, 'sample_rate', None) or None
            fields['channels'] = getattr(info, 'channels', None) or None

    if not fields.get('title'):
        stem = Path(file_path).stem
        artist, sep, title = stem.partition(' - ')
        if sep and title:
            fields['title'] = title
            if not fields.get('artist'):
                fields['artist'] = artist
        else:
            fields['title'] = stem

    return TrackDescriptor(file_path=str(file_path), **fields)


def _get_raw_tag(audio_file, tag_keys: list) -> Any:
    """Return the first present value for any of the keys, unconverted."""
    if audio_file.tags is None:
        return None

    for key in tag_keys:
        try:
            if key not in audio_file:
                continue
            value = audio_file[key]
        except (KeyError, TypeError, ValueError):
            continue

        # Most formats return lists, MP4 track numbers are tuples
        if isinstance(value, list):
            if not value:
                continue
            value = value[0]
        if value is not None:
            return value
    return None


def _get_tag_generic(audio_file, tag_keys: list) -> Optional[str]:
    """Get a tag value as text trying multiple possible keys."""
    value = _get_raw_tag(audio_file, tag_keys)
    if value is None:
        return None
    if isinstance(value, tuple):
        value = value[0] if value else None
    if isinstance(value, bytes):
        value = value.decode('utf-8', errors='ignore')
    if hasattr(value, 'text'):
        # ID3 frames
        value = value.text[0] if value.text else None
    result = str(value).strip() if value is not None else ''
    return result or None


def _parse_track_number(value: Any) -> Optional[int]:
    """Parse "3", "3/12", (3, 12) or an ID3 frame into an int."""
    if value is None:
        return None
    if isinstance(value, tuple):
        value = value[0] if value else None
    if hasattr(value, 'text'):
        value = value.text[0] if value.text else None
    try:
        return int(str(value).split('/')[0].strip())
    except (ValueError, TypeError):
        return None
