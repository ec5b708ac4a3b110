"""Music directory scanning and the immutable track catalog."""

import os
from pathlib import Path
from typing import Callable, Iterator, List, Sequence, Tuple, Union

from core.exceptions import InvalidPath, NoTracksFound
from core.logging import get_logger
from core.metadata import TrackDescriptor, read_track

logger = get_logger(__name__)


# Supported audio file extensions
AUDIO_EXTENSIONS = {
    '.mp3', '.aac', '.wav', '.flac', '.alac', '.aiff', '.aif', '.m4a', '.ogg', '.opus',
}


def is_audio_file(path: Path) -> bool:
    """Check the extension against the supported set (case-insensitive)."""
    return path.suffix.lower() in AUDIO_EXTENSIONS


def scan_directory(directory: Union[str, Path], recursive: bool = False) -> List[Path]:
    """
    List candidate audio files in discovery order.

    Entries are sorted by name inside each directory; the files of a
    directory come before the contents of its subdirectories.

    Args:
        directory: Directory to scan
        recursive: Descend into subdirectories

    Raises:
        InvalidPath: If the directory does not exist or is not a directory
    """
    root = Path(directory).expanduser()
    if not root.is_dir():
        raise InvalidPath(f"Not a directory: {root}")

    def on_error(error: OSError) -> None:
        logger.warning("Error scanning %s: %s", error.filename, error)

    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        current = Path(dirpath)
        for name in sorted(filenames):
            file_path = current / name
            if is_audio_file(file_path) and file_path.is_file():
                found.append(file_path)
        if not recursive:
            break
    return found


class TrackCatalog:
    """Immutable, ordered list of discovered tracks."""

    def __init__(self, tracks: Sequence[TrackDescriptor]):
        self._tracks: Tuple[TrackDescriptor, ...] = tuple(tracks)

    @classmethod
    def from_directory(
        cls,
        directory: Union[str, Path],
        recursive: bool = False,
        reader: Callable[[str], TrackDescriptor] = read_track,
    ) -> 'TrackCatalog':
        """
        Scan a directory and read metadata for every candidate file.

        Raises:
            InvalidPath: If the directory is not usable
            NoTracksFound: If no audio file was found
        """
        root = Path(directory).expanduser()
        tracks: List[TrackDescriptor] = [reader(str(path)) for path in scan_directory(root, recursive)]
        if not tracks:
            raise NoTracksFound(f"No music files found in {root}")

        logger.info("Catalog built: %d tracks from %s (recursive=%s)", len(tracks), root, recursive)
        return cls(tracks)

    @property
    def tracks(self) -> Tuple[TrackDescriptor, ...]:
        return self._tracks

    def __len__(self) -> int:
        return len(self._tracks)

    def __getitem__(self, index: int) -> TrackDescriptor:
        return self._tracks[index]

    def __iter__(self) -> Iterator[TrackDescriptor]:
        return iter(self._tracks)
