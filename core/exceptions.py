"""Custom exception hierarchy for sonido.

This module provides a structured exception hierarchy for consistent
error handling across the application.
"""

from pathlib import Path
from typing import Optional, Union


class SonidoError(Exception):
    """Base exception for all sonido errors."""

    pass


class InvalidPath(SonidoError):
    """The music directory does not exist or is not a directory."""

    pass


class NoTracksFound(SonidoError):
    """No audio files were found, or none of them could be played."""

    pass


class PlaylistError(SonidoError):
    """Errors related to playlist operations."""

    pass


class PlayerError(SonidoError):
    """Errors related to audio playback."""

    def __init__(self, message: str, file_path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.file_path = str(file_path) if file_path is not None else None


class DecodeError(PlayerError):
    """A track could not be decoded (unsupported or corrupt file)."""

    pass


class OutputDeviceError(PlayerError):
    """The audio output device could not be opened or failed."""

    pass


class ConfigurationError(SonidoError):
    """Errors related to configuration."""

    pass


class ConfigParseError(ConfigurationError):
    """The configuration file could not be parsed or holds invalid values."""

    pass
