"""Configuration management using XDG Base Directory Specification.

Settings live in ``$XDG_CONFIG_HOME/sonido/config.toml``. The file is created
with documented defaults on first run. Every load produces a fresh, immutable
Settings value; a reload that fails keeps the last-known-good one.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from core.exceptions import ConfigParseError
from core.input_dispatcher import DEFAULT_BINDINGS, Action, KeyBindingTable
from core.logging import get_logger

logger = get_logger(__name__)


APP_NAME = 'sonido'
VERSION = '1.0.0'

ALIGNMENTS = ('left', 'center', 'right')

COLOR_NAMES = (
    'black', 'red', 'green', 'yellow', 'blue', 'magenta', 'cyan',
    'gray', 'grey', 'darkgray', 'darkgrey',
    'lightred', 'lightgreen', 'lightyellow', 'lightblue', 'lightmagenta', 'lightcyan',
    'white',
)

DEFAULT_CONFIG = """\
# Sonido configuration
#
# Keys: a single character, or one of space, left, right, up, down, escape,
# tab, backspace, enter, insert, delete, home, end, pageup, pagedown.
# Alignments: left, center, right.
# Colors: black, red, green, yellow, blue, magenta, cyan, gray, darkgray,
# lightred, lightgreen, lightyellow, lightblue, lightmagenta, lightcyan, white.
# Title formats may contain {VERSION}.

[keybindings]
toggle_playback = "space"
toggle_repeat = "r"
seek_backward = "left"
seek_forward = "right"
previous_track = "up"
next_track = "down"
hide_track = "h"
reload_config = "c"
quit = "q"

[playback]
# Seconds moved by one seek
seek_step = 5
# Start playing the first track on launch
autoplay = true

[display]
show_app_title = true
show_playlist_title = true
show_playlist_scrollbar = true
show_metadata_title = true
show_metadata_panel = true
show_progress_title = false

app_title_format = "┤ Sonido v{VERSION} ├"
playlist_title_format = "┤ Playlist ├"
metadata_title_format = "┤ Metadata ├"
progress_title_format = "┤ Progress ├"

app_title_alignment = "center"
playlist_title_alignment = "left"
metadata_title_alignment = "left"
progress_title_alignment = "left"

rounded_corners = true
accent_color = "blue"
# Per-panel overrides of accent_color
# app_title_color = "blue"
# playlist_color = "blue"
# metadata_color = "blue"
# progress_color = "blue"
"""


@dataclass(frozen=True)
class DisplayConfig:
    """Renderer flags. Replaced, never mutated, on reload."""

    show_app_title: bool = True
    show_playlist_title: bool = True
    show_playlist_scrollbar: bool = True
    show_metadata_title: bool = True
    show_metadata_panel: bool = True
    show_progress_title: bool = False
    app_title_format: str = "┤ Sonido v{VERSION} ├"
    playlist_title_format: str = "┤ Playlist ├"
    metadata_title_format: str = "┤ Metadata ├"
    progress_title_format: str = "┤ Progress ├"
    app_title_alignment: str = "center"
    playlist_title_alignment: str = "left"
    metadata_title_alignment: str = "left"
    progress_title_alignment: str = "left"
    rounded_corners: bool = True
    accent_color: str = "blue"
    app_title_color: Optional[str] = None
    playlist_color: Optional[str] = None
    metadata_color: Optional[str] = None
    progress_color: Optional[str] = None

    def color(self, panel: str) -> str:
        """Panel color, falling back to the accent color."""
        return getattr(self, f'{panel}_color') or self.accent_color

    def title(self, panel: str) -> str:
        """Formatted panel title with placeholders filled in."""
        return getattr(self, f'{panel}_title_format').replace('{VERSION}', VERSION)


@dataclass(frozen=True)
class Settings:
    """Everything read from the configuration file."""

    keybindings: KeyBindingTable = field(default_factory=KeyBindingTable.default)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    seek_step: int = 5
    autoplay: bool = True


def parse_settings(data: Dict[str, Any]) -> Settings:
    """
    Validate parsed TOML and build Settings.

    Missing keys keep their defaults; unknown keys are ignored.

    Raises:
        ConfigParseError: Wrong types or values
    """
    keys = _table(data, 'keybindings')
    playback = _table(data, 'playback')
    display = _table(data, 'display')

    bindings = dict(DEFAULT_BINDINGS)
    for name, value in keys.items():
        try:
            action = Action(name)
        except ValueError:
            logger.debug("Ignoring unknown key binding: %s", name)
            continue
        bindings[action] = value
    keybindings = KeyBindingTable.from_strings(bindings)

    seek_step = playback.get('seek_step', 5)
    if isinstance(seek_step, bool) or not isinstance(seek_step, int) or seek_step < 1:
        raise ConfigParseError(f"playback.seek_step must be a positive integer, got {seek_step!r}")
    autoplay = playback.get('autoplay', True)
    if not isinstance(autoplay, bool):
        raise ConfigParseError(f"playback.autoplay must be true or false, got {autoplay!r}")

    return Settings(
        keybindings=keybindings,
        display=_parse_display(display),
        seek_step=seek_step,
        autoplay=autoplay,
    )


def _table(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigParseError(f"[{name}] must be a table")
    return value


def _parse_display(table: Dict[str, Any]) -> DisplayConfig:
    values: Dict[str, Any] = {}
    known = {f.name for f in fields(DisplayConfig)}
    for key, value in table.items():
        if key not in known:
            logger.debug("Ignoring unknown display option: %s", key)
            continue

        if key.startswith('show_') or key == 'rounded_corners':
            if not isinstance(value, bool):
                raise ConfigParseError(f"display.{key} must be true or false, got {value!r}")
        elif key.endswith('_alignment'):
            if not isinstance(value, str) or value.lower() not in ALIGNMENTS:
                raise ConfigParseError(
                    f"display.{key} must be one of {', '.join(ALIGNMENTS)}, got {value!r}"
                )
            value = value.lower()
        elif key.endswith('_color'):
            if not isinstance(value, str) or value.lower() not in COLOR_NAMES:
                raise ConfigParseError(f"display.{key}: unknown color {value!r}")
            value = value.lower()
        elif not isinstance(value, str):
            raise ConfigParseError(f"display.{key} must be a string, got {value!r}")
        values[key] = value
    return DisplayConfig(**values)


class Config:
    """
    Configuration manager using XDG Base Directory Specification.

    Follows Linux standards:
    - Config: ~/.config/sonido/ (or XDG_CONFIG_HOME)
    - Data: ~/.local/share/sonido/ (or XDG_DATA_HOME)
    """

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """
        Initialize configuration manager.

        Args:
            config_file: Explicit config path (defaults to the XDG location)
        """
        self.config_home = Path(os.getenv('XDG_CONFIG_HOME', Path.home() / '.config'))
        self.data_home = Path(os.getenv('XDG_DATA_HOME', Path.home() / '.local' / 'share'))

        self.config_dir = self.config_home / APP_NAME
        self.data_dir = self.data_home / APP_NAME
        self.config_file = config_file or self.config_dir / 'config.toml'

        # Last-known-good settings
        self.current = Settings()

    def load(self) -> Settings:
        """
        Read the config file, creating it with defaults when missing.

        Raises:
            ConfigParseError: The file is not valid TOML or holds invalid values
        """
        if not self.config_file.exists():
            self._create_default_config()
            self.current = Settings()
            return self.current

        try:
            with open(self.config_file, 'rb') as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigParseError(f"{self.config_file}: {e}") from e
        except OSError as e:
            raise ConfigParseError(f"Cannot read {self.config_file}: {e}") from e

        self.current = parse_settings(data)
        logger.info("Loaded configuration from %s", self.config_file)
        return self.current

    def reload(self) -> Tuple[Settings, Optional[str]]:
        """
        Re-read the file, falling back to the last-known-good settings.

        Returns:
            (settings, warning) where warning is None on success
        """
        try:
            return self.load(), None
        except ConfigParseError as e:
            logger.warning("Config error, keeping previous settings: %s", e)
            return self.current, f"Config error: {e}"

    def _create_default_config(self) -> None:
        """Write the documented default configuration."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            self.config_file.write_text(DEFAULT_CONFIG, encoding='utf-8')
            logger.info("Created default config at %s", self.config_file)
        except OSError as e:
            logger.warning("Failed to create default config: %s", e)

    @property
    def log_dir(self) -> Path:
        """Get log directory."""
        return self.data_dir / 'logs'
