"""Key bindings: the fixed Action set and the reloadable key -> action table."""

import threading
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from core.exceptions import ConfigParseError
from core.logging import get_logger

logger = get_logger(__name__)


class Action(Enum):
    """Transport actions a key can trigger."""

    TOGGLE_PLAYBACK = "toggle_playback"
    TOGGLE_REPEAT = "toggle_repeat"
    SEEK_BACKWARD = "seek_backward"
    SEEK_FORWARD = "seek_forward"
    PREVIOUS_TRACK = "previous_track"
    NEXT_TRACK = "next_track"
    HIDE_TRACK = "hide_track"
    RELOAD_CONFIG = "reload_config"
    QUIT = "quit"


DEFAULT_BINDINGS: Dict[Action, str] = {
    Action.TOGGLE_PLAYBACK: "space",
    Action.TOGGLE_REPEAT: "r",
    Action.SEEK_BACKWARD: "left",
    Action.SEEK_FORWARD: "right",
    Action.PREVIOUS_TRACK: "up",
    Action.NEXT_TRACK: "down",
    Action.HIDE_TRACK: "h",
    Action.RELOAD_CONFIG: "c",
    Action.QUIT: "q",
}

# Accepted key names and their canonical identifier
KEY_ALIASES: Dict[str, str] = {
    "space": "space",
    "left": "left",
    "right": "right",
    "up": "up",
    "down": "down",
    "escape": "escape",
    "esc": "escape",
    "tab": "tab",
    "backspace": "backspace",
    "enter": "enter",
    "insert": "insert",
    "ins": "insert",
    "delete": "delete",
    "del": "delete",
    "home": "home",
    "end": "end",
    "pageup": "pageup",
    "pgup": "pageup",
    "pagedown": "pagedown",
    "pgdown": "pagedown",
}


def parse_key(key_str: str) -> str:
    """
    Turn a configured key string into a key identifier.

    Args:
        key_str: A key name such as "space" or "PgUp", or a single character

    Returns:
        Canonical key identifier

    Raises:
        ConfigParseError: If the key is not recognised
    """
    if not isinstance(key_str, str):
        raise ConfigParseError(f"Key binding must be a string, got {key_str!r}")

    name = key_str.lower()
    if name in KEY_ALIASES:
        return KEY_ALIASES[name]
    if name == " ":
        return "space"
    if len(name) == 1:
        return name
    raise ConfigParseError(f"Unknown key: {key_str!r}")


class KeyBindingTable:
    """Read-only mapping from key identifier to Action."""

    def __init__(self, mapping: Mapping[str, Action]):
        self._by_key: Mapping[str, Action] = MappingProxyType(dict(mapping))

    @classmethod
    def from_strings(cls, bindings: Mapping[Action, str]) -> 'KeyBindingTable':
        """
        Build a table from action -> key string pairs.

        Raises:
            ConfigParseError: Unknown key name or one key bound twice
        """
        by_key: Dict[str, Action] = {}
        for action, key_str in bindings.items():
            key = parse_key(key_str)
            if key in by_key:
                raise ConfigParseError(
                    f"Key {key_str!r} bound to both {by_key[key].value} and {action.value}"
                )
            by_key[key] = action
        return cls(by_key)

    @classmethod
    def default(cls) -> 'KeyBindingTable':
        return cls.from_strings(DEFAULT_BINDINGS)

    def lookup(self, key: str) -> Optional[Action]:
        return self._by_key.get(key)

    def __len__(self) -> int:
        return len(self._by_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyBindingTable):
            return NotImplemented
        return dict(self._by_key) == dict(other._by_key)


class InputDispatcher:
    """Resolves key identifiers to actions against the active table."""

    def __init__(self, table: KeyBindingTable):
        self._table = table
        self._reload_lock = threading.Lock()

    @property
    def table(self) -> KeyBindingTable:
        return self._table

    def resolve(self, key: Optional[str]) -> Optional[Action]:
        """
        Look a key up in the active table.

        The table reference is read once, so a resolution racing a reload
        sees either the old or the new table in full.
        """
        if not key:
            return None
        table = self._table
        action = table.lookup(key)
        if action is None:
            logger.debug("Unmapped key: %s", key)
        return action

    def reload(self, table: KeyBindingTable) -> None:
        """Replace the active table in one reference swap."""
        with self._reload_lock:
            self._table = table
        logger.info("Key bindings reloaded (%d keys)", len(table))
