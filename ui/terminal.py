"""Full-screen terminal session and key polling on top of blessed."""

from contextlib import ExitStack
from typing import Optional

from blessed import Terminal

from core.logging import LinuxLogger, get_logger

logger = get_logger(__name__)


# blessed key names -> key identifiers used in key bindings
KEY_NAMES = {
    "KEY_LEFT": "left",
    "KEY_RIGHT": "right",
    "KEY_UP": "up",
    "KEY_DOWN": "down",
    "KEY_ESCAPE": "escape",
    "KEY_TAB": "tab",
    "KEY_BACKSPACE": "backspace",
    "KEY_DELETE": "delete",
    "KEY_ENTER": "enter",
    "KEY_INSERT": "insert",
    "KEY_HOME": "home",
    "KEY_END": "end",
    "KEY_PGUP": "pageup",
    "KEY_PGDOWN": "pagedown",
}

# Raw characters some terminals send without a key name
CHAR_NAMES = {
    " ": "space",
    "\t": "tab",
    "\n": "enter",
    "\r": "enter",
    "\x7f": "backspace",
    "\x1b": "escape",
}


def key_identifier(keystroke) -> Optional[str]:
    """Translate a blessed Keystroke into a key identifier, or None."""
    if not keystroke:
        return None
    name = getattr(keystroke, "name", None)
    if name:
        if name in KEY_NAMES:
            return KEY_NAMES[name]
        logger.debug("Ignoring key %s", name)
        return None
    char = str(keystroke)
    if char in CHAR_NAMES:
        return CHAR_NAMES[char]
    if len(char) == 1 and char.isprintable():
        return char
    return None


class TerminalSession:
    """
    Owns the screen while the player runs.

    Enters fullscreen, cbreak and hidden-cursor mode and mutes the stderr
    log handler; everything is restored on exit, including after errors.
    """

    def __init__(self, term: Optional[Terminal] = None):
        self.term = term or Terminal()
        self._stack: Optional[ExitStack] = None

    def __enter__(self) -> "TerminalSession":
        stack = ExitStack()
        stack.enter_context(self.term.fullscreen())
        stack.enter_context(self.term.cbreak())
        stack.enter_context(self.term.hidden_cursor())
        LinuxLogger.set_console_enabled(False)
        stack.callback(LinuxLogger.set_console_enabled, True)
        self._stack = stack
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._stack is not None:
            self._stack.close()
            self._stack = None

    def read_key(self, timeout: float) -> Optional[str]:
        """Wait up to ``timeout`` seconds for one key."""
        return key_identifier(self.term.inkey(timeout=timeout))
