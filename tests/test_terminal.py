"""Tests for keystroke translation and the terminal session."""

from unittest.mock import MagicMock

import pytest
from blessed.keyboard import Keystroke

from core.logging import LinuxLogger
from ui.terminal import TerminalSession, key_identifier


class TestKeyIdentifier:
    """Test key_identifier function."""

    @pytest.mark.parametrize('keystroke, expected', [
        (Keystroke('a'), 'a'),
        (Keystroke('Q'), 'Q'),
        (Keystroke(' '), 'space'),
        (Keystroke('\x1b[D', code=260, name='KEY_LEFT'), 'left'),
        (Keystroke('\x1b[5~', code=339, name='KEY_PGUP'), 'pageup'),
        (Keystroke('\x1b', code=361, name='KEY_ESCAPE'), 'escape'),
        (Keystroke('\x7f'), 'backspace'),
    ])
    def test_translation(self, keystroke, expected):
        assert key_identifier(keystroke) == expected

    def test_timeout_and_unknown(self):
        assert key_identifier(Keystroke('')) is None
        assert key_identifier(None) is None
        assert key_identifier(Keystroke('\x1bOP', code=265, name='KEY_F1')) is None


class TestTerminalSession:
    """Test TerminalSession class."""

    def test_enter_exit_restores_console(self):
        term = MagicMock()
        LinuxLogger.get_logger()
        handler = LinuxLogger._instance.console_handler

        with TerminalSession(term) as session:
            term.fullscreen.assert_called_once()
            term.cbreak.assert_called_once()
            term.hidden_cursor.assert_called_once()
            if handler is not None:
                assert handler.level > 50

        if handler is not None:
            assert handler.level == 30
        term.fullscreen.return_value.__exit__.assert_called_once()

    def test_read_key(self):
        term = MagicMock()
        term.inkey.return_value = Keystroke('h')
        session = TerminalSession(term)

        assert session.read_key(0.1) == 'h'
        term.inkey.assert_called_once_with(timeout=0.1)
