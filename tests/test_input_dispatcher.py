"""Tests for key binding resolution."""

import pytest

from core.exceptions import ConfigParseError
from core.input_dispatcher import (
    DEFAULT_BINDINGS,
    Action,
    InputDispatcher,
    KeyBindingTable,
    parse_key,
)


class TestParseKey:
    """Test key name parsing."""

    @pytest.mark.parametrize('key_str, expected', [
        ('space', 'space'),
        (' ', 'space'),
        ('Left', 'left'),
        ('esc', 'escape'),
        ('PgUp', 'pageup'),
        ('pgdown', 'pagedown'),
        ('del', 'delete'),
        ('Q', 'q'),
        ('?', '?'),
    ])
    def test_valid(self, key_str, expected):
        assert parse_key(key_str) == expected

    @pytest.mark.parametrize('key_str', ['', 'hyperspace', 'ctrl+x', 5, None])
    def test_invalid(self, key_str):
        with pytest.raises(ConfigParseError):
            parse_key(key_str)


class TestKeyBindingTable:
    """Test KeyBindingTable class."""

    def test_default(self):
        table = KeyBindingTable.default()
        assert len(table) == len(Action)
        assert table.lookup('space') == Action.TOGGLE_PLAYBACK
        assert table.lookup('q') == Action.QUIT
        assert table.lookup('down') == Action.NEXT_TRACK
        assert table.lookup('z') is None

    def test_duplicate_key(self):
        bindings = dict(DEFAULT_BINDINGS)
        bindings[Action.QUIT] = 'R'
        with pytest.raises(ConfigParseError):
            KeyBindingTable.from_strings(bindings)

    def test_read_only(self):
        table = KeyBindingTable.default()
        with pytest.raises(TypeError):
            table._by_key['x'] = Action.QUIT


class TestInputDispatcher:
    """Test InputDispatcher class."""

    def test_resolve(self):
        dispatcher = InputDispatcher(KeyBindingTable.default())
        assert dispatcher.resolve('left') == Action.SEEK_BACKWARD
        assert dispatcher.resolve('x') is None
        assert dispatcher.resolve(None) is None

    def test_reload_swaps_table(self):
        """Test keys resolve through the new table after a reload."""
        dispatcher = InputDispatcher(KeyBindingTable.default())
        bindings = dict(DEFAULT_BINDINGS)
        bindings[Action.QUIT] = 'x'
        new_table = KeyBindingTable.from_strings(bindings)

        dispatcher.reload(new_table)

        assert dispatcher.table is new_table
        assert dispatcher.resolve('x') == Action.QUIT
        assert dispatcher.resolve('q') is None

    def test_resolution_in_progress_uses_old_table(self):
        """Test a resolution that read the old table completes on it."""
        old_table = KeyBindingTable.default()
        dispatcher = InputDispatcher(old_table)
        bindings = dict(DEFAULT_BINDINGS)
        bindings[Action.QUIT] = 'x'
        new_table = KeyBindingTable.from_strings(bindings)

        class ReloadingTable(KeyBindingTable):
            def lookup(self, key):
                dispatcher.reload(new_table)
                return old_table.lookup(key)

        dispatcher.reload(ReloadingTable({}))
        assert dispatcher.resolve('q') == Action.QUIT
        assert dispatcher.table is new_table
        assert dispatcher.resolve('q') is None
