"""Tests for configuration management."""

import pytest
from pathlib import Path

from core.config import DEFAULT_CONFIG, Config, DisplayConfig, Settings, VERSION, parse_settings
from core.exceptions import ConfigParseError
from core.input_dispatcher import Action, KeyBindingTable


class TestConfig:
    """Test Config class."""

    def test_xdg_directories(self, temp_dir, monkeypatch):
        """Test XDG directory resolution."""
        monkeypatch.setenv('XDG_CONFIG_HOME', str(temp_dir / 'config'))
        monkeypatch.setenv('XDG_DATA_HOME', str(temp_dir / 'data'))

        config = Config()
        assert config.config_dir == temp_dir / 'config' / 'sonido'
        assert config.config_file == temp_dir / 'config' / 'sonido' / 'config.toml'
        assert config.log_dir == temp_dir / 'data' / 'sonido' / 'logs'

    def test_creates_default_file(self, config_file):
        """Test first run writes the documented defaults."""
        config = Config(config_file)
        settings = config.load()

        assert config_file.exists()
        assert config_file.read_text(encoding='utf-8') == DEFAULT_CONFIG
        assert settings == Settings()

    def test_default_file_matches_defaults(self, config_file):
        """Test the written template parses to the built-in defaults."""
        config_file.parent.mkdir(parents=True)
        config_file.write_text(DEFAULT_CONFIG, encoding='utf-8')

        assert Config(config_file).load() == Settings()

    def test_partial_file_keeps_defaults(self, config_file):
        """Test missing keys take default values."""
        config_file.parent.mkdir(parents=True)
        config_file.write_text('[playback]\nseek_step = 10\n', encoding='utf-8')

        settings = Config(config_file).load()
        assert settings.seek_step == 10
        assert settings.autoplay is True
        assert settings.display == DisplayConfig()
        assert settings.keybindings == KeyBindingTable.default()

    def test_invalid_toml_raises(self, config_file):
        """Test syntax errors are ConfigParseError."""
        config_file.parent.mkdir(parents=True)
        config_file.write_text('[playback\nseek_step = ', encoding='utf-8')

        with pytest.raises(ConfigParseError):
            Config(config_file).load()

    def test_reload_keeps_last_known_good(self, config_file):
        """Test a broken reload falls back to the previous settings."""
        config_file.parent.mkdir(parents=True)
        config_file.write_text('[playback]\nseek_step = 7\n', encoding='utf-8')
        config = Config(config_file)
        good = config.load()

        config_file.write_text('[playback]\nseek_step = "fast"\n', encoding='utf-8')
        settings, warning = config.reload()

        assert settings is good
        assert settings.seek_step == 7
        assert warning is not None and 'seek_step' in warning

    def test_reload_success(self, config_file):
        """Test a valid reload returns new settings and no warning."""
        config = Config(config_file)
        config.load()

        config_file.write_text('[keybindings]\nquit = "x"\n', encoding='utf-8')
        settings, warning = config.reload()

        assert warning is None
        assert settings.keybindings.lookup('x') == Action.QUIT
        assert settings.keybindings.lookup('q') is None


class TestParseSettings:
    """Test validation of parsed TOML."""

    def test_empty(self):
        assert parse_settings({}) == Settings()

    def test_unknown_keys_ignored(self):
        settings = parse_settings({
            'keybindings': {'dance': 'd'},
            'display': {'sparkles': True},
            'extra': {'a': 1},
        })
        assert settings == Settings()

    @pytest.mark.parametrize('playback', [
        {'seek_step': 0},
        {'seek_step': -3},
        {'seek_step': 2.5},
        {'seek_step': True},
        {'autoplay': 'yes'},
    ])
    def test_invalid_playback(self, playback):
        with pytest.raises(ConfigParseError):
            parse_settings({'playback': playback})

    @pytest.mark.parametrize('display', [
        {'show_app_title': 'no'},
        {'rounded_corners': 1},
        {'app_title_alignment': 'middle'},
        {'accent_color': 'purple'},
        {'playlist_color': 3},
        {'app_title_format': 42},
    ])
    def test_invalid_display(self, display):
        with pytest.raises(ConfigParseError):
            parse_settings({'display': display})

    def test_duplicate_binding(self):
        with pytest.raises(ConfigParseError):
            parse_settings({'keybindings': {'quit': 'space'}})

    def test_unknown_key_name(self):
        with pytest.raises(ConfigParseError):
            parse_settings({'keybindings': {'quit': 'hyperspace'}})

    def test_table_must_be_table(self):
        with pytest.raises(ConfigParseError):
            parse_settings({'display': 'fancy'})

    def test_colors_case_insensitive(self):
        settings = parse_settings({'display': {'accent_color': 'LightCyan', 'metadata_color': 'Grey'}})
        assert settings.display.accent_color == 'lightcyan'
        assert settings.display.metadata_color == 'grey'


class TestDisplayConfig:
    """Test DisplayConfig helpers."""

    def test_color_falls_back_to_accent(self):
        display = DisplayConfig(accent_color='green', metadata_color='red')
        assert display.color('metadata') == 'red'
        assert display.color('playlist') == 'green'
        assert display.color('app_title') == 'green'

    def test_title_substitutes_version(self):
        display = DisplayConfig()
        assert display.title('app') == f"┤ Sonido v{VERSION} ├"
        assert display.title('playlist') == "┤ Playlist ├"
