#!/usr/bin/env python3
"""Sonido - Main entry point."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from core.audio_player import GstAudioOutput
from core.config import APP_NAME, VERSION, Config, Settings
from core.exceptions import (
    ConfigParseError,
    InvalidPath,
    NoTracksFound,
    OutputDeviceError,
)
from core.logging import LinuxLogger, get_logger
from core.music_library import TrackCatalog
from core.playback_controller import PlaybackController
from core.playback_engine import PlaybackEngine
from core.playlist_manager import PlaylistManager
from ui.renderer import TerminalRenderer
from ui.terminal import TerminalSession

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_PATH = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Keyboard-driven terminal audio player.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        type=Path,
        help="Directory to play (default: current directory)",
    )
    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Include audio files in subdirectories",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {VERSION}",
    )
    return parser


def _fail(error: Exception, code: int) -> int:
    logger.error("%s", error)
    print(f"{APP_NAME}: {error}", file=sys.stderr)
    return code


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Initialize config (paths) and logging before anything logs to file
    config = Config()
    LinuxLogger(log_dir=config.log_dir)

    startup_warning = None
    try:
        settings = config.load()
    except ConfigParseError as e:
        logger.warning("Using default settings: %s", e)
        settings = Settings()
        startup_warning = f"Config error: {e}"

    try:
        catalog = TrackCatalog.from_directory(args.path, recursive=args.recursive)
    except InvalidPath as e:
        return _fail(e, EXIT_INVALID_PATH)
    except NoTracksFound as e:
        return _fail(e, EXIT_FAILURE)

    try:
        output = GstAudioOutput()
    except OutputDeviceError as e:
        return _fail(e, EXIT_FAILURE)

    playlist = PlaylistManager(catalog.tracks)
    engine = PlaybackEngine(output, settings.seek_step)
    controller = PlaybackController(playlist, engine, config, settings)

    try:
        controller.start()
        if startup_warning:
            controller.set_status(startup_warning, "warning")

        with TerminalSession() as session:
            renderer = TerminalRenderer(session.term)
            controller.run(session.read_key, renderer.draw)
    except (NoTracksFound, OutputDeviceError) as e:
        return _fail(e, EXIT_FAILURE)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_INTERRUPTED
    finally:
        controller.shutdown()

    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
