"""Linux-native logging for sonido.

Log records go to a rotating file under the XDG data directory. Warnings and
errors are mirrored to stderr, except while the full-screen terminal session
owns the screen (stderr output would corrupt the frame).
"""

# ============================================================================
# Standard Library Imports (alphabetical)
# ============================================================================
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

# ============================================================================
# Third-Party Imports (alphabetical, with version requirements)
# ============================================================================
# None

# ============================================================================
# Local Imports (grouped by package, alphabetical)
# ============================================================================
# None

LOGGER_NAME = "sonido"


class LinuxLogger:
    """
    Linux-native logger with file and console output.

    Supports:
    - File logging to XDG data directory
    - Console output for warnings and errors (can be muted)
    - Environment variable control (SONIDO_DEBUG)
    """

    _instance: Optional["LinuxLogger"] = None
    _initialized: bool = False

    def __init__(self, log_dir: Optional[Path] = None):
        """
        Initialize the logger.

        Args:
            log_dir: Directory for log files (defaults to XDG data dir)
        """
        if LinuxLogger._initialized:
            return

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(
            logging.DEBUG if os.getenv("SONIDO_DEBUG") else logging.INFO
        )
        self.console_handler: Optional[logging.Handler] = None

        # Prevent duplicate handlers
        if self.logger.handlers:
            return

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # Console handler (stderr)
        self.console_handler = logging.StreamHandler(sys.stderr)
        self.console_handler.setLevel(logging.WARNING)
        self.console_handler.setFormatter(formatter)
        self.logger.addHandler(self.console_handler)

        if log_dir is None:
            xdg_data = os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share")
            log_dir = Path(xdg_data) / LOGGER_NAME / "logs"

        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / "sonido.log", maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
            )
        except OSError as e:
            self.logger.warning("File logging disabled (%s): %s", log_dir, e)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        LinuxLogger._instance = self
        LinuxLogger._initialized = True

    @classmethod
    def get_logger(cls, name: str = LOGGER_NAME) -> logging.Logger:
        """
        Get a logger instance.

        Args:
            name: Logger name (creates child logger)

        Returns:
            Logger instance
        """
        if cls._instance is None:
            cls._instance = cls()

        if name == LOGGER_NAME:
            return cls._instance.logger
        return cls._instance.logger.getChild(name)

    @classmethod
    def set_console_enabled(cls, enabled: bool) -> None:
        """
        Mute or restore the stderr handler.

        Args:
            enabled: False while the terminal UI is drawing
        """
        if cls._instance is None:
            cls._instance = cls()
        handler = cls._instance.console_handler
        if handler is not None:
            handler.setLevel(logging.WARNING if enabled else logging.CRITICAL + 1)


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger instance."""
    return LinuxLogger.get_logger(name)
