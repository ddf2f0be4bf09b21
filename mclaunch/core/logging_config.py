"""Logging configuration for mclaunch."""

import logging
import logging.handlers
import sys
from typing import List, Optional, Sequence

from .config import LoggingConfig


class LauncherFormatter(logging.Formatter):
    """Custom formatter for mclaunch logs."""

    def __init__(self, format_string: str):
        """Initialize the formatter.

        Args:
            format_string: Format string for log messages
        """
        super().__init__(format_string)


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """Set up logging configuration for mclaunch.

    Args:
        config: Logging configuration object. If None, uses default configuration.
    """
    if config is None:
        config = LoggingConfig()

    numeric_level = getattr(logging, config.level.upper(), logging.INFO)

    root_logger = logging.getLogger("mclaunch")
    root_logger.setLevel(numeric_level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = LauncherFormatter(config.format_string)

    if config.console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if config.file_path:
        file_handler = logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    root_logger.propagate = False

    root_logger.debug(f"Logging initialized - Level: {config.level}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific component.

    Args:
        name: Logger name (will be prefixed with 'mclaunch.')

    Returns:
        Logger instance
    """
    return logging.getLogger(f"mclaunch.{name}")


def log_setting_change(
    logger: logging.Logger, name: str, old: Optional[str], new: Optional[str]
) -> None:
    """Log a single accepted setting change."""
    old_str = old if old is not None else "<unset>"
    new_str = new if new is not None else "<unset>"
    logger.info(f"⚙️  Setting {name}: {old_str} -> {new_str}")


def log_process_event(
    logger: logging.Logger,
    event: str,
    argv: Optional[Sequence[str]] = None,
    pid: Optional[int] = None,
    returncode: Optional[int] = None,
) -> None:
    """Log server process lifecycle events.

    Args:
        logger: Logger instance
        event: One of start, exit, terminate, kill
        argv: Command line, for start events
        pid: Child process id
        returncode: Exit status, for exit events
    """
    pid_str = f" (pid {pid})" if pid is not None else ""
    if event == "start":
        command: List[str] = list(argv or [])
        logger.info(f"🚀 Starting server{pid_str}: {' '.join(command)}")
    elif event == "exit":
        status = "✅" if returncode == 0 else "❌"
        logger.info(f"{status} Server exited{pid_str} with code {returncode}")
    elif event == "terminate":
        logger.warning(f"🛑 Terminating server{pid_str}")
    elif event == "kill":
        logger.warning(f"💀 Killing unresponsive server{pid_str}")
    else:
        logger.info(f"📋 Server{pid_str}: {event}")
