"""
Centralized logging infrastructure for Neural Chase.

Usage:
    from chaser.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Pursuer reset")
    logger.debug("loss=0.0123")
    logger.warning("Non-finite loss")

Configuration:
    Set LOG_LEVEL in config.py (or pass --log-level to main.py):
    - DEBUG: Every training step's loss
    - INFO: Level changes, resets, game over (default)
    - WARNING: Numeric divergence only
    - ERROR: Errors only
"""

import logging
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = 'chaser'


class LogLevel(Enum):
    """Log levels for configuration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    @classmethod
    def from_name(cls, name: str) -> 'LogLevel':
        """Look up a level by its (case-insensitive) name."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown log level {name!r}; expected one of {[m.name for m in cls]}"
            ) from None


# Module-level state
_initialized = False
_file_handler: Optional[logging.FileHandler] = None


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        # Color a copy so the file handler still sees the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def setup_logging(
    log_dir: str = 'logs',
    level: LogLevel = LogLevel.INFO,
    console_output: bool = True,
    file_output: bool = False,
    log_filename: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Initialize the logging system.

    Modules grab their loggers at import time, which initializes logging
    with defaults; entry points pass force=True to apply their own settings.

    Args:
        log_dir: Directory for log files
        level: Minimum log level to capture
        console_output: Whether to output to console
        file_output: Whether to output to file
        log_filename: Custom log filename (default: chase_YYYYMMDD_HHMMSS.log)
        force: Reconfigure even if logging was already initialized
    """
    global _initialized, _file_handler

    if _initialized and not force:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.value)
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()
    _file_handler = None

    fmt = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level.value)
        console_handler.setFormatter(ColoredFormatter(fmt, use_colors=True))
        root_logger.addHandler(console_handler)

    if file_output:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        if log_filename is None:
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            log_filename = f'chase_{timestamp}.log'

        _file_handler = logging.FileHandler(path / log_filename, mode='a', encoding='utf-8')
        _file_handler.setLevel(logging.DEBUG)  # Capture everything in file
        _file_handler.setFormatter(logging.Formatter(fmt))
        root_logger.addHandler(_file_handler)

    _initialized = True
    root_logger.debug(f"Logging initialized (level={level.name}, file={file_output})")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance under the 'chaser' namespace

    Example:
        logger = get_logger(__name__)
        logger.info("Message")
    """
    # Auto-initialize with defaults if not already done
    if not _initialized:
        setup_logging()

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')


def get_log_path() -> Optional[Path]:
    """Get the current log file path."""
    if _file_handler is not None:
        return Path(_file_handler.baseFilename)
    return None


def log_pursuit_metrics(
    frame: int,
    level: int,
    knowledge: int,
    avg_loss: float,
    last_loss: Optional[float] = None,
    train_steps: Optional[int] = None,
) -> None:
    """
    Log pursuer progress in a consistent format.

    Args:
        frame: Current simulation frame
        level: Pursuer level
        knowledge: Ticks since the last level change
        avg_loss: Mean of the rolling loss history
        last_loss: Most recent training loss (if any)
        train_steps: Training steps taken so far (if available)
    """
    logger = get_logger('pursuit')

    metrics = [
        f"frame={frame}",
        f"level={level}",
        f"knowledge={knowledge}",
        f"avg_loss={avg_loss:.6f}",
    ]

    if last_loss is not None:
        metrics.append(f"loss={last_loss:.6f}")
    if train_steps is not None:
        metrics.append(f"train_steps={train_steps}")

    logger.info(" | ".join(metrics))
