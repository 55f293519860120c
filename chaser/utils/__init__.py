"""Utility modules for the Neural Chase project."""

from .logger import get_logger, setup_logging, LogLevel, log_pursuit_metrics

__all__ = ['get_logger', 'setup_logging', 'LogLevel', 'log_pursuit_metrics']
