"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from pathlib import Path
from typing import Optional

from common.constants import SERVER_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('line_chat_server')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        # Create formatter
        self.formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(self.formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)
        self.file_handler: Optional[logging.FileHandler] = None

    def set_level(self, log_level: int):
        """Change the level of the logger and all of its handlers."""
        self.logger.setLevel(log_level)
        for handler in self.logger.handlers:
            handler.setLevel(log_level)

    def enable_file_logging(self, logs_dir: str):
        """Also write log records to ``<logs_dir>/server.log``."""
        if self.file_handler is not None:
            return
        path = Path(logs_dir)
        path.mkdir(parents=True, exist_ok=True)

        self.file_handler = logging.FileHandler(path / SERVER_LOG_FILE, encoding='utf-8')
        self.file_handler.setLevel(self.logger.level)
        self.file_handler.setFormatter(self.formatter)
        self.logger.addHandler(self.file_handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, identifier: str):
        """Log client connection."""
        self.info(f"New connection from {identifier}")

    def log_join(self, identifier: str, count: int):
        """Log client registration."""
        self.info(f"User [{identifier}] joined ({count} connected)")

    def log_leave(self, identifier: str, count: int):
        """Log client deregistration."""
        self.info(f"User [{identifier}] left ({count} connected)")

    def log_chat(self, identifier: str, text: str):
        """Log chat message."""
        self.debug(f"Chat from {identifier}: {text}")

    def log_broadcast(self, content: str, recipients: int):
        self.debug(f"[BROADCAST] {content!r} delivered to {recipients} client(s)")

    def log_delivery_failure(self, identifier: str, error: BaseException):
        """Log a failed write to one recipient during fan-out."""
        self.warning(f"Failed to deliver to {identifier}: {error!r}")

    def log_error(self, operation: str, error: BaseException):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ServerLogger()
