"""
Server configuration module.

This module handles server-side configuration settings.
"""

import logging
from typing import Optional

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, BROADCAST_QUEUE_SIZE, WRITE_TIMEOUT,
    MAX_LINE_LENGTH, FANOUT_LOCKED, FANOUT_POLICIES
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 queue_size: int = BROADCAST_QUEUE_SIZE, fanout_policy: str = FANOUT_LOCKED,
                 write_timeout: float = WRITE_TIMEOUT, max_line_length: int = MAX_LINE_LENGTH,
                 logs_dir: Optional[str] = None, log_level: str = 'INFO'):
        self.host = host
        self.port = port

        # Broadcast hub settings
        self.queue_size = queue_size
        self.fanout_policy = fanout_policy
        self.write_timeout = write_timeout

        # Connection settings
        self.max_line_length = max_line_length

        # Logging configuration
        self.logs_dir = logs_dir
        self.log_level = log_level.upper()

    def validate(self):
        """Raise ValueError if any setting is out of range."""
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Port must be between 0 and 65535, got {self.port}")
        if self.queue_size < 0:
            raise ValueError(f"Queue size must not be negative, got {self.queue_size}")
        if self.fanout_policy not in FANOUT_POLICIES:
            raise ValueError(
                f"Unknown fan-out policy {self.fanout_policy!r}, expected one of {', '.join(FANOUT_POLICIES)}"
            )
        if self.write_timeout <= 0:
            raise ValueError(f"Write timeout must be positive, got {self.write_timeout}")
        if self.max_line_length <= 0:
            raise ValueError(f"Maximum line length must be positive, got {self.max_line_length}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level {self.log_level!r}")
        return self

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }

    def get_hub_settings(self):
        """Get broadcast hub settings."""
        return {
            'queue_size': self.queue_size,
            'fanout_policy': self.fanout_policy,
            'write_timeout': self.write_timeout
        }

    def get_log_settings(self):
        """Get logging settings."""
        return {
            'logs_dir': self.logs_dir,
            'log_level': self.log_level
        }
