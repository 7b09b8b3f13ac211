"""
Client configuration module.

This module handles client-side configuration settings.
"""

from common.constants import (
    DEFAULT_HOST, DEFAULT_PORT, CONNECT_RETRY_ATTEMPTS, CONNECT_RETRY_DELAY, CLIENT_MAX_LINE_LENGTH
)


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 retry_attempts: int = CONNECT_RETRY_ATTEMPTS, retry_delay: float = CONNECT_RETRY_DELAY,
                 max_line_length: int = CLIENT_MAX_LINE_LENGTH):
        self.host = host
        self.port = port

        # Connection settings
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay

        # Longest relayed line accepted from the server, prefix included
        self.max_line_length = max_line_length

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }
