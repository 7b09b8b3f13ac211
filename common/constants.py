"""
Shared constants for the line chat service.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 8080

# Line framing
ENCODING = 'utf-8'
LINE_DELIMITER = b'\n'
MAX_LINE_LENGTH = 64 * 1024  # bytes, longer lines end the connection
# Room for the "User [<endpoint>]: " prefix the server adds when relaying
RELAY_PREFIX_ALLOWANCE = 256
CLIENT_MAX_LINE_LENGTH = MAX_LINE_LENGTH + RELAY_PREFIX_ALLOWANCE

# Broadcast hub
BROADCAST_QUEUE_SIZE = 1024  # events, 0 = unbounded
WRITE_TIMEOUT = 5.0  # seconds per best-effort write during fan-out

# Fan-out policies
FANOUT_LOCKED = 'locked'
FANOUT_SNAPSHOT = 'snapshot'
FANOUT_POLICIES = (FANOUT_LOCKED, FANOUT_SNAPSHOT)

# Client
CONNECT_RETRY_ATTEMPTS = 1
CONNECT_RETRY_DELAY = 1.0  # seconds, doubled after each failed attempt

# Logging
LOG_DIR = 'logs'
SERVER_LOG_FILE = 'server.log'

# Message templates
CHAT_LINE_FORMAT = 'User [{identifier}]: {text}'
JOIN_NOTICE_FORMAT = 'User [{identifier}] joined'
LEAVE_NOTICE_FORMAT = 'User [{identifier}] left'

# Console text
CLIENT_WELCOME = 'Connected to chat server. Type a message and press Enter.'
CLIENT_DISCONNECTED = 'Disconnected from server.'
