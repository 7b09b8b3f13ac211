#!/usr/bin/env python3
"""
Line Chat Client - Main Entry Point

Usage:
    python main_client.py [--server-ip HOST] [--port PORT] [--retries N] [--verbose]

Type a line and press Enter to send it. The client exits when the server
closes the connection or console input ends.
"""

import sys

from client.main_client import main


if __name__ == "__main__":
    sys.exit(main())
