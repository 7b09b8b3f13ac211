#!/usr/bin/env python3
"""
Line Chat Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST             Bind address (default: 0.0.0.0)
    --port PORT             TCP port (default: 8080)
    --queue-size N          Broadcast queue capacity, 0 for unbounded (default: 1024)
    --fanout-policy POLICY  locked or snapshot (default: locked)
    --write-timeout SECS    Time allowed for one write during fan-out (default: 5.0)
    --max-line-length N     Longest accepted line in bytes (default: 65536)
    --logs-dir DIR          Also write server.log into DIR
    --log-level LEVEL       Logging level (default: INFO)
"""

import sys

from server.main_server import main


if __name__ == "__main__":
    sys.exit(main())
