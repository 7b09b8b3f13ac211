"""
Chat module for server-side messaging functionality.

Handles:
- Connection registration
- Serialized broadcast fan-out
- Per-connection line reading
"""
