"""
Client package for the line chat service.

This package contains the interactive console client and its configuration
and logging utilities.
"""
