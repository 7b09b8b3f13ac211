"""
Server package for the line chat service.

This package contains all server-side functionality including:
- Connection acceptance
- Connection registry and broadcast hub
- Configuration and utilities
"""
