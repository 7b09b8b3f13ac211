"""Constants and wire format shared by client and server."""
