"""
Protocol definitions for the line chat service.

This module defines the broadcast event structure and the text formats used
on the wire between client and server components. The wire format is plain
UTF-8 text, one message per newline-terminated line.
"""

from dataclasses import dataclass
from typing import Any, Tuple

from common.constants import (
    ENCODING, LINE_DELIMITER, CHAT_LINE_FORMAT, JOIN_NOTICE_FORMAT, LEAVE_NOTICE_FORMAT
)


@dataclass(frozen=True)
class Message:
    """Broadcast event passed once through the hub queue.

    ``sender`` is the connection that must not receive ``content``. It is
    compared by identity, never by value.
    """
    sender: Any
    content: str


# Endpoint helpers

def format_identifier(peername: Tuple) -> str:
    """
    Build the display identifier for a remote endpoint.

    Accepts the address tuple returned by ``getpeername()`` for IPv4
    ``(host, port)`` or IPv6 ``(host, port, flowinfo, scope_id)`` sockets.
    IPv6 hosts are bracketed, IPv4-mapped IPv6 hosts are shown as IPv4.
    """
    if peername is None:
        # Peer reset before the address could be read
        return 'unknown'
    if isinstance(peername, str):
        # Unix socket paths and similar
        return peername
    host, port = peername[0], peername[1]
    if host.startswith('::ffff:') and '.' in host:
        return f"{host[7:]}:{port}"
    if ':' in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


# Message formatting

def create_chat_line(identifier: str, text: str) -> str:
    """Format a relayed chat line."""
    return CHAT_LINE_FORMAT.format(identifier=identifier, text=text)


def create_join_notice(identifier: str) -> str:
    """Format the notice broadcast when a client joins."""
    return JOIN_NOTICE_FORMAT.format(identifier=identifier)


def create_leave_notice(identifier: str) -> str:
    """Format the notice broadcast when a client leaves."""
    return LEAVE_NOTICE_FORMAT.format(identifier=identifier)


# Line framing

def encode_line(text: str) -> bytes:
    """Encode a line of text for the wire, appending the delimiter."""
    return text.encode(ENCODING) + LINE_DELIMITER


def decode_line(data: bytes) -> str:
    """
    Decode one line read from the wire.

    Strips the trailing newline and a carriage return before it. A final
    line without delimiter is decoded as-is. Invalid UTF-8 sequences are
    replaced rather than rejected.
    """
    if data.endswith(LINE_DELIMITER):
        data = data[:-1]
        if data.endswith(b'\r'):
            data = data[:-1]
    return data.decode(ENCODING, errors='replace')
