"""
Client connection module.

Wraps the stream pair of one accepted TCP connection. The connection handler
is the only reader; the broadcast hub is the only writer.
"""

import asyncio
from typing import Optional

from common.constants import WRITE_TIMEOUT
from common.protocol_definitions import format_identifier, encode_line, decode_line


class SlowConsumerError(ConnectionError):
    """The peer has stopped reading and its send buffer is past the high-water mark."""


class ClientConnection:
    """One live TCP stream to a chat client."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 write_timeout: float = WRITE_TIMEOUT):
        self.reader = reader
        self.writer = writer
        self.write_timeout = write_timeout
        self.identifier = format_identifier(writer.get_extra_info('peername'))
        self.closed = False

    def __repr__(self):
        return f"<ClientConnection {self.identifier}{' closed' if self.closed else ''}>"

    async def read_line(self) -> Optional[str]:
        """
        Read the next line from the client.

        Returns None once the stream has ended. Raises ConnectionError,
        OSError or ValueError (line longer than the reader limit) on failure.
        """
        data = await self.reader.readline()
        if not data:
            return None
        return decode_line(data)

    async def send_line(self, text: str):
        """Write one line and wait for the transport to accept it.

        This is a single best-effort attempt bounded by ``write_timeout``.
        Failures propagate to the caller.

        Lines are skipped, not queued, while the peer is backlogged, so a
        client that stops reading cannot grow the server's memory without
        bound.
        """
        if self.closed:
            raise ConnectionResetError(f"Connection to {self.identifier} is closed")
        if self.backlogged():
            raise SlowConsumerError(f"Send buffer for {self.identifier} is full, skipping line")
        self.writer.write(encode_line(text))
        await asyncio.wait_for(self.writer.drain(), timeout=self.write_timeout)

    def backlogged(self) -> bool:
        """True while unsent data is above the transport's high-water mark."""
        transport = self.writer.transport
        if transport is None:
            return False
        high = transport.get_write_buffer_limits()[1]
        return transport.get_write_buffer_size() > high

    async def close(self):
        """Close the stream. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (ConnectionError, OSError):
            # Peer already reset the connection
            pass
