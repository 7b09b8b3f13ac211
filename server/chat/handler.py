"""
Connection handler module.

Runs the lifecycle of one client connection: register, relay lines to the
broadcast hub, deregister.
"""

import asyncio
import enum

from common.protocol_definitions import create_chat_line, create_join_notice, create_leave_notice
from server.chat.connection import ClientConnection
from server.chat.hub import BroadcastHub
from server.chat.registry import ConnectionRegistry
from server.utils.logger import logger


class HandlerState(enum.Enum):
    ACCEPTED = 'accepted'
    REGISTERED = 'registered'
    READING = 'reading'
    DEREGISTERED = 'deregistered'


class ConnectionHandler:
    """Per-connection worker.

    The handler never writes to other clients itself; everything it wants
    delivered is submitted to the hub with its own connection as sender.
    """

    def __init__(self, conn: ClientConnection, registry: ConnectionRegistry, hub: BroadcastHub):
        self.conn = conn
        self.registry = registry
        self.hub = hub
        self.state = HandlerState.ACCEPTED

    @property
    def identifier(self) -> str:
        return self.conn.identifier

    async def run(self):
        """Drive the connection from Accepted to Deregistered."""
        try:
            await self.register()
            await self.read_loop()
        finally:
            # Still ACCEPTED means the registry never took this connection
            if self.state is not HandlerState.ACCEPTED:
                await self.deregister()

    async def register(self):
        """Accepted -> Registered: add to the registry and announce the join."""
        await self.registry.register(self.conn, self.identifier)
        self.state = HandlerState.REGISTERED
        logger.log_join(self.identifier, len(self.registry))
        await self.hub.publish(self.conn, create_join_notice(self.identifier))

    async def read_loop(self):
        """Registered -> Reading: relay each non-empty line until the stream fails."""
        self.state = HandlerState.READING
        while True:
            try:
                line = await self.conn.read_line()
            except (ConnectionError, OSError, ValueError) as e:
                # Reset, broken pipe or a line over the reader limit
                logger.debug(f"Read from {self.identifier} failed: {e!r}")
                return
            if line is None:
                return
            if not line:
                continue
            logger.log_chat(self.identifier, line)
            await self.hub.publish(self.conn, create_chat_line(self.identifier, line))

    async def deregister(self):
        """Reading -> Deregistered: close, unregister, announce the leave. Runs once."""
        if self.state is HandlerState.DEREGISTERED:
            return
        self.state = HandlerState.DEREGISTERED
        await self.conn.close()
        await self.registry.unregister(self.conn)
        logger.log_leave(self.identifier, len(self.registry))
        await self.hub.publish(self.conn, create_leave_notice(self.identifier))


async def handle_connection(reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                            registry: ConnectionRegistry, hub: BroadcastHub,
                            write_timeout: float):
    """Wrap an accepted stream pair and run its handler to completion."""
    conn = ClientConnection(reader, writer, write_timeout=write_timeout)
    logger.log_connection(conn.identifier)
    await ConnectionHandler(conn, registry, hub).run()
