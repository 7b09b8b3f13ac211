#!/usr/bin/env python3
"""
Line Chat Server - Main Entry Point

Accepts TCP connections and relays every line a client sends to all other
connected clients, together with join and leave notices.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, BROADCAST_QUEUE_SIZE, WRITE_TIMEOUT,
    MAX_LINE_LENGTH, FANOUT_LOCKED, FANOUT_POLICIES
)
from server.chat.handler import handle_connection
from server.chat.hub import BroadcastHub
from server.chat.registry import ConnectionRegistry
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatServer:
    """Acceptor that owns the registry and the broadcast hub."""

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.registry = ConnectionRegistry()
        self.hub: Optional[BroadcastHub] = None
        self.server: Optional[asyncio.AbstractServer] = None
        self.handlers = set()

    @property
    def port(self) -> Optional[int]:
        """Port actually bound, useful when configured with port 0."""
        if self.server is None or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[1]

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Spawn a handler task for an accepted connection and return immediately."""
        task = asyncio.create_task(
            handle_connection(reader, writer, self.registry, self.hub, self.config.write_timeout)
        )
        self.handlers.add(task)
        task.add_done_callback(self._handler_done)

    def _handler_done(self, task: asyncio.Task):
        self.handlers.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.log_error("connection handler", task.exception())

    async def start(self):
        """Bind the listener and start the hub worker. Bind errors propagate."""
        self.hub = BroadcastHub(
            self.registry,
            queue_size=self.config.queue_size,
            fanout_policy=self.config.fanout_policy
        )
        self.hub.start()

        try:
            self.server = await asyncio.start_server(
                self.handle_client,
                self.config.host,
                self.config.port,
                limit=self.config.max_line_length
            )
        except OSError:
            await self.hub.stop()
            raise

        addr = ', '.join(str(sock.getsockname()) for sock in self.server.sockets)
        logger.info(f"Server listening on {addr}")

    async def serve_forever(self):
        """Start and accept connections until cancelled."""
        if self.server is None:
            await self.start()
        try:
            await self.server.serve_forever()
        finally:
            await self.stop()

    async def stop(self):
        """Stop accepting, cancel handlers and the hub worker."""
        server, self.server = self.server, None
        if server is not None:
            server.close()

        # Handlers close their connections; wait_closed() waits for that
        handlers = list(self.handlers)
        for task in handlers:
            task.cancel()
        if handlers:
            await asyncio.gather(*handlers, return_exceptions=True)

        if server is not None:
            await server.wait_closed()

        if self.hub is not None:
            await self.hub.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Line Chat Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port to listen on (default: {DEFAULT_PORT})')
    parser.add_argument('--queue-size', type=int, default=BROADCAST_QUEUE_SIZE,
                        help=f'Broadcast queue capacity, 0 for unbounded (default: {BROADCAST_QUEUE_SIZE})')
    parser.add_argument('--fanout-policy', choices=FANOUT_POLICIES, default=FANOUT_LOCKED,
                        help=f'Hold the registry lock while writing, or write from a snapshot (default: {FANOUT_LOCKED})')
    parser.add_argument('--write-timeout', type=float, default=WRITE_TIMEOUT,
                        help=f'Seconds allowed for one write during fan-out (default: {WRITE_TIMEOUT})')
    parser.add_argument('--max-line-length', type=int, default=MAX_LINE_LENGTH,
                        help=f'Longest accepted line in bytes (default: {MAX_LINE_LENGTH})')
    parser.add_argument('--logs-dir', type=str, default=None,
                        help='Also write server.log into this directory')
    parser.add_argument('--log-level', type=str, default='INFO',
                        help='Logging level (default: INFO)')
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        queue_size=args.queue_size,
        fanout_policy=args.fanout_policy,
        write_timeout=args.write_timeout,
        max_line_length=args.max_line_length,
        logs_dir=args.logs_dir,
        log_level=args.log_level
    ).validate()


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run the server until interrupted."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    logger.set_level(logging.getLevelName(config.log_level))
    if config.logs_dir:
        logger.enable_file_logging(config.logs_dir)

    server = ChatServer(config)
    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except OSError as e:
        logger.error(f"Could not start server on {config.host}:{config.port}")
        logger.log_error("server", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
