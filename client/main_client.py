#!/usr/bin/env python3
"""
Line Chat Client - Main Entry Point

Interactive console client: every line typed is sent to the server, every
line the server sends is printed.
"""

import argparse
import asyncio
import logging
import sys
import threading
from typing import Callable, List, Optional, TextIO

from client.utils.config import ClientConfig
from client.utils.logger import logger
from common.constants import (
    DEFAULT_HOST, DEFAULT_PORT, CONNECT_RETRY_ATTEMPTS, CLIENT_MAX_LINE_LENGTH,
    CLIENT_WELCOME, CLIENT_DISCONNECTED
)
from common.protocol_definitions import encode_line, decode_line


class ChatClient:
    """Console chat client."""

    def __init__(self, config: Optional[ClientConfig] = None,
                 output: Optional[Callable[[str], None]] = None,
                 input_stream: Optional[TextIO] = None):
        self.config = config or ClientConfig()
        self.output = output or print
        self.input_stream = input_stream or sys.stdin
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.running = False

    async def connect(self) -> bool:
        """Establish connection to the server with retry logic and exponential backoff."""
        delay = self.config.retry_delay
        for attempt in range(1, self.config.retry_attempts + 1):
            try:
                self.reader, self.writer = await asyncio.open_connection(
                    self.config.host, self.config.port, limit=self.config.max_line_length
                )
                logger.log_connection(self.config.host, self.config.port, True)
                self.running = True
                return True
            except OSError as e:
                logger.log_connection(self.config.host, self.config.port, False)
                logger.log_error("connection", e)
                if attempt < self.config.retry_attempts:
                    logger.info(f"Retrying connection in {delay}s (attempt {attempt}/{self.config.retry_attempts})...")
                    await asyncio.sleep(delay)
                    delay *= 2
        return False

    async def send_line(self, text: str) -> bool:
        """Send one line to the server."""
        if not self.writer:
            logger.error("Not connected to server")
            return False
        try:
            self.writer.write(encode_line(text))
            await self.writer.drain()
            logger.log_chat_sent(text)
            return True
        except (ConnectionError, OSError) as e:
            logger.log_error("send", e)
            return False

    async def listen_for_messages(self):
        """Print server lines until the server closes the connection."""
        while self.running:
            try:
                data = await self.reader.readline()
            except (ConnectionError, OSError, ValueError) as e:
                logger.log_error("receive", e)
                data = b''
            if not data:
                self.output(CLIENT_DISCONNECTED)
                self.running = False
                break
            self.output(decode_line(data))

    def _start_console_reader(self, queue: asyncio.Queue) -> threading.Thread:
        """Feed console lines into ``queue`` from a daemon thread; None marks EOF."""
        loop = asyncio.get_running_loop()

        def pump():
            try:
                for line in iter(self.input_stream.readline, ''):
                    loop.call_soon_threadsafe(queue.put_nowait, line)
                loop.call_soon_threadsafe(queue.put_nowait, None)
            except RuntimeError:
                # Event loop already closed
                pass

        thread = threading.Thread(target=pump, name='console-reader', daemon=True)
        thread.start()
        return thread

    async def send_console_input(self):
        """Send console lines until console EOF or a failed write."""
        queue: asyncio.Queue = asyncio.Queue()
        self._start_console_reader(queue)
        while self.running:
            line = await queue.get()
            if line is None:
                break
            if not await self.send_line(line.rstrip('\r\n')):
                break

    async def close(self):
        self.running = False
        if self.writer:
            try:
                self.writer.close()
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass
            self.writer = None

    async def interactive_mode(self) -> bool:
        """Run until the server disconnects or console input ends.

        Returns False if the connection could not be established.
        """
        if not await self.connect():
            return False

        self.output(CLIENT_WELCOME)

        listener_task = asyncio.create_task(self.listen_for_messages())
        input_task = asyncio.create_task(self.send_console_input())

        try:
            await asyncio.wait({listener_task, input_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (listener_task, input_task):
                task.cancel()
            await asyncio.gather(listener_task, input_task, return_exceptions=True)
            await self.close()
        return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Line Chat Client')
    parser.add_argument('--server-ip', type=str, default=DEFAULT_HOST,
                        help=f'Server IP address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    parser.add_argument('--retries', type=int, default=CONNECT_RETRY_ATTEMPTS,
                        help=f'Connection attempts before giving up (default: {CONNECT_RETRY_ATTEMPTS})')
    parser.add_argument('--max-line-length', type=int, default=CLIENT_MAX_LINE_LENGTH,
                        help=f'Longest line accepted from the server in bytes (default: {CLIENT_MAX_LINE_LENGTH})')
    parser.add_argument('--verbose', action='store_true',
                        help='Log diagnostics to stderr')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        logger.set_level(logging.DEBUG)

    client = ChatClient(ClientConfig(
        args.server_ip, args.port, retry_attempts=args.retries, max_line_length=args.max_line_length
    ))
    try:
        connected = asyncio.run(client.interactive_mode())
    except KeyboardInterrupt:
        return 0
    if not connected:
        logger.error(f"Could not connect to {args.server_ip}:{args.port}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
