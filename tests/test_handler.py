#!/usr/bin/env python3
"""
Unit tests for server/chat/handler.py

Tests the per-connection lifecycle:
- Join notice after registration
- Empty lines are dropped, others relayed with the sender excluded
- Read failures lead to deregistration
- Leave notice after unregistering, exactly once
"""

import asyncio
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from server.chat.handler import ConnectionHandler, HandlerState
from server.chat.hub import BroadcastHub
from server.chat.registry import ConnectionRegistry, RegistryError
from tests.fakes import FakeConnection


class TestConnectionHandler(unittest.IsolatedAsyncioTestCase):
    """Test cases for ConnectionHandler."""

    async def asyncSetUp(self):
        self.registry = ConnectionRegistry()
        self.hub = BroadcastHub(self.registry)
        self.hub.start()
        self.observer = FakeConnection('10.0.0.9:9')
        await self.registry.register(self.observer, self.observer.identifier)

    async def asyncTearDown(self):
        await self.hub.stop()

    async def run_handler(self, conn):
        handler = ConnectionHandler(conn, self.registry, self.hub)
        await handler.run()
        await self.hub.flush()
        return handler

    async def test_full_session_is_bracketed_by_join_and_leave(self):
        conn = FakeConnection('10.0.0.1:1', reads=['one', 'two', None])

        handler = await self.run_handler(conn)

        self.assertEqual(self.observer.lines, [
            'User [10.0.0.1:1] joined',
            'User [10.0.0.1:1]: one',
            'User [10.0.0.1:1]: two',
            'User [10.0.0.1:1] left',
        ])
        self.assertEqual(conn.lines, [])
        self.assertEqual(handler.state, HandlerState.DEREGISTERED)
        self.assertTrue(conn.closed)
        self.assertNotIn(conn, self.registry)

    async def test_empty_lines_are_not_forwarded(self):
        conn = FakeConnection('10.0.0.1:1', reads=['', 'x', '', None])

        await self.run_handler(conn)

        self.assertEqual(self.observer.lines, [
            'User [10.0.0.1:1] joined',
            'User [10.0.0.1:1]: x',
            'User [10.0.0.1:1] left',
        ])

    async def test_whitespace_only_line_is_forwarded(self):
        conn = FakeConnection('10.0.0.1:1', reads=[' ', None])

        await self.run_handler(conn)

        self.assertIn('User [10.0.0.1:1]:  ', self.observer.lines)

    async def test_read_error_ends_session(self):
        for error in (ConnectionResetError('reset'), OSError('broken'), ValueError('line too long')):
            with self.subTest(error=error):
                self.observer.lines.clear()
                conn = FakeConnection('10.0.0.1:1', reads=['before', error, 'after'])

                handler = await self.run_handler(conn)

                self.assertEqual(self.observer.lines, [
                    'User [10.0.0.1:1] joined',
                    'User [10.0.0.1:1]: before',
                    'User [10.0.0.1:1] left',
                ])
                self.assertEqual(handler.state, HandlerState.DEREGISTERED)

    async def test_registration_precedes_join_notice(self):
        conn = FakeConnection('10.0.0.1:1')
        handler = ConnectionHandler(conn, self.registry, self.hub)

        await handler.register()

        self.assertEqual(handler.state, HandlerState.REGISTERED)
        self.assertIn(conn, self.registry)
        await self.hub.flush()
        self.assertEqual(self.observer.lines, ['User [10.0.0.1:1] joined'])

    async def test_deregister_runs_once(self):
        conn = FakeConnection('10.0.0.1:1')
        handler = ConnectionHandler(conn, self.registry, self.hub)
        await handler.register()

        await handler.deregister()
        await handler.deregister()
        await self.hub.flush()

        self.assertEqual(conn.close_calls, 1)
        self.assertEqual(self.observer.lines.count('User [10.0.0.1:1] left'), 1)

    async def test_cancelled_handler_still_deregisters(self):
        never = asyncio.Event()
        conn = FakeConnection('10.0.0.1:1')

        async def read_line():
            await never.wait()

        conn.read_line = read_line
        task = asyncio.create_task(ConnectionHandler(conn, self.registry, self.hub).run())
        await asyncio.sleep(0.01)
        self.assertIn(conn, self.registry)

        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        await self.hub.flush()

        self.assertNotIn(conn, self.registry)
        self.assertTrue(conn.closed)
        self.assertEqual(self.observer.lines[-1], 'User [10.0.0.1:1] left')

    async def test_cancel_during_blocked_join_notice_deregisters(self):
        hub = BroadcastHub(self.registry, queue_size=1)
        await hub.publish(self.observer, 'filler')
        conn = FakeConnection('10.0.0.1:1', reads=['never read'])

        task = asyncio.create_task(ConnectionHandler(conn, self.registry, hub).run())
        await asyncio.sleep(0.01)
        # Registered, join notice waiting for queue space
        self.assertIn(conn, self.registry)
        self.assertFalse(task.done())

        task.cancel()
        await asyncio.sleep(0.01)

        self.assertNotIn(conn, self.registry)
        self.assertTrue(conn.closed)

        # Let the leave notice through so the handler can finish
        hub.start()
        with self.assertRaises(asyncio.CancelledError):
            await asyncio.wait_for(task, 2.0)
        await hub.flush()
        await hub.stop()

        self.assertEqual(self.observer.lines, ['User [10.0.0.1:1] left'])
        self.assertEqual(conn.reads, ['never read'])

    async def test_double_registration_propagates(self):
        conn = FakeConnection('10.0.0.1:1')
        await self.registry.register(conn, conn.identifier)

        with self.assertRaises(RegistryError):
            await ConnectionHandler(conn, self.registry, self.hub).run()


if __name__ == '__main__':
    unittest.main()
