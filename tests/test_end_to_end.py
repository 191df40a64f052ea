#!/usr/bin/env python3
"""
End-to-end tests over a real WebSocket relay on an ephemeral port.
"""

import asyncio
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from websockets.asyncio.client import connect

from client.chat.chat_session import ClientSession
from client.main_client import ChatClientApp
from client.utils.config import ClientConfig
from common.constants import ConnectionState
from server.main_server import ChatRelayServer
from server.relay.relay_server import RelayServer
from server.utils.config import ServerConfig
from server.utils.logger import logger


TIMEOUT = 5
RELAY_TIME = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


class TestEndToEnd(unittest.IsolatedAsyncioTestCase):
    """Alice and Bob chatting through a live relay."""

    async def asyncSetUp(self):
        patcher = patch.object(logger, '_write_to_file')
        patcher.start()
        self.addCleanup(patcher.stop)

        config = ServerConfig(host='127.0.0.1', port=0)
        self.server = ChatRelayServer(config, RelayServer(config, clock=lambda: RELAY_TIME))
        await self.server.start()
        self.addAsyncCleanup(self.server.stop)

    async def join(self, identity):
        session = ClientSession(ClientConfig('127.0.0.1', self.server.port))
        self.addAsyncCleanup(session.leave)
        self.assertTrue(await session.join(identity))
        await session.wait_for_state(ConnectionState.CONNECTED, TIMEOUT)
        # The welcome notice proves the relay has registered the connection
        await session.wait_for_entries(1, TIMEOUT)
        return session

    async def wait_for_count(self, count):
        async def poll():
            while self.server.relay.connection_count != count:
                await asyncio.sleep(0.01)
        await asyncio.wait_for(poll(), TIMEOUT)

    async def test_alice_and_bob(self):
        alice = await self.join("Alice")
        bob = await self.join("Bob")

        self.assertTrue(await alice.send("hi"))
        await alice.wait_for_entries(2, TIMEOUT)
        await bob.wait_for_entries(2, TIMEOUT)

        for session, is_self in ((alice, True), (bob, False)):
            welcome, last = session.entries
            self.assertTrue(welcome.is_system)
            self.assertEqual(last.user, "Alice")
            self.assertEqual(last.text, "hi")
            self.assertEqual(last.timestamp, RELAY_TIME.isoformat())
            self.assertIs(last.is_self, is_self)

    async def test_send_empty_text(self):
        alice = await self.join("Alice")
        self.assertFalse(await alice.send(""))
        self.assertEqual(len(alice.entries), 1)

    async def test_left_client_gets_no_more_broadcasts(self):
        alice = await self.join("Alice")
        bob = await self.join("Bob")

        await bob.leave()
        await self.wait_for_count(1)

        self.assertTrue(await alice.send("still there?"))
        await alice.wait_for_entries(2, TIMEOUT)
        self.assertEqual(bob.entries, ())

    async def test_malformed_frame_does_not_disturb_relay(self):
        alice = await self.join("Alice")
        async with connect(f"ws://127.0.0.1:{self.server.port}") as raw:
            await raw.recv()
            await raw.send("this is not json")
            await raw.send('{"kind": "message", "user": "Mallory", "message": "valid"}')
            await alice.wait_for_entries(2, TIMEOUT)
        self.assertEqual(alice.entries[-1].user, "Mallory")
        self.assertFalse(alice.entries[-1].is_self)

    async def test_concurrent_sessions(self):
        sessions = [await self.join(f"user{i}") for i in range(5)]

        results = await asyncio.gather(*(s.send(f"msg from {s.identity}") for s in sessions))
        self.assertTrue(all(results))

        for session in sessions:
            await session.wait_for_entries(1 + len(sessions), TIMEOUT)
            chat = [e for e in session.entries if not e.is_system]
            self.assertEqual({e.text for e in chat}, {f"msg from user{i}" for i in range(5)})
            self.assertEqual([e.user for e in chat if e.is_self], [session.identity])
            self.assertTrue(all(e.timestamp == RELAY_TIME.isoformat() for e in chat))

    async def test_server_shutdown_disconnects_clients(self):
        alice = await self.join("Alice")
        await self.server.stop()
        await alice.wait_for_state(ConnectionState.DISCONNECTED, TIMEOUT)
        self.assertEqual(self.server.relay.connection_count, 0)

    async def test_unreachable_server(self):
        port = self.server.port
        await self.server.stop()
        session = ClientSession(ClientConfig('127.0.0.1', port))
        self.addAsyncCleanup(session.leave)
        await session.join("Alice")
        await session.wait_for_state(ConnectionState.DISCONNECTED, TIMEOUT)


class TestChatClientApp(unittest.IsolatedAsyncioTestCase):
    """Console front end commands against a live relay."""

    async def asyncSetUp(self):
        patcher = patch.object(logger, '_write_to_file')
        patcher.start()
        self.addCleanup(patcher.stop)

        self.server = ChatRelayServer(ServerConfig(host='127.0.0.1', port=0))
        await self.server.start()
        self.addAsyncCleanup(self.server.stop)

    async def test_commands(self):
        app = ChatClientApp(ClientConfig('127.0.0.1', self.server.port, 'Alice'))
        self.addAsyncCleanup(app.session.leave)

        self.assertTrue(await app.join())
        await app.handle_line("hello\n")
        await app.session.wait_for_entries(2, TIMEOUT)
        self.assertTrue(app.session.entries[-1].is_self)

        await app.handle_line("/leave")
        self.assertIs(app.session.state, ConnectionState.DISCONNECTED)

        await app.handle_line("/join")
        self.assertIs(app.session.state, ConnectionState.CONNECTED)

        app.running = True
        await app.handle_line("/quit")
        self.assertFalse(app.running)


if __name__ == '__main__':
    unittest.main()
