"""
Chat session module.

This module handles the client-side connection lifecycle and the
classification of inbound messages into display entries.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from client.utils.config import ClientConfig
from client.utils.logger import logger
from common.constants import ConnectionState, MessageKinds, MAX_MESSAGE_SIZE, SYSTEM_USER
from common.protocol_definitions import (
    Message, MalformedMessageError, parse_message, encode_message, create_chat_message
)


@dataclass(frozen=True)
class ChatEntry:
    """Display-ready chat entry."""
    kind: str
    user: str
    text: str
    timestamp: Optional[str]
    is_self: bool
    is_system: bool = False


async def open_websocket(url: str, timeout: float):
    """Default connector: open a WebSocket to the relay."""
    return await connect(url, open_timeout=timeout, max_size=MAX_MESSAGE_SIZE)


class ClientSession:
    """
    Client-side session state machine.

    States move ``disconnected -> connecting -> connected`` on ``join`` and a
    successful open, and back to ``disconnected`` on open failure, close,
    error or ``leave``. A dropped connection is not retried; the caller joins
    again.

    Every ``join`` starts a new generation. Open, close and message events
    that belong to an older generation are discarded, so a connection that
    finishes opening after ``leave`` cannot revive the session.
    """

    def __init__(self, config: Optional[ClientConfig] = None,
                 connector: Callable[[str, float], Awaitable] = open_websocket):
        self.config = config or ClientConfig()
        self._connector = connector
        self._lock = asyncio.Lock()
        self._changed = asyncio.Condition(self._lock)
        self._state = ConnectionState.DISCONNECTED
        self._identity: Optional[str] = None
        self._entries: List[ChatEntry] = []
        self._connection = None
        self._listener_task: Optional[asyncio.Task] = None
        self._generation = 0
        self.message_handler: Optional[Callable[[ChatEntry], None]] = None
        self.state_handler: Optional[Callable[[ConnectionState], None]] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def entries(self) -> Tuple[ChatEntry, ...]:
        """Received entries in arrival order."""
        return tuple(self._entries)

    def set_message_handler(self, handler: Callable[[ChatEntry], None]):
        """Set the handler called for every appended entry."""
        self.message_handler = handler

    def set_state_handler(self, handler: Callable[[ConnectionState], None]):
        """Set the handler called on every state change."""
        self.state_handler = handler

    async def join(self, identity: str) -> bool:
        """
        Start connecting as ``identity``.

        Returns False without side effects unless the session is
        disconnected. The connection attempt runs in the background; use
        ``wait_for_state`` to observe its outcome.
        """
        if not isinstance(identity, str) or not identity.strip():
            raise ValueError("identity must be a non-empty string")

        async with self._lock:
            if self._state is not ConnectionState.DISCONNECTED:
                logger.warning(f"Ignoring join while {self._state.value}")
                return False
            self._generation += 1
            self._identity = identity.strip()
            self._set_state_locked(ConnectionState.CONNECTING)
            self._listener_task = asyncio.create_task(self._run(self._generation))
        return True

    async def send(self, text: str) -> bool:
        """Send a chat message. Fire-and-forget; returns whether it was transmitted."""
        text = (text or '').strip()
        if not text:
            return False

        async with self._lock:
            if self._state is not ConnectionState.CONNECTED or self._connection is None:
                logger.warning("Not connected to server")
                return False
            connection = self._connection
            message = create_chat_message(self._identity, text)

        try:
            await connection.send(encode_message(message))
        except (ConnectionClosed, OSError) as e:
            logger.log_error("send", e)
            return False
        logger.log_chat_sent(text)
        return True

    async def on_inbound_raw(self, payload) -> Optional[ChatEntry]:
        """Classify a raw payload and append it if it is displayable."""
        return await self._receive(payload, self._generation)

    async def leave(self):
        """Drop the connection, entries and identity. Safe to call repeatedly."""
        async with self._lock:
            self._generation += 1
            task, self._listener_task = self._listener_task, None
            connection, self._connection = self._connection, None
            self._identity = None
            self._entries.clear()
            self._set_state_locked(ConnectionState.DISCONNECTED)

        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if connection is not None:
            await self._close_quietly(connection)

    async def wait_for_state(self, state: ConnectionState, timeout: Optional[float] = None):
        """Wait until the session reaches ``state``."""
        await self._wait_for(lambda: self._state is state, timeout)

    async def wait_for_entries(self, count: int, timeout: Optional[float] = None):
        """Wait until at least ``count`` entries have been received."""
        await self._wait_for(lambda: len(self._entries) >= count, timeout)

    async def _wait_for(self, predicate, timeout):
        async def waiter():
            async with self._changed:
                await self._changed.wait_for(predicate)
        await asyncio.wait_for(waiter(), timeout)

    async def _run(self, generation: int):
        """Open the connection and pump inbound frames until it ends."""
        try:
            connection = await self._connector(self.config.url, self.config.connect_timeout)
        except (OSError, InvalidHandshake, InvalidURI, asyncio.TimeoutError) as e:
            logger.log_connection(self.config.url, False)
            logger.log_error("connect", e)
            await self._detach(generation)
            return

        async with self._lock:
            current = generation == self._generation
            if current:
                self._connection = connection
                self._set_state_locked(ConnectionState.CONNECTED)
        if not current:
            await self._close_quietly(connection)
            return

        logger.log_connection(self.config.url, True)
        try:
            async for payload in connection:
                await self._receive(payload, generation)
        except ConnectionClosed as e:
            logger.warning(f"Connection lost: {e}")
        except OSError as e:
            logger.log_error("receive", e)
        finally:
            await self._detach(generation)

    async def _detach(self, generation: int):
        async with self._lock:
            if generation != self._generation:
                return
            connection, self._connection = self._connection, None
            self._listener_task = None
            if self._state is not ConnectionState.DISCONNECTED:
                logger.info("Disconnected from server")
            self._set_state_locked(ConnectionState.DISCONNECTED)

        if connection is not None:
            await self._close_quietly(connection)

    async def _receive(self, payload, generation: int) -> Optional[ChatEntry]:
        try:
            message = parse_message(payload)
        except MalformedMessageError as e:
            logger.warning(f"Dropped malformed message: {e}")
            return None

        async with self._lock:
            if generation != self._generation:
                return None
            entry = self._classify(message)
            if entry is None:
                return None
            self._entries.append(entry)
            self._changed.notify_all()

        if self.message_handler:
            try:
                self.message_handler(entry)
            except Exception as e:
                logger.log_error("message handler", e)
        return entry

    def _classify(self, message: Message) -> Optional[ChatEntry]:
        if message.kind == MessageKinds.SYSTEM:
            return ChatEntry(
                kind=message.kind,
                user=SYSTEM_USER,
                text=message.text or '',
                timestamp=message.timestamp,
                is_self=False,
                is_system=True
            )
        if message.kind == MessageKinds.REGISTER:
            logger.debug(f"User registered: {message.user}")
            return None
        if message.kind == MessageKinds.MESSAGE:
            return ChatEntry(
                kind=message.kind,
                user=message.user,
                text=message.text,
                timestamp=message.timestamp,
                is_self=message.user == self._identity
            )
        logger.warning(f"Unknown message kind: {message.kind}")
        return None

    def _set_state_locked(self, state: ConnectionState):
        changed = state is not self._state
        self._state = state
        self._changed.notify_all()
        if changed and self.state_handler:
            try:
                self.state_handler(state)
            except Exception as e:
                logger.log_error("state handler", e)

    async def _close_quietly(self, connection):
        try:
            await connection.close()
        except (ConnectionClosed, OSError) as e:
            logger.debug(f"Close failed: {e}")
