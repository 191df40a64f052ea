"""
Relay server module.

This module keeps the connection registry and fans chat messages out to it.
"""

import asyncio
from datetime import datetime
from typing import Callable, Optional

from websockets.exceptions import ConnectionClosed

from common.constants import MessageKinds
from common.protocol_definitions import (
    Message, MalformedMessageError, parse_message, encode_message, create_system_message, utc_now
)
from server.relay.registry import ConnectionRegistry
from server.utils.config import ServerConfig
from server.utils.logger import logger


class RelayServer:
    """
    Server-side relay.

    Every chat message is stamped with the relay's receipt time and sent to
    every registered connection, the sender included. Clients tell their own
    messages apart by display name, so the relay never filters recipients.

    Each send is bounded by ``config.send_timeout``. A recipient whose send
    times out or fails is treated as a slow or broken consumer: it is removed
    from the registry and closed, and the other recipients are unaffected.
    """

    def __init__(self, config: Optional[ServerConfig] = None, clock: Callable[[], datetime] = utc_now):
        self.config = config or ServerConfig()
        self.registry = ConnectionRegistry()
        self.clock = clock
        self.closing = False

    @property
    def connection_count(self) -> int:
        return len(self.registry)

    async def accept(self, connection) -> bool:
        """Register a new connection and greet it."""
        if self.closing:
            logger.warning(f"Rejecting connection from {connection.remote_address}: relay is shutting down")
            await self._close_quietly(connection)
            return False

        await self.registry.add(connection)
        logger.log_connection(connection.remote_address, self.connection_count)

        welcome = create_system_message(self.config.welcome_text).stamped(self.clock())
        await self.send_to(connection, encode_message(welcome))
        return True

    async def on_inbound(self, connection, payload) -> int:
        """
        Process one inbound payload.

        Returns the number of connections the payload was delivered to.
        """
        if self.closing:
            return 0
        if not await self.registry.contains(connection):
            logger.debug(f"Ignoring payload from unregistered connection {connection.remote_address}")
            return 0

        try:
            message = parse_message(payload)
        except MalformedMessageError as e:
            logger.log_malformed(connection.remote_address, e)
            return 0

        if message.kind == MessageKinds.MESSAGE:
            stamped = message.stamped(self.clock())
            delivered = await self.broadcast(stamped)
            logger.log_relay(stamped.user, stamped.text, delivered)
            return delivered

        if message.kind == MessageKinds.REGISTER:
            logger.debug(f"Register from {connection.remote_address}: {message.user}")
        else:
            logger.warning(f"Unknown message kind '{message.kind}' from {connection.remote_address}")
        return 0

    async def broadcast(self, message: Message) -> int:
        """Send a message to every open connection in the registry."""
        data = encode_message(message)
        targets = [c for c in await self.registry.snapshot() if c.is_open]
        results = await asyncio.gather(*(self.send_to(c, data) for c in targets))
        return sum(results)

    async def send_to(self, connection, data: str) -> bool:
        """Send to one connection, dropping it if the send fails or stalls."""
        try:
            await asyncio.wait_for(connection.send(data), timeout=self.config.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Send to {connection.remote_address} timed out, disconnecting slow consumer")
        except (ConnectionClosed, OSError) as e:
            logger.log_error(f"send to {connection.remote_address}", e)

        if await self.registry.remove(connection):
            logger.log_disconnect(connection.remote_address, self.connection_count)
        await self._close_quietly(connection)
        return False

    async def on_close(self, connection) -> bool:
        """Forget a closed connection. Duplicate close events are no-ops."""
        removed = await self.registry.remove(connection)
        if removed:
            logger.log_disconnect(connection.remote_address, self.connection_count)
        return removed

    async def on_error(self, connection, error: Exception) -> bool:
        """Forget a connection that failed."""
        logger.log_error(f"connection {connection.remote_address}", error)
        return await self.on_close(connection)

    async def shutdown(self) -> int:
        """Close every registered connection and refuse further work."""
        self.closing = True
        drained = await self.registry.clear()
        await asyncio.gather(*(self._close_quietly(c) for c in drained))
        logger.log_shutdown(len(drained))
        return len(drained)

    async def _close_quietly(self, connection):
        try:
            await connection.close()
        except (ConnectionClosed, OSError) as e:
            logger.debug(f"Close of {connection.remote_address} failed: {e}")
