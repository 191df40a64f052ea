#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

Binds a WebSocket endpoint and feeds every connection into the relay.
"""

import argparse
import asyncio
import signal
from typing import Optional

from websockets.asyncio.server import serve, ServerConnection
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT, LOG_DIR, SEND_TIMEOUT
from server.relay.connection import Connection
from server.relay.relay_server import RelayServer
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatRelayServer:
    """Main server class that binds the WebSocket transport to the relay."""

    def __init__(self, config: Optional[ServerConfig] = None, relay: Optional[RelayServer] = None):
        self.config = config or ServerConfig()
        self.relay = relay or RelayServer(self.config)
        self._server = None

    @property
    def port(self) -> int:
        """Port actually bound, useful when configured with port 0."""
        if self._server is None:
            return self.config.port
        return self._server.sockets[0].getsockname()[1]

    async def handle_connection(self, websocket: ServerConnection):
        """Handle individual client connection."""
        connection = Connection(websocket)
        if not await self.relay.accept(connection):
            return

        try:
            async for payload in websocket:
                await self.relay.on_inbound(connection, payload)
        except ConnectionClosedOK:
            pass
        except ConnectionClosedError as e:
            await self.relay.on_error(connection, e)
        finally:
            await self.relay.on_close(connection)

    async def start(self):
        """Start listening."""
        self._server = await serve(
            self.handle_connection,
            self.config.host,
            self.config.port,
            max_size=self.config.max_message_size
        )
        logger.info(f"WebSocket server started on ws://{self.config.host}:{self.port}")

    async def stop(self):
        """Close every client, then stop accepting connections."""
        await self.relay.shutdown()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        logger.info("Server closed")

    async def serve_forever(self):
        """Run until SIGINT or SIGTERM, then shut down gracefully."""
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                # Windows event loops have no signal handlers, Ctrl+C raises KeyboardInterrupt instead
                pass

        await self.start()
        try:
            await stop_event.wait()
            logger.info("Shutting down server...")
        finally:
            await self.stop()


def main():
    parser = argparse.ArgumentParser(description='Real-time Chat Relay Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'WebSocket port (default: {DEFAULT_PORT})')
    parser.add_argument('--log-dir', type=str, default=LOG_DIR,
                        help=f'Directory for chat logs (default: {LOG_DIR})')
    parser.add_argument('--send-timeout', type=float, default=SEND_TIMEOUT,
                        help=f'Seconds before a slow client is disconnected (default: {SEND_TIMEOUT})')

    args = parser.parse_args()

    logger.configure(logs_dir=args.log_dir)
    config = ServerConfig(host=args.host, port=args.port, logs_dir=args.log_dir, send_timeout=args.send_timeout)
    server = ChatRelayServer(config)
    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        logger.info("Server terminated")
    except OSError as e:
        logger.log_error("server", e)


if __name__ == "__main__":
    main()
