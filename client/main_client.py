#!/usr/bin/env python3
"""
Chat Relay Client - Main Entry Point

Interactive console client over a ClientSession.

Usage:
    python main_client.py [--username NAME] [--server-ip HOST] [--port PORT] [--forget]
"""

import argparse
import asyncio
import sys

from client.chat.chat_session import ClientSession
from client.utils.config import ClientConfig
from client.utils.identity_store import IdentityStore
from client.utils.logger import logger
from common.constants import ConnectionState, DEFAULT_HOST, DEFAULT_PORT


class ChatClientApp:
    """Console front end that renders entries and forwards typed lines."""

    def __init__(self, config: ClientConfig, session: ClientSession = None):
        self.config = config
        self.session = session or ClientSession(config)
        self.session.set_message_handler(logger.show_entry)
        self.session.set_state_handler(logger.show_state)
        self.running = False

    async def join(self) -> bool:
        """Join with the configured username and wait for the outcome."""
        if not await self.session.join(self.config.username):
            return self.session.state is ConnectionState.CONNECTED
        try:
            await self.session.wait_for_state(ConnectionState.CONNECTED, timeout=self.config.connect_timeout)
        except asyncio.TimeoutError:
            pass
        return self.session.state is ConnectionState.CONNECTED

    async def handle_line(self, line: str):
        """Handle one line of user input."""
        line = line.strip()
        if not line:
            return
        if line == '/quit':
            self.running = False
        elif line == '/leave':
            await self.session.leave()
        elif line == '/join':
            if not await self.join():
                logger.error("[ERROR] Could not join chat")
        elif self.session.state is not ConnectionState.CONNECTED:
            logger.warning("Not connected to server, type /join to reconnect")
        else:
            await self.session.send(line)

    async def interactive_mode(self):
        """Run client with interactive chat input."""
        if not await self.join():
            logger.error(f"[ERROR] Failed to connect to {self.config.url}")
            await self.session.leave()
            return

        logger.show_interactive_mode_info(self.config.username)
        self.running = True
        loop = asyncio.get_running_loop()
        try:
            while self.running:
                user_input = await loop.run_in_executor(None, sys.stdin.readline)
                if not user_input:
                    break
                await self.handle_line(user_input)
        finally:
            await self.session.leave()
            logger.info("[INFO] Disconnected from server")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Real-time Chat Relay Client')
    parser.add_argument('--username', type=str, default=None,
                        help='Display name (default: last used name)')
    parser.add_argument('--server-ip', type=str, default=DEFAULT_HOST,
                        help=f'Server address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    parser.add_argument('--forget', action='store_true',
                        help='Forget the stored username and exit')

    args = parser.parse_args()

    config = ClientConfig(args.server_ip, args.port, args.username)
    store = IdentityStore(config.identity_file)
    if args.forget:
        store.clear()
        logger.info("[INFO] Stored username removed")
        return

    username = args.username or store.load()
    if not username:
        username = input("Enter username: ").strip()
    if not username:
        logger.error("[ERROR] A username is required")
        sys.exit(1)
    store.save(username)
    config.username = username

    app = ChatClientApp(config)
    try:
        asyncio.run(app.interactive_mode())
    except KeyboardInterrupt:
        print("\n[INFO] Client terminated")


if __name__ == "__main__":
    main()
