"""
Server configuration module.

This module handles server-side configuration settings.
"""

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, LOG_DIR, MAX_MESSAGE_SIZE, SEND_TIMEOUT, WELCOME_TEXT
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT, logs_dir: str = LOG_DIR,
                 send_timeout: float = SEND_TIMEOUT):
        self.host = host
        self.port = port

        # Logging configuration
        self.logs_dir = logs_dir

        # Relay settings
        self.send_timeout = send_timeout  # slow consumers are disconnected after this
        self.max_message_size = MAX_MESSAGE_SIZE
        self.welcome_text = WELCOME_TEXT

