"""
Client configuration module.

This module handles client-side configuration settings.
"""

from pathlib import Path

from common.constants import DEFAULT_HOST, DEFAULT_PORT, CONNECT_TIMEOUT, IDENTITY_FILE


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, username: str = None,
                 identity_file: str = None):
        self.host = host
        self.port = port
        self.username = username

        # Connection settings
        self.connect_timeout = CONNECT_TIMEOUT

        # Identity persistence
        self.identity_file = Path(identity_file) if identity_file else Path.home() / IDENTITY_FILE

    @property
    def url(self) -> str:
        """WebSocket endpoint of the relay."""
        return f"ws://{self.host}:{self.port}"

