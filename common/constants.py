"""
Shared constants for the real-time chat relay.

This module contains all constants used across client and server components.
"""

from enum import Enum

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 8080

# Frame limits
MAX_MESSAGE_SIZE = 1024 * 1024  # 1 MiB per WebSocket frame

# Timeouts
SEND_TIMEOUT = 5.0  # seconds a single relay send may take before the consumer is dropped
CONNECT_TIMEOUT = 10.0  # seconds

# Server greeting
WELCOME_TEXT = 'Connected to chat server!'
SYSTEM_USER = 'System'

# Logging
LOG_DIR = 'logs'
CHAT_LOG_FILE = 'chat_history.log'

# Identity persistence
IDENTITY_FILE = '.chat_relay_identity.json'


# Message kinds
class MessageKinds:
    SYSTEM = 'system'
    REGISTER = 'register'
    MESSAGE = 'message'


class ConnectionState(str, Enum):
    """Client session connection state."""
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
