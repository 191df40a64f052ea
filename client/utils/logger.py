"""
Client logging module.

This module handles client-side logging and console rendering.
"""

import logging
import sys
from datetime import datetime


class ClientLogger:
    """Client logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_relay_client')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, url: str, success: bool):
        """Log connection attempt."""
        status = "Connected" if success else "Failed to connect"
        self.info(f"{status} to {url}")

    def log_chat_sent(self, message: str):
        """Log chat message sent."""
        self.debug(f"Chat sent: {message}")

    def show_state(self, state):
        """Show connection state change."""
        self.info(f"[STATUS] {state.value}")

    def show_entry(self, entry):
        """Render one chat entry."""
        if entry.is_system:
            self.info(f"[SYSTEM] {entry.text}")
        elif entry.is_self:
            self.info(f"[{format_time(entry.timestamp)}] You: {entry.text}")
        else:
            self.info(f"[{format_time(entry.timestamp)}] {entry.user}: {entry.text}")

    def show_interactive_mode_info(self, username: str):
        """Show interactive mode information."""
        self.info(f"[INFO] Chatting as '{username}'. Type messages to chat (Ctrl+C to exit)")
        self.info("[INFO] Commands: /join /leave /quit")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


def format_time(timestamp: str) -> str:
    """Render an ISO timestamp as local HH:MM."""
    if not timestamp:
        return '--:--'
    try:
        when = datetime.fromisoformat(timestamp.replace('Z', '+00:00'))
    except ValueError:
        return timestamp
    if when.tzinfo is not None:
        when = when.astimezone()
    return when.strftime('%H:%M')


# Global logger instance
logger = ClientLogger()
