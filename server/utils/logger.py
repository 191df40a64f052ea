"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from common.constants import LOG_DIR, CHAT_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: str = LOG_DIR, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_relay_server')
        self.configure(logs_dir, log_level)

    def configure(self, logs_dir: Optional[str] = None, log_level: Optional[int] = None):
        """(Re)configure the log directory and level."""
        if log_level is not None:
            self.logger.setLevel(log_level)

            # Remove existing handlers
            for handler in self.logger.handlers[:]:
                self.logger.removeHandler(handler)

            console_handler = logging.StreamHandler()
            console_handler.setLevel(log_level)
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if logs_dir is not None:
            self.logs_dir = Path(logs_dir)
            self.chat_log_path = self.logs_dir / CHAT_LOG_FILE

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

    def log_connection(self, addr, total: int):
        """Log client connection."""
        self.info(f"New connection from {addr}. Total clients: {total}")

    def log_disconnect(self, addr, total: int):
        """Log client disconnect."""
        self.info(f"Client {addr} disconnected. Total clients: {total}")

    def log_relay(self, username: str, message: str, recipients: int):
        """Log a relayed chat message."""
        self.info(f"Relayed message from {username} to {recipients} client(s): {message}")
        self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | {username} | {message}")

    def log_malformed(self, addr, error: Exception):
        """Log a dropped payload."""
        self.warning(f"Dropped malformed payload from {addr}: {error}")

    def log_shutdown(self, closed: int):
        """Log relay shutdown."""
        self.info(f"Relay shut down, closed {closed} connection(s)")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, file_path: Path, content: str):
        """Write content to log file."""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except OSError as e:
            self.error(f"Failed to write to log file {file_path}: {e}")


# Global logger instance
logger = ServerLogger()
