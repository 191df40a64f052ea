"""
Identity persistence.

Remembers the chosen display name between runs.
"""

import json
from pathlib import Path
from typing import Optional

from client.utils.logger import logger


class IdentityStore:
    """JSON file holding the last used username."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        """Return the stored username, or None if nothing usable is stored."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable identity file {self.path}: {e}")
            return None

        if not isinstance(data, dict) or not data.get('has_joined'):
            return None
        username = data.get('username')
        if not isinstance(username, str) or not username.strip():
            return None
        return username.strip()

    def save(self, username: str):
        username = (username or '').strip()
        if not username:
            raise ValueError("username must not be empty")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({'username': username, 'has_joined': True}, f)

    def clear(self):
        """Forget the stored username."""
        self.path.unlink(missing_ok=True)
