"""
Protocol definitions for the real-time chat relay.

This module defines the wire message structure and the JSON codec shared by
the relay server and the client session.

Wire format: one JSON object per WebSocket text frame with the fields
``kind``, ``user``, ``message`` and ``timestamp``. For compatibility with
older clients ``type`` is accepted for ``kind``, ``text`` for ``message`` and
``username`` for ``user``. A frame without any kind is a chat message.
"""

import json
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Union

from common.constants import MessageKinds, WELCOME_TEXT


class MalformedMessageError(ValueError):
    """Raised when a payload cannot be decoded into a Message."""


@dataclass(frozen=True)
class Message:
    """Chat message structure."""
    kind: str
    user: Optional[str] = None
    text: Optional[str] = None
    timestamp: Optional[str] = None

    def stamped(self, when: datetime) -> 'Message':
        """Return a copy carrying ``when`` as its authoritative timestamp."""
        return replace(self, timestamp=when.isoformat())

    def to_dict(self) -> Dict[str, Any]:
        data = {"kind": self.kind}
        if self.user is not None:
            data["user"] = self.user
        if self.text is not None:
            data["message"] = self.text
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def encode_message(message: Message) -> str:
    """Serialize a message into a JSON text frame."""
    return json.dumps(message.to_dict())


def parse_message(payload: Union[str, bytes]) -> Message:
    """
    Decode a JSON text frame into a Message.

    Raises MalformedMessageError for undecodable bytes, invalid JSON,
    non-object documents, or a chat message without user or body.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedMessageError(f"payload is not UTF-8: {e}") from e

    try:
        data = json.loads(payload)
    except (ValueError, TypeError, RecursionError) as e:
        # oversized integers raise ValueError, deep nesting RecursionError
        raise MalformedMessageError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedMessageError("payload is not a JSON object")

    kind = data.get('kind') or data.get('type') or MessageKinds.MESSAGE
    if not isinstance(kind, str) or not kind:
        raise MalformedMessageError(f"invalid kind: {kind!r}")

    user = data.get('user', data.get('username'))
    text = data.get('message', data.get('text'))
    timestamp = data.get('timestamp')

    if user is not None and not isinstance(user, str):
        raise MalformedMessageError("user must be a string")
    if text is not None and not isinstance(text, str):
        raise MalformedMessageError("message body must be a string")
    # Client timestamps are advisory, anything unusable is discarded
    if not isinstance(timestamp, str):
        timestamp = None

    if kind == MessageKinds.MESSAGE:
        if not user:
            raise MalformedMessageError("chat message without user")
        if not text:
            raise MalformedMessageError("chat message without body")

    return Message(kind=kind, user=user, text=text, timestamp=timestamp)


def create_chat_message(user: str, text: str) -> Message:
    """Create a chat message with a provisional client timestamp."""
    return Message(
        kind=MessageKinds.MESSAGE,
        user=user,
        text=text,
        timestamp=utc_now().isoformat()
    )


def create_system_message(text: str = WELCOME_TEXT) -> Message:
    """Create a system notice."""
    return Message(kind=MessageKinds.SYSTEM, text=text)
