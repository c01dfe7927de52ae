"""Common types for the conversation log and voice capture."""

from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Dict, Optional


class MessageKind(str, Enum):
    """How a message was produced."""

    TEXT = "text"
    VOICE = "voice"


class Sender(str, Enum):
    """Which side of the conversation sent a message."""

    LOCAL = "local"  # user device
    REMOTE = "remote"  # bot


@dataclass(frozen=True)
class Message:
    """A single entry in the conversation log.

    Messages are immutable. Rewriting the body of an in-flight voice message
    produces a new instance with the same id, kind, sender and created_at.
    """

    id: int
    kind: MessageKind
    body: str
    sender: Sender
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def with_body(self, body: str) -> "Message":
        return replace(self, body=body)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "body": self.body,
            "sender": self.sender.value,
            "created_at": self.created_at.isoformat(),
        }


class CapturePhase(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    CAPTURED = "captured"


@dataclass(frozen=True)
class CaptureState:
    """Voice capture state. ``message_id`` is set only while CAPTURED."""

    phase: CapturePhase = CapturePhase.IDLE
    message_id: Optional[int] = None

    @classmethod
    def idle(cls) -> "CaptureState":
        return cls()

    @classmethod
    def listening(cls) -> "CaptureState":
        return cls(phase=CapturePhase.LISTENING)

    @classmethod
    def captured(cls, message_id: int) -> "CaptureState":
        return cls(phase=CapturePhase.CAPTURED, message_id=message_id)

    @property
    def is_idle(self) -> bool:
        return self.phase is CapturePhase.IDLE
