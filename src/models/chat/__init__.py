"""Conversation log data structures."""

from src.models.chat.types import (
    CapturePhase,
    CaptureState,
    Message,
    MessageKind,
    Sender,
)

__all__ = [
    "CapturePhase",
    "CaptureState",
    "Message",
    "MessageKind",
    "Sender",
]
