"""Speech capture device interfaces and implementations."""

from src.models.speech.base import BaseSpeechDevice, SpeechOptions
from src.models.speech.queue_device import QueueSpeechDevice
from src.models.speech.types import SpeechEvent, SpeechEventType

__all__ = [
    "BaseSpeechDevice",
    "SpeechOptions",
    "QueueSpeechDevice",
    "SpeechEvent",
    "SpeechEventType",
]
