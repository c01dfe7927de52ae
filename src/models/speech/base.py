"""Abstract base class for speech capture devices."""

from abc import ABC, abstractmethod
from typing import AsyncIterator

from pydantic import BaseModel

from src.models.speech.types import SpeechEvent


class SpeechOptions(BaseModel):
    """Recognition options passed to a device when capture begins."""

    lang: str = "en-US"
    interim_results: bool = True
    continuous: bool = False


class BaseSpeechDevice(ABC):
    """Abstract interface for speech capture devices.

    A device owns the microphone and the recognition engine. It reports
    progress only through the event stream returned by ``events()``, so
    the conversation session never depends on a concrete SDK binding.
    """

    @abstractmethod
    async def request_permission(self) -> bool:
        """Ask for microphone access.

        Returns:
            True when access was granted
        """
        pass

    @abstractmethod
    async def begin(self, options: SpeechOptions) -> None:
        """Start listening with the given recognition options."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Ask the device to stop listening.

        Stopping is advisory. The device reports completion later with an
        ``end`` event.
        """
        pass

    @abstractmethod
    def events(self) -> AsyncIterator[SpeechEvent]:
        """Stream of recognition lifecycle events.

        Yields:
            Events in the order the device emitted them
        """
        pass
