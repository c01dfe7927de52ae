"""In-process speech device driven by pushed events."""

import asyncio
from typing import AsyncIterator, List, Optional

from src.core.logger import logger
from src.models.speech.base import BaseSpeechDevice, SpeechOptions
from src.models.speech.types import SpeechEvent


class QueueSpeechDevice(BaseSpeechDevice):
    """Device whose recognition events are fed in through ``push()``.

    Whatever actually owns the microphone (a remote client, a test) pushes
    events here, and ``events()`` hands them to the session in order.
    """

    def __init__(self, permission_granted: bool = True):
        self.permission_granted = permission_granted
        self.begin_calls: List[SpeechOptions] = []
        self.stop_calls = 0
        self._queue: "asyncio.Queue[Optional[SpeechEvent]]" = asyncio.Queue()
        self._closed = False

    async def request_permission(self) -> bool:
        return self.permission_granted

    async def begin(self, options: SpeechOptions) -> None:
        logger.debug(f"Speech capture begin: {options.model_dump()}")
        self.begin_calls.append(options)

    async def stop(self) -> None:
        logger.debug("Speech capture stop requested")
        self.stop_calls += 1

    def push(self, event: SpeechEvent) -> None:
        if self._closed:
            logger.warning(f"Dropping speech event on closed device: {event.type.value}")
            return
        self._queue.put_nowait(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def events(self) -> AsyncIterator[SpeechEvent]:
        while True:
            event = await self._queue.get()
            if event is None:
                break
            yield event
