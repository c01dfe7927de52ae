"""Conversation session for a single chat view.

Owns the message log, message id allocation and the voice capture state
machine. Every transition runs as one step on the event loop; reply
requests run as their own tasks so the user can keep typing or talking
while a reply is pending.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Set, Tuple

from src.core.exceptions import SessionError, SpeechCaptureError
from src.core.logger import logger
from src.models.chat.types import (
    CapturePhase,
    CaptureState,
    Message,
    MessageKind,
    Sender,
)
from src.models.reply.base import BaseReplySource
from src.models.speech.base import BaseSpeechDevice, SpeechOptions
from src.models.speech.types import SpeechEvent, SpeechEventType

DEFAULT_WELCOME_MESSAGE = "Hello! Welcome to the chat."

MessageListener = Callable[[Message], Awaitable[None]]
RecognizingListener = Callable[[bool], Awaitable[None]]


class ConversationSession:
    def __init__(
        self,
        reply_source: BaseReplySource,
        speech_device: Optional[BaseSpeechDevice] = None,
        speech_options: Optional[SpeechOptions] = None,
        welcome_message: str = DEFAULT_WELCOME_MESSAGE,
        on_message: Optional[MessageListener] = None,
        on_recognizing: Optional[RecognizingListener] = None,
    ):
        self._reply_source = reply_source
        self._device = speech_device
        self._speech_options = speech_options or SpeechOptions()
        self._on_message = on_message
        self._on_recognizing = on_recognizing

        self._log: List[Message] = [
            Message(
                id=1,
                kind=MessageKind.TEXT,
                body=welcome_message,
                sender=Sender.REMOTE,
            )
        ]
        self._next_id = 2

        self.capture_state = CaptureState.idle()
        self.recognizing = False
        self.pending_input = ""

        self._starting_capture = False
        self._stop_requested = False
        self._user_initiated = False
        # A failed capture still owes the device's trailing end event.
        self._awaiting_trailing_end = False
        self._reply_tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def log(self) -> Tuple[Message, ...]:
        """Messages oldest first."""
        return tuple(self._log)

    def display_log(self) -> List[Message]:
        """Messages newest first, the order a chat list renders them."""
        return list(reversed(self._log))

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def pending_replies(self) -> int:
        return sum(1 for task in self._reply_tasks if not task.done())

    @property
    def is_closed(self) -> bool:
        return self._closed

    def get_message(self, message_id: int) -> Optional[Message]:
        for message in self._log:
            if message.id == message_id:
                return message
        return None

    def set_input(self, text: str) -> None:
        self.pending_input = text

    async def submit_text(self, text: Optional[str] = None) -> Optional[Message]:
        """Append a local text message and ask for a reply.

        Args:
            text: Message text. Defaults to the pending input buffer.

        Returns:
            The appended message, or None when the input was blank
        """
        self._ensure_open()

        body = (self.pending_input if text is None else text).strip()
        if not body:
            logger.debug("Ignoring blank text submission")
            return None

        message = await self._append(MessageKind.TEXT, body, Sender.LOCAL)
        self.pending_input = ""
        self._schedule_reply()
        return message

    async def request_reply(self) -> Optional[Message]:
        """Fetch the next bot message and append it.

        Failures are logged and swallowed; the log is left unchanged.
        """
        try:
            body = await self._reply_source.request()
        except Exception as e:
            logger.error(f"Failed to fetch reply: {e}")
            return None

        if self._closed:
            logger.debug("Dropping reply for closed session")
            return None

        message = await self._append(MessageKind.TEXT, body, Sender.REMOTE)
        logger.info(f"Received reply: {body[:50]}")
        return message

    async def wait_for_replies(self) -> None:
        while True:
            pending = [task for task in self._reply_tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def start_capture(self) -> bool:
        """Request microphone permission and begin listening.

        Returns:
            True when the device started listening
        """
        self._ensure_open()
        if self._device is None:
            raise SessionError("No speech device attached to this session")

        if not self.capture_state.is_idle or self._starting_capture:
            logger.debug(f"Capture already active: {self.capture_state.phase.value}")
            return False

        self._starting_capture = True
        self._stop_requested = False
        try:
            if not await self._device.request_permission():
                logger.warning("Microphone permission not granted")
                return False

            self.capture_state = CaptureState.listening()
            self._user_initiated = True
            await self._device.begin(self._speech_options)
            stop_pending = self._stop_requested
        except SpeechCaptureError as e:
            logger.warning(f"Voice capture aborted: {e}")
            self._reset_capture()
            return False
        except Exception as e:
            logger.error(f"Error starting voice recognition: {e}", exc_info=True)
            self._reset_capture()
            return False
        finally:
            self._starting_capture = False
            self._stop_requested = False

        logger.info("Voice capture started")
        if stop_pending:
            logger.debug("Stop requested while starting, stopping capture")
            await self._stop_device()
        return True

    async def stop_capture(self) -> bool:
        """Ask the device to stop. The transition happens on its end event.

        A stop that arrives while start_capture() is still waiting for
        permission is applied as soon as the device has begun.
        """
        if self._device is None:
            return False

        if self._starting_capture:
            self._stop_requested = True
            return True

        if self.capture_state.is_idle:
            return False

        await self._stop_device()
        return True

    async def handle_event(self, event: SpeechEvent) -> None:
        if self._closed:
            logger.debug(f"Ignoring speech event on closed session: {event.type.value}")
            return

        if event.type is SpeechEventType.START:
            await self._on_start()
        elif event.type is SpeechEventType.RESULT:
            await self._on_result(event.transcript)
        elif event.type is SpeechEventType.ERROR:
            await self._on_error(event)
        elif event.type is SpeechEventType.END:
            await self._on_end()

    async def listen(self) -> None:
        """Apply device events in order until the device stream ends."""
        if self._device is None:
            raise SessionError("No speech device attached to this session")

        async for event in self._device.events():
            await self.handle_event(event)
        logger.debug("Speech event stream ended")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for task in self._reply_tasks:
            task.cancel()
        self._reply_tasks.clear()
        self._reset_capture()
        logger.debug("Conversation session closed")

    async def _on_start(self) -> None:
        self._awaiting_trailing_end = False
        if self.capture_state.is_idle:
            # Recognition was started by something other than start_capture().
            logger.info("Speech recognition started without a user request")
            self.capture_state = CaptureState.listening()
        await self._set_recognizing(True)

    async def _on_result(self, transcript: str) -> None:
        transcript = transcript.strip()
        if not transcript:
            logger.debug("Ignoring empty transcript")
            return

        phase = self.capture_state.phase
        if phase is CapturePhase.IDLE:
            logger.warning("Speech result received while idle, ignoring")
        elif phase is CapturePhase.LISTENING:
            message = await self._append(MessageKind.VOICE, transcript, Sender.LOCAL)
            self.capture_state = CaptureState.captured(message.id)
            logger.debug(f"Voice message created with ID: {message.id}")
        else:
            await self._rewrite(self.capture_state.message_id, transcript)

    async def _on_error(self, event: SpeechEvent) -> None:
        logger.error(f"Speech recognition error: {event.code} {event.message or ''}".rstrip())
        if not self.capture_state.is_idle:
            self._awaiting_trailing_end = True
        self._reset_capture()
        await self._set_recognizing(False)

    async def _on_end(self) -> None:
        if self._awaiting_trailing_end:
            # End of the capture that already failed, not of a newer one.
            self._awaiting_trailing_end = False
            logger.debug("Ignoring trailing end event of failed capture")
            return

        if self.capture_state.is_idle:
            logger.debug("Ignoring end event, no capture in progress")
            return

        reply_requested = self._user_initiated
        self._reset_capture()
        await self._set_recognizing(False)
        logger.info("Speech recognition ended")

        if reply_requested:
            self._schedule_reply()

    async def _stop_device(self) -> None:
        try:
            await self._device.stop()
        except Exception as e:
            logger.error(f"Error stopping voice recognition: {e}")

    def _reset_capture(self) -> None:
        self.capture_state = CaptureState.idle()
        self._user_initiated = False

    async def _set_recognizing(self, value: bool) -> None:
        if self.recognizing == value:
            return
        self.recognizing = value
        if self._on_recognizing:
            await self._on_recognizing(value)

    def _schedule_reply(self) -> None:
        task = asyncio.create_task(self.request_reply())
        self._reply_tasks.add(task)
        task.add_done_callback(self._reply_tasks.discard)

    async def _append(self, kind: MessageKind, body: str, sender: Sender) -> Message:
        message = Message(id=self._next_id, kind=kind, body=body, sender=sender)
        self._next_id += 1
        self._log.append(message)
        await self._notify(message)
        return message

    async def _rewrite(self, message_id: int, body: str) -> None:
        for index, message in enumerate(self._log):
            if message.id == message_id:
                self._log[index] = message.with_body(body)
                await self._notify(self._log[index])
                return
        logger.error(f"Captured message not found: {message_id}")

    async def _notify(self, message: Message) -> None:
        if self._on_message:
            await self._on_message(message)

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionError("Conversation session is closed")
