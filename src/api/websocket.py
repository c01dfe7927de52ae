import asyncio
from typing import Awaitable, Callable, Optional, Set

from fastapi import WebSocket

from src.core.exceptions import PermissionDenied, SessionError
from src.core.logger import logger
from src.core.settings import settings
from src.models.chat.types import Message
from src.models.reply.base import BaseReplySource
from src.models.speech.base import SpeechOptions
from src.models.speech.queue_device import QueueSpeechDevice
from src.models.speech.types import SpeechEvent, SpeechEventType
from src.services.conversation_service import ConversationSession
from src.services.session_manager import Session, SessionManager


class WebSocketSpeechDevice(QueueSpeechDevice):
    """Speech device living on the client at the other end of the socket.

    Permission prompts and start/stop commands are sent to the client; the
    client reports recognition events back, which are pushed onto the queue.
    """

    def __init__(
        self,
        send: Callable[[dict], Awaitable[None]],
        permission_timeout: float = 30.0,
    ):
        super().__init__()
        self._send = send
        self._permission_timeout = permission_timeout
        self._permission: Optional[asyncio.Future] = None

    async def request_permission(self) -> bool:
        self._permission = asyncio.get_running_loop().create_future()
        await self._send({"type": "permission_request"})
        try:
            return await asyncio.wait_for(self._permission, self._permission_timeout)
        except asyncio.TimeoutError as e:
            raise PermissionDenied("Timed out waiting for microphone permission") from e
        finally:
            self._permission = None

    def resolve_permission(self, granted: bool) -> None:
        if self._permission is None or self._permission.done():
            logger.warning("Permission response received without a pending request")
            return
        self._permission.set_result(granted)

    async def begin(self, options: SpeechOptions) -> None:
        await super().begin(options)
        await self._send({"type": "begin_capture", "options": options.model_dump()})

    async def stop(self) -> None:
        await super().stop()
        await self._send({"type": "stop_capture"})


class ChatWebSocketHandler:
    def __init__(
        self,
        websocket: WebSocket,
        reply_source: BaseReplySource,
        session_manager: Optional[SessionManager] = None,
    ):
        self.websocket = websocket
        self._reply_source = reply_source
        self._session_manager = session_manager or SessionManager()
        self._session: Optional[Session] = None

        self.device: Optional[WebSocketSpeechDevice] = None
        self.conversation: Optional[ConversationSession] = None
        self._listen_task: Optional[asyncio.Task] = None
        self._capture_tasks: Set[asyncio.Task] = set()

    async def connect(self):
        await self.websocket.accept()
        logger.info("WebSocket connection accepted")

        self._session_manager.cleanup_expired_sessions()

        self.device = WebSocketSpeechDevice(self.send_json)
        self.conversation = ConversationSession(
            reply_source=self._reply_source,
            speech_device=self.device,
            speech_options=SpeechOptions(
                lang=settings.chat.SPEECH_LANG,
                interim_results=settings.chat.SPEECH_INTERIM_RESULTS,
                continuous=settings.chat.SPEECH_CONTINUOUS,
            ),
            welcome_message=settings.chat.WELCOME_MESSAGE,
            on_message=self.send_message,
            on_recognizing=self.send_recognizing,
        )
        self._session = self._session_manager.create_session(self.conversation)
        self._session.connected = True
        self._listen_task = asyncio.create_task(self.conversation.listen())

        await self.send_json({
            "type": "history",
            "session_id": self._session.session_id,
            "messages": [message.to_dict() for message in self.conversation.log],
        })

    async def disconnect(self):
        if self.device:
            self.device.close()

        for task in self._capture_tasks:
            task.cancel()
        if self._listen_task:
            self._listen_task.cancel()

        if self._session:
            self._session_manager.close_session(self._session.session_id)

        logger.info("WebSocket connection closed")

    async def send_json(self, data: dict):
        try:
            await self.websocket.send_json(data)
        except Exception as e:
            logger.error(f"Error sending JSON: {e}")

    async def send_error(self, message: str):
        await self.send_json({"type": "error", "message": message})

    async def send_message(self, message: Message):
        await self.send_json({"type": "message", "message": message.to_dict()})

    async def send_recognizing(self, value: bool):
        await self.send_json({"type": "recognizing", "value": value})

    async def handle_conversation(self):
        while True:
            data = await self.websocket.receive_json()
            await self.handle_client_message(data)

    async def handle_client_message(self, data: dict):
        msg_type = data.get("type")
        if self._session:
            self._session_manager.get_session(self._session.session_id)

        try:
            if msg_type == "input":
                self.conversation.set_input(self._text_field(data) or "")

            elif msg_type == "text":
                await self.conversation.submit_text(self._text_field(data))

            elif msg_type == "start_capture":
                # Runs as a task: the permission answer arrives on this same socket.
                task = asyncio.create_task(self.conversation.start_capture())
                self._capture_tasks.add(task)
                task.add_done_callback(self._capture_tasks.discard)

            elif msg_type == "stop_capture":
                await self.conversation.stop_capture()

            elif msg_type == "permission":
                self.device.resolve_permission(bool(data.get("granted", False)))

            elif msg_type == "speech":
                self.device.push(self._parse_speech_event(data))

            else:
                logger.warning(f"Unknown message type: {msg_type}")
                await self.send_error(f"Unknown message type: {msg_type}")

        except ValueError as e:
            logger.warning(f"Invalid client message: {e}")
            await self.send_error(str(e))
        except SessionError as e:
            logger.error(f"Session error: {e}")
            await self.send_error(str(e))

    @staticmethod
    def _text_field(data: dict) -> Optional[str]:
        text = data.get("text")
        if text is not None and not isinstance(text, str):
            raise ValueError("Field 'text' must be a string")
        return text

    @staticmethod
    def _parse_speech_event(data: dict) -> SpeechEvent:
        try:
            event_type = SpeechEventType(data.get("event"))
        except ValueError as e:
            raise ValueError(f"Unknown speech event: {data.get('event')}") from e

        return SpeechEvent(
            type=event_type,
            transcript=str(data.get("transcript") or ""),
            is_final=bool(data.get("is_final", False)),
            code=data.get("code"),
            message=data.get("message"),
        )
