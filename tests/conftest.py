import pytest
from unittest.mock import AsyncMock

from src.models.reply.base import BaseReplySource
from src.models.speech.queue_device import QueueSpeechDevice
from src.services.conversation_service import ConversationSession
from src.services.session_manager import SessionManager


@pytest.fixture
def mock_reply_source():
    source = AsyncMock(spec=BaseReplySource)
    source.request = AsyncMock(return_value="why did...")
    return source


@pytest.fixture
def failing_reply_source():
    source = AsyncMock(spec=BaseReplySource)
    source.request = AsyncMock(side_effect=RuntimeError("network down"))
    return source


@pytest.fixture
def speech_device():
    return QueueSpeechDevice()


@pytest.fixture
def conversation(mock_reply_source, speech_device):
    return ConversationSession(
        reply_source=mock_reply_source,
        speech_device=speech_device,
    )


@pytest.fixture
def session_manager():
    return SessionManager(session_timeout=3600)


@pytest.fixture
def sample_image(tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0" * 64)
    return path
