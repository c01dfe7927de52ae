import uuid
from datetime import datetime, UTC
from typing import Dict, Optional
from dataclasses import dataclass, field

from src.core.logger import logger
from src.core.exceptions import SessionError
from src.services.conversation_service import ConversationSession


@dataclass
class Session:
    session_id: str
    conversation: ConversationSession
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_active: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: Dict = field(default_factory=dict)
    # Set while a client is attached; live sessions are never expired.
    connected: bool = False

    def touch(self) -> None:
        self.last_active = datetime.now(UTC)

    def is_expired(self, timeout_seconds: int = 3600) -> bool:
        return (datetime.now(UTC) - self.last_active).total_seconds() > timeout_seconds


class SessionManager:
    """Tracks the conversation sessions of the chat views currently open."""

    def __init__(self, session_timeout: int = 3600):
        self._sessions: Dict[str, Session] = {}
        self._session_timeout = session_timeout

    def create_session(
        self, conversation: ConversationSession, metadata: Optional[Dict] = None
    ) -> Session:
        session_id = str(uuid.uuid4())
        session = Session(
            session_id=session_id,
            conversation=conversation,
            metadata=metadata or {},
        )
        self._sessions[session_id] = session
        logger.info(f"Created session: {session_id}")
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        if session:
            session.touch()
        return session

    def require_session(self, session_id: str) -> Session:
        session = self.get_session(session_id)
        if session is None:
            raise SessionError(f"Session not found: {session_id}")
        return session

    def close_session(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.conversation.close()
        logger.info(f"Closed session: {session_id}")
        return True

    def cleanup_expired_sessions(self) -> int:
        expired_ids = [
            sid for sid, session in self._sessions.items()
            if not session.connected and session.is_expired(self._session_timeout)
        ]

        for sid in expired_ids:
            self.close_session(sid)

        if expired_ids:
            logger.info(f"Cleaned up {len(expired_ids)} expired sessions")

        return len(expired_ids)

    def get_active_session_count(self) -> int:
        return len(self._sessions)
