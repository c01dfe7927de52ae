from typing import Optional

from src.core.logger import logger
from src.core.settings import settings
from src.models.reply.base import BaseReplySource
from src.models.reply.factory import ReplySourceFactory
from src.services.session_manager import SessionManager
from src.services.upload_service import UploadService


class DependencyContainer:
    _instance: Optional["DependencyContainer"] = None

    def __init__(self):
        self._session_manager: Optional[SessionManager] = None
        self._reply_source: Optional[BaseReplySource] = None
        self._upload_service: Optional[UploadService] = None

    @classmethod
    def get_instance(cls) -> "DependencyContainer":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get_session_manager(self) -> SessionManager:
        if self._session_manager is None:
            self._session_manager = SessionManager(
                session_timeout=settings.chat.SESSION_TIMEOUT
            )
            logger.debug("SessionManager initialized")
        return self._session_manager

    def get_reply_source(self) -> BaseReplySource:
        if self._reply_source is None:
            self._reply_source = ReplySourceFactory.create_source()
            logger.debug("Reply source initialized")
        return self._reply_source

    def set_reply_source(self, reply_source: BaseReplySource) -> None:
        self._reply_source = reply_source

    def get_upload_service(self) -> UploadService:
        if self._upload_service is None:
            self._upload_service = UploadService(
                url=settings.upload.UPLOAD_URL,
                timeout=settings.upload.UPLOAD_TIMEOUT,
            )
            logger.debug("UploadService initialized")
        return self._upload_service

    def reset(self) -> None:
        self._session_manager = None
        self._reply_source = None
        self._upload_service = None
        logger.debug("Dependency container reset")


def get_container() -> DependencyContainer:
    return DependencyContainer.get_instance()
