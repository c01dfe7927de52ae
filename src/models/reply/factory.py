from typing import Callable, Dict, Optional, Type

from src.core.logger import logger
from src.core.settings import settings
from src.models.reply.base import BaseReplySource, ReplySourceConfig
from src.models.reply.joke import JokeReplySource, JokeReplySourceConfig


class ReplySourceFactory:
    _registry: Dict[str, Callable[[ReplySourceConfig], BaseReplySource]] = {}

    @classmethod
    def register(cls, name: str, source_class: Type[BaseReplySource]) -> None:
        cls._registry[name.lower()] = source_class
        logger.debug(f"Registered reply source: {name}")

    @classmethod
    def available(cls) -> list:
        return sorted(cls._registry.keys())

    @classmethod
    def create_source(cls, source_name: Optional[str] = None) -> BaseReplySource:
        source_name = (source_name or settings.chat.REPLY_SOURCE).lower()

        if source_name not in cls._registry:
            raise ValueError(
                f"Unknown reply source: {source_name}. Available: {cls.available()}"
            )

        logger.info(f"Creating reply source: {source_name}")

        if source_name == "joke":
            config = JokeReplySourceConfig(
                url=settings.chat.REPLY_SOURCE_URL,
                timeout=settings.chat.REPLY_TIMEOUT,
            )
            return cls._registry[source_name](config)

        raise NotImplementedError(f"Configuration for {source_name} not yet implemented")


ReplySourceFactory.register("joke", JokeReplySource)
