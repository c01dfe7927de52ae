"""Reply source interfaces and implementations."""

from src.models.reply.base import BaseReplySource, ReplySourceConfig
from src.models.reply.joke import JokeReplySource, JokeReplySourceConfig

__all__ = [
    "BaseReplySource",
    "ReplySourceConfig",
    "JokeReplySource",
    "JokeReplySourceConfig",
]
