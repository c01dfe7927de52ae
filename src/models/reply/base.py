"""Abstract base class for reply sources."""

from abc import ABC, abstractmethod

from pydantic import BaseModel


class ReplySourceConfig(BaseModel):
    """Base configuration for reply sources."""

    source_name: str
    timeout: float = 10.0


class BaseReplySource(ABC):
    """Produces the next bot message.

    The conversation history is not passed in. Each request is independent
    of the ones before it.
    """

    def __init__(self, config: ReplySourceConfig):
        self.config = config

    @abstractmethod
    async def request(self) -> str:
        """Fetch the body of the next bot message.

        Returns:
            Reply text

        Raises:
            ReplySourceFailure: when the reply could not be produced
        """
        pass
