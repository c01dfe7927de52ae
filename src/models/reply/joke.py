"""Joke API reply source."""

from typing import Optional

import httpx

from src.core.exceptions import ReplySourceFailure
from src.core.logger import logger
from src.models.reply.base import BaseReplySource, ReplySourceConfig


class JokeReplySourceConfig(ReplySourceConfig):
    source_name: str = "joke"
    url: str = "https://official-joke-api.appspot.com/random_joke"


class JokeReplySource(BaseReplySource):
    """Answers every message with a random joke (setup, newline, punchline)."""

    def __init__(
        self,
        config: JokeReplySourceConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config)
        self.config: JokeReplySourceConfig = config
        self._transport = transport

    async def request(self) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    self.config.url, headers={"Accept": "application/json"}
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Joke API returned {e.response.status_code}")
            raise ReplySourceFailure(
                f"Failed to fetch joke: {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching joke: {e}")
            raise ReplySourceFailure(f"Failed to fetch joke: {str(e)}") from e

        try:
            return f"{payload['setup']}\n{payload['punchline']}"
        except (KeyError, TypeError) as e:
            raise ReplySourceFailure(f"Malformed joke payload: {payload!r}") from e
