import httpx
import pytest
from unittest.mock import patch

from src.core.exceptions import ReplySourceFailure
from src.models.reply.factory import ReplySourceFactory
from src.models.reply.joke import JokeReplySource, JokeReplySourceConfig


def _source(handler) -> JokeReplySource:
    return JokeReplySource(
        JokeReplySourceConfig(url="https://jokes.test/random_joke"),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_joke_reply_joins_setup_and_punchline():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["accept"] = request.headers.get("accept")
        return httpx.Response(
            200,
            json={"setup": "Why did the chicken cross the road?", "punchline": "To get to the other side."},
        )

    reply = await _source(handler).request()

    assert reply == "Why did the chicken cross the road?\nTo get to the other side."
    assert seen["accept"] == "application/json"


@pytest.mark.asyncio
async def test_joke_reply_raises_on_error_status():
    source = _source(lambda request: httpx.Response(503))

    with pytest.raises(ReplySourceFailure, match="503"):
        await source.request()


@pytest.mark.asyncio
async def test_joke_reply_raises_on_malformed_payload():
    source = _source(lambda request: httpx.Response(200, json={"joke": "no setup"}))

    with pytest.raises(ReplySourceFailure):
        await source.request()


@pytest.mark.asyncio
async def test_joke_reply_raises_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(ReplySourceFailure):
        await _source(handler).request()


def test_factory_creates_joke_source():
    with patch("src.models.reply.factory.settings") as mock_settings:
        mock_settings.chat.REPLY_SOURCE = "joke"
        mock_settings.chat.REPLY_SOURCE_URL = "https://jokes.test/random_joke"
        mock_settings.chat.REPLY_TIMEOUT = 5.0

        source = ReplySourceFactory.create_source()

        assert isinstance(source, JokeReplySource)
        assert source.config.url == "https://jokes.test/random_joke"
        assert source.config.timeout == 5.0


def test_factory_invalid_source():
    with pytest.raises(ValueError, match="Unknown reply source"):
        ReplySourceFactory.create_source("invalid_source")
