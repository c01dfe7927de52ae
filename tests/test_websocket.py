import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.core.dependencies import get_container


@pytest.fixture
def client(mock_reply_source):
    container = get_container()
    container.reset()
    container.set_reply_source(mock_reply_source)
    with TestClient(app) as test_client:
        yield test_client
    container.reset()


def _receive_history(ws) -> dict:
    history = ws.receive_json()
    assert history["type"] == "history"
    return history


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["active_sessions"] == 0


def test_history_contains_welcome_message(client):
    with client.websocket_connect("/ws/chat") as ws:
        history = _receive_history(ws)

    assert history["session_id"]
    assert history["messages"] == [
        {
            "id": 1,
            "kind": "text",
            "body": "Hello! Welcome to the chat.",
            "sender": "remote",
            "created_at": history["messages"][0]["created_at"],
        }
    ]


def test_text_message_gets_reply(client, mock_reply_source):
    with client.websocket_connect("/ws/chat") as ws:
        _receive_history(ws)

        ws.send_json({"type": "text", "text": "hi"})
        local = ws.receive_json()
        remote = ws.receive_json()

    assert local["type"] == "message"
    assert (local["message"]["id"], local["message"]["sender"], local["message"]["body"]) == (
        2, "local", "hi"
    )
    assert (remote["message"]["id"], remote["message"]["sender"], remote["message"]["body"]) == (
        3, "remote", "why did..."
    )
    mock_reply_source.request.assert_awaited_once()


def test_pending_input_is_submitted(client):
    with client.websocket_connect("/ws/chat") as ws:
        _receive_history(ws)

        ws.send_json({"type": "input", "text": "typed earlier"})
        ws.send_json({"type": "text"})
        local = ws.receive_json()

    assert local["message"]["body"] == "typed earlier"


def test_blank_text_sends_nothing(client, mock_reply_source):
    with client.websocket_connect("/ws/chat") as ws:
        _receive_history(ws)

        ws.send_json({"type": "text", "text": "   "})
        ws.send_json({"type": "bogus"})
        error = ws.receive_json()

    assert error == {"type": "error", "message": "Unknown message type: bogus"}
    mock_reply_source.request.assert_not_awaited()


def test_voice_capture_flow(client, mock_reply_source):
    with client.websocket_connect("/ws/chat") as ws:
        _receive_history(ws)

        ws.send_json({"type": "start_capture"})
        assert ws.receive_json() == {"type": "permission_request"}

        ws.send_json({"type": "permission", "granted": True})
        begin = ws.receive_json()
        assert begin["type"] == "begin_capture"
        assert begin["options"] == {"lang": "en-US", "interim_results": True, "continuous": False}

        ws.send_json({"type": "speech", "event": "start"})
        assert ws.receive_json() == {"type": "recognizing", "value": True}

        ws.send_json({"type": "speech", "event": "result", "transcript": "hello"})
        first = ws.receive_json()["message"]
        assert (first["id"], first["kind"], first["body"]) == (2, "voice", "hello")

        ws.send_json({"type": "stop_capture"})
        assert ws.receive_json() == {"type": "stop_capture"}

        ws.send_json(
            {"type": "speech", "event": "result", "transcript": "hello world", "is_final": True}
        )
        rewritten = ws.receive_json()["message"]
        assert (rewritten["id"], rewritten["body"]) == (2, "hello world")

        ws.send_json({"type": "speech", "event": "end"})
        assert ws.receive_json() == {"type": "recognizing", "value": False}

        reply = ws.receive_json()["message"]
        assert (reply["id"], reply["sender"]) == (3, "remote")

    mock_reply_source.request.assert_awaited_once()


def test_denied_permission_does_not_begin(client):
    with client.websocket_connect("/ws/chat") as ws:
        _receive_history(ws)

        ws.send_json({"type": "start_capture"})
        assert ws.receive_json() == {"type": "permission_request"}
        ws.send_json({"type": "permission", "granted": False})

        ws.send_json({"type": "bogus"})
        assert ws.receive_json()["type"] == "error"


def test_unknown_speech_event_is_reported(client):
    with client.websocket_connect("/ws/chat") as ws:
        _receive_history(ws)

        ws.send_json({"type": "speech", "event": "explode"})
        error = ws.receive_json()

    assert error == {"type": "error", "message": "Unknown speech event: explode"}


def test_connection_registers_session(client):
    manager = get_container().get_session_manager()

    with client.websocket_connect("/ws/chat") as ws:
        history = _receive_history(ws)

        session = manager.get_session(history["session_id"])
        assert session is not None
        assert session.connected is True
        assert session.conversation.log[0].id == 1


def test_non_string_text_is_rejected_without_closing(client):
    with client.websocket_connect("/ws/chat") as ws:
        _receive_history(ws)

        ws.send_json({"type": "text", "text": 5})
        error = ws.receive_json()

        ws.send_json({"type": "text", "text": "hi"})
        local = ws.receive_json()

    assert error == {"type": "error", "message": "Field 'text' must be a string"}
    assert local["message"]["body"] == "hi"


def test_live_session_survives_expiry_sweep(client):
    manager = get_container().get_session_manager()

    with client.websocket_connect("/ws/chat") as ws:
        history = _receive_history(ws)
        session = manager.get_session(history["session_id"])
        session.last_active = session.last_active.replace(year=session.last_active.year - 1)

        assert manager.cleanup_expired_sessions() == 0

        ws.send_json({"type": "text", "text": "still here"})
        local = ws.receive_json()

    assert local["message"]["body"] == "still here"
