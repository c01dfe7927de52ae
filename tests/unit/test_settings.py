from src.core.settings import mask_sensitive_data, settings


def test_mask_sensitive_data():
    masked = mask_sensitive_data({
        "API_KEY": "sk-1234567890",
        "SHORT_TOKEN": "abc",
        "EMPTY_SECRET": "",
        "UPLOAD_URL": "http://localhost:3000/upload",
        "nested": {"PASSWORD": "hunter2hunter2"},
    })

    assert masked["API_KEY"] == "sk-1...7890"
    assert masked["SHORT_TOKEN"] == "***"
    assert masked["EMPTY_SECRET"] == "<not set>"
    assert masked["UPLOAD_URL"] == "http://localhost:3000/upload"
    assert masked["nested"]["PASSWORD"] == "hunt...ter2"


def test_chat_defaults():
    assert settings.chat.WELCOME_MESSAGE == "Hello! Welcome to the chat."
    assert settings.chat.SPEECH_LANG == "en-US"
    assert settings.upload.UPLOAD_URL.endswith("/upload")
