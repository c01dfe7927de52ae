import json
from pathlib import Path
from typing import List

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from src.core.logger import logger

BASE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = BASE_DIR / ".env"

load_dotenv(ENV_FILE, override=True)
logger.info(f"Loaded environment from: {ENV_FILE}")


def mask_sensitive_data(data: dict) -> dict:
    masked = {}
    sensitive_keys = ["key", "token", "secret", "password"]

    for key, value in data.items():
        if isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
        elif isinstance(value, str) and any(s in key.lower() for s in sensitive_keys):
            if not value:
                masked[key] = "<not set>"
            elif len(value) <= 4:
                masked[key] = "***"
            else:
                masked[key] = f"{value[:4]}...{value[-4:]}"
        else:
            masked[key] = value

    return masked


class CoreSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        protected_namespaces=(),
    )


class ChatSettings(CoreSettings):
    WELCOME_MESSAGE: str = Field(
        default="Hello! Welcome to the chat.",
        description="Body of the remote message every new session is seeded with",
    )

    # Reply source
    REPLY_SOURCE: str = Field(
        default="joke",
        description="Registered reply source used for bot messages",
    )
    REPLY_SOURCE_URL: str = Field(
        default="https://official-joke-api.appspot.com/random_joke",
    )
    REPLY_TIMEOUT: float = Field(
        default=10.0,
        gt=0.0,
        description="HTTP timeout for a single reply request (seconds)",
    )

    # Speech recognition options passed to the capture device
    SPEECH_LANG: str = Field(default="en-US")
    SPEECH_INTERIM_RESULTS: bool = Field(
        default=True,
        description="Emit partial transcripts while the user is still speaking",
    )
    SPEECH_CONTINUOUS: bool = Field(default=False)

    SESSION_TIMEOUT: int = Field(
        default=3600,
        gt=0,
        description="Idle seconds before an open chat session is cleaned up",
    )


class UploadSettings(CoreSettings):
    UPLOAD_URL: str = Field(default="http://localhost:3000/upload")
    UPLOAD_TIMEOUT: float = Field(default=30.0, gt=0.0)


class ApiSettings(CoreSettings):
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000, gt=0)
    API_WORKERS: int = Field(default=1, ge=1)
    API_CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])


class Settings(CoreSettings):
    chat: ChatSettings = Field(default_factory=ChatSettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


try:
    settings = Settings()

    settings_dict = settings.model_dump()
    masked_settings = mask_sensitive_data(settings_dict)
    logger.info(f"Settings loaded: {json.dumps(masked_settings, indent=2)}")

except ValidationError as e:
    logger.exception(f"Error validating settings: {e.json()}")
    raise
