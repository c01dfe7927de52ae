"""Events emitted by a speech capture device."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SpeechEventType(str, Enum):
    START = "start"
    RESULT = "result"
    END = "end"
    ERROR = "error"


@dataclass(frozen=True)
class SpeechEvent:
    """One event of a recognition lifecycle."""

    type: SpeechEventType
    transcript: str = ""
    is_final: bool = False
    code: Optional[str] = None  # error events only
    message: Optional[str] = None

    @classmethod
    def start(cls) -> "SpeechEvent":
        return cls(type=SpeechEventType.START)

    @classmethod
    def result(cls, transcript: str, is_final: bool = False) -> "SpeechEvent":
        return cls(type=SpeechEventType.RESULT, transcript=transcript, is_final=is_final)

    @classmethod
    def end(cls) -> "SpeechEvent":
        return cls(type=SpeechEventType.END)

    @classmethod
    def error(cls, code: str, message: str = "") -> "SpeechEvent":
        return cls(type=SpeechEventType.ERROR, code=code, message=message)
