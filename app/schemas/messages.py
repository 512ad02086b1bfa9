# schemas/messages.py
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class AudioFormat(str, Enum):
    """Output formats supported by the speech synthesizer"""
    MP3 = "mp3"
    OGG_VORBIS = "ogg_vorbis"
    PCM = "pcm"

    @property
    def file_extension(self) -> str:
        return {"mp3": "mp3", "ogg_vorbis": "ogg", "pcm": "pcm"}[self.value]


# ============================================================================
# REQUEST
# ============================================================================

class MessageRequest(BaseModel):
    """
    Body of `POST /api/messages`.
    Whitespace is trimmed before the length check; unknown fields are dropped.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", frozen=True)

    text: str = Field(..., min_length=1, description="Message to display on the LED strip")


# ============================================================================
# MESSAGE
# ============================================================================

class Message(BaseModel):
    """
    Stored and queued form of an accepted message.
    `audio_*` fields are only present when text-to-speech is enabled.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    message_id: str = Field(..., alias="messageId", description="Hex MD5 of the message text")
    text: str = Field(..., min_length=1)
    url: str = Field(..., description="Public URL of the stored JSON document")
    audio_url: Optional[str] = Field(None, alias="audioUrl")
    audio_format: Optional[AudioFormat] = Field(None, alias="audioFormat")
    audio_data_base64: Optional[str] = Field(None, alias="audioDataBase64")

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# RESPONSES
# ============================================================================

class OkMessageResponse(BaseModel):
    """Message accepted, stored and queued"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)
    status_code: ClassVar[int] = 200

    approximate_queue_index: int = Field(..., alias="approximateQueueIndex")
    message: Message

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "approximateQueueIndex": self.approximate_queue_index,
            "message": self.message.to_json_dict(),
        }


class BadRequestMessageResponse(BaseModel):
    """Body failed validation; the original body is echoed back"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)
    status_code: ClassVar[int] = 400

    error_message: str = Field(..., alias="errorMessage")
    request: Any = None

    def to_json_dict(self) -> Dict[str, Any]:
        return {"errorMessage": self.error_message, "request": self.request}


class ProfaneTextMessageResponse(BaseModel):
    """Message rejected by the profanity filter"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)
    status_code: ClassVar[int] = 400

    error_code: Literal["profanity-detected"] = Field("profanity-detected", alias="errorCode")
    request: MessageRequest

    def to_json_dict(self) -> Dict[str, Any]:
        return {"errorCode": self.error_code, "request": self.request.model_dump()}


MessageResponse = Union[OkMessageResponse, BadRequestMessageResponse, ProfaneTextMessageResponse]


@dataclass(frozen=True)
class HandlerResult:
    """HTTP-style result of one handled submission"""
    status_code: int
    body: str

    @classmethod
    def from_response(cls, response: MessageResponse) -> "HandlerResult":
        return cls(
            status_code=response.status_code,
            body=json.dumps(
                response.to_json_dict(), separators=(",", ":"), ensure_ascii=False, allow_nan=False
            ),
        )


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    message: str
    sqs_status: Optional[str] = None
    text_to_speech: bool = False
    notification_channel: Optional[str] = None
