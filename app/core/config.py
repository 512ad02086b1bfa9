# core/config.py
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Optional

from schemas.messages import AudioFormat


class Settings(BaseSettings):
    """
    Centralized application configuration.
    Every required value is validated at import; a bad deployment never
    serves a single request.
    """

    # ------------------------------------------------------------
    # Project / Runtime
    # ------------------------------------------------------------
    PROJECT_NAME: str = "Upside Down Messages"
    DEBUG: bool = False
    ENABLE_CORS: bool = True

    # ------------------------------------------------------------
    # AWS Core
    # ------------------------------------------------------------
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_SESSION_TOKEN: Optional[str] = None

    # ------------------------------------------------------------
    # Website / S3 Storage
    # ------------------------------------------------------------
    WEBSITE_BASE_URL: str = Field(
        ...,
        description="Public base URL of the website bucket, e.g. 'https://messages.example.com/'",
    )
    S3_WEBSITE_BUCKET_NAME: str = Field(
        ...,
        min_length=1,
        description="Bucket backing the website; messages are written under messages/",
    )

    # ------------------------------------------------------------
    # Messaging (SQS)
    # ------------------------------------------------------------
    SQS_QUEUE_URL: str = Field(..., description="Queue polled by the LED strip")

    # ------------------------------------------------------------
    # Text to speech (Polly)
    # ------------------------------------------------------------
    OPTION_PERFORM_TEXT_TO_SPEECH: bool = Field(
        ...,
        description="Synthesize each accepted message to audio before queueing",
    )
    POLLY_VOICE_ID: str = "Justin"
    AUDIO_FORMAT: AudioFormat = AudioFormat.MP3

    # ------------------------------------------------------------
    # Notifications (Twilio SMS or SNS)
    # ------------------------------------------------------------
    NOTIFICATION_CHANNEL: Literal["sms", "sns", "none"] = "sms"

    """
    raise: a failed notification fails the request (5xx) even though the
           message was already stored and queued.
    log:   the failure is logged and the client still gets its response.
    """
    NOTIFICATION_FAILURE_MODE: Literal["raise", "log"] = "raise"

    SSM_TWILIO_CREDS_PARAMETER_NAME: Optional[str] = None
    SMS_SOURCE_PHONE: Optional[str] = None
    SMS_DESTINATION_PHONE: Optional[str] = None
    TWILIO_API_BASE_URL: str = "https://api.twilio.com"
    TWILIO_CREDENTIALS_TTL_SECONDS: int = Field(default=60, ge=1)
    SMS_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    SNS_TOPIC_ARN: Optional[str] = None

    # ------------------------------------------------------------
    # Profanity
    # ------------------------------------------------------------
    PROFANITY_EXTRA_WORDS: List[str] = Field(
        default_factory=list,
        description="Additional words flagged on top of the bundled word list (JSON array)",
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("WEBSITE_BASE_URL", "SQS_QUEUE_URL")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be an absolute http(s) URL")
        return value

    @model_validator(mode="after")
    def _require_channel_settings(self) -> "Settings":
        if self.NOTIFICATION_CHANNEL == "sms":
            missing = [
                name
                for name in (
                    "SSM_TWILIO_CREDS_PARAMETER_NAME",
                    "SMS_SOURCE_PHONE",
                    "SMS_DESTINATION_PHONE",
                )
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"NOTIFICATION_CHANNEL=sms requires {', '.join(missing)}")
        elif self.NOTIFICATION_CHANNEL == "sns" and not self.SNS_TOPIC_ARN:
            raise ValueError("NOTIFICATION_CHANNEL=sns requires SNS_TOPIC_ARN")
        return self


settings = Settings()
