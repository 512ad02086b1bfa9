from __future__ import annotations

import os

# Settings are validated on import; provide a complete deployment first.
_TEST_ENV = {
    "AWS_REGION": "us-east-1",
    "WEBSITE_BASE_URL": "https://messages.example.com/",
    "S3_WEBSITE_BUCKET_NAME": "test-website-bucket",
    "SQS_QUEUE_URL": "https://sqs.us-east-1.amazonaws.com/123456789012/test-messages",
    "OPTION_PERFORM_TEXT_TO_SPEECH": "false",
    "NOTIFICATION_CHANNEL": "sms",
    "NOTIFICATION_FAILURE_MODE": "raise",
    "SSM_TWILIO_CREDS_PARAMETER_NAME": "/test/twilio-creds",
    "SMS_SOURCE_PHONE": "+15550000001",
    "SMS_DESTINATION_PHONE": "+15550000002",
}
os.environ.update(_TEST_ENV)

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from integrations.polly_client import SpeechSynthesis
from main import app
from schemas.messages import AudioFormat
from services.message_service import MessageService, get_message_queue, get_message_service
from services.notification_service import NotificationService
from services.profanity_service import ProfanityService

BASE_URL = _TEST_ENV["WEBSITE_BASE_URL"]


class FakeObjectStore:
    def __init__(self, fail_suffixes: tuple[str, ...] = ()) -> None:
        self.puts: list[dict[str, Any]] = []
        self.fail_suffixes = fail_suffixes

    async def put_object(self, key: str, body: bytes | str, content_type: str) -> dict[str, Any]:
        self.puts.append({"key": key, "body": body, "content_type": content_type})
        if key.endswith(self.fail_suffixes) and self.fail_suffixes:
            raise RuntimeError(f"s3 unavailable for {key}")
        return {"ETag": '"etag"'}

    def keys(self) -> list[str]:
        return sorted(put["key"] for put in self.puts)

    def body_of(self, key: str) -> bytes | str:
        return next(put["body"] for put in self.puts if put["key"] == key)


class FakeQueue:
    queue_url = _TEST_ENV["SQS_QUEUE_URL"]

    def __init__(self, depths: list[int] | None = None, reachable: bool = True) -> None:
        self.sent: list[dict[str, Any]] = []
        self.depth_reads = 0
        self._depths = list(depths or [0])
        self.reachable = reachable

    async def send_json(self, payload: dict[str, Any]) -> str:
        self.sent.append(payload)
        return f"msg-{len(self.sent)}"

    async def get_approximate_depth(self) -> int:
        depth = self._depths[min(self.depth_reads, len(self._depths) - 1)]
        self.depth_reads += 1
        return depth

    async def ping(self) -> None:
        if not self.reachable:
            raise RuntimeError("queue does not exist")


class FakeSynthesizer:
    def __init__(self, audio: bytes = b"ID3-fake-audio", content_type: str = "audio/mpeg") -> None:
        self.calls: list[tuple[str, AudioFormat]] = []
        self.audio = audio
        self.content_type = content_type

    async def synthesize(self, text: str, audio_format: AudioFormat) -> SpeechSynthesis:
        self.calls.append((text, audio_format))
        return SpeechSynthesis(audio=self.audio, content_type=self.content_type)


class FakeSmsClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[str] = []
        self.error = error

    async def send_sms(self, text: str) -> str:
        self.sent.append(text)
        if self.error is not None:
            raise self.error
        return "SM-test"


class FakeSnsPublisher:
    def __init__(self) -> None:
        self.published: list[str] = []

    async def publish(self, message: str) -> str:
        self.published.append(message)
        return "sns-test"


class StaticDetector:
    """Flags any text containing one of `words` (case-insensitive substring)."""

    def __init__(self, words: tuple[str, ...] = ("darn",), name: str = "static") -> None:
        self.words = words
        self.name = name
        self.calls: list[str] = []

    def is_profane(self, text: str) -> bool:
        self.calls.append(text)
        return any(word in text.lower() for word in self.words)


@pytest.fixture()
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture()
def queue() -> FakeQueue:
    return FakeQueue(depths=[7])


@pytest.fixture()
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture()
def sms() -> FakeSmsClient:
    return FakeSmsClient()


@pytest.fixture()
def detector() -> StaticDetector:
    return StaticDetector()


@pytest.fixture()
def make_service(
    store: FakeObjectStore,
    queue: FakeQueue,
    synthesizer: FakeSynthesizer,
    sms: FakeSmsClient,
    detector: StaticDetector,
) -> Callable[..., MessageService]:
    def _make(
        text_to_speech: bool = False,
        notifications: NotificationService | None = None,
        **overrides: Any,
    ) -> MessageService:
        kwargs: dict[str, Any] = {
            "store": store,
            "queue": queue,
            "profanity": ProfanityService([detector]),
            "notifications": notifications
            or NotificationService(channel="sms", failure_mode="raise", sms_client=sms),
            "synthesizer": synthesizer,
            "text_to_speech": text_to_speech,
            "audio_format": AudioFormat.MP3,
            "base_url": BASE_URL,
        }
        kwargs.update(overrides)
        return MessageService(**kwargs)

    return _make


@pytest.fixture()
async def async_client(
    make_service: Callable[..., MessageService], queue: FakeQueue
) -> AsyncGenerator[AsyncClient, None]:
    service = make_service()
    app.dependency_overrides[get_message_service] = lambda: service
    app.dependency_overrides[get_message_queue] = lambda: queue
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
