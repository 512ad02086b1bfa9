# services/message_service.py
"""
Message intake: one submission from the website form, start to finish.

    parse -> validate -> profanity -> id -> [synthesize] -> store -> queue -> notify

Only two outcomes are expected failures and come back as typed 400 responses:
a body that does not match MessageRequest, and profane text. Anything else
(malformed JSON, incomplete synthesizer output, AWS/Twilio transport errors)
propagates to the caller and ends as a 5xx. Nothing here retries.
"""

import asyncio
import base64
import hashlib
import json
from functools import lru_cache
from typing import Optional, Union

from pydantic import ValidationError

from core.config import settings
from core.exceptions import ConfigurationError
from core.logger import logger
from integrations.polly_client import PollySpeechSynthesizer, SpeechSynthesis
from integrations.s3_client import S3ObjectStore, public_url
from integrations.sqs_client import SqsMessageQueue
from schemas.messages import (
    AudioFormat,
    BadRequestMessageResponse,
    HandlerResult,
    Message,
    MessageRequest,
    MessageResponse,
    OkMessageResponse,
    ProfaneTextMessageResponse,
)
from services.notification_service import NotificationService, build_notification_service
from services.profanity_service import ProfanityService, build_default_detectors

MESSAGE_KEY_PREFIX = "messages/"


def message_id_for(text: str) -> str:
    """
    Content hash of the message text. Identical texts share an id and
    overwrite each other's stored artifacts.
    """
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def _reject_constant(name: str) -> None:
    # NaN, Infinity and -Infinity are not JSON
    raise json.JSONDecodeError(f"{name} is not valid JSON", name, 0)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(p) for p in err["loc"]) or "request"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


class MessageService:
    """Handles `POST /api/messages` submissions."""

    def __init__(
        self,
        store: S3ObjectStore,
        queue: SqsMessageQueue,
        profanity: ProfanityService,
        notifications: NotificationService,
        synthesizer: Optional[PollySpeechSynthesizer] = None,
        text_to_speech: bool = False,
        audio_format: AudioFormat = AudioFormat.MP3,
        base_url: Optional[str] = None,
    ):
        if text_to_speech and synthesizer is None:
            raise ConfigurationError("Text to speech is enabled but no synthesizer was provided")

        self.store = store
        self.queue = queue
        self.profanity = profanity
        self.notifications = notifications
        self.synthesizer = synthesizer
        self.text_to_speech = text_to_speech
        self.audio_format = audio_format
        self.base_url = base_url or settings.WEBSITE_BASE_URL

    async def handle(self, raw_body: Union[str, bytes, None]) -> HandlerResult:
        """
        Handle one submission.

        Args:
            raw_body: Request body, expected to be JSON.

        Returns:
            HandlerResult with status 200 (accepted) or 400 (bad request / profane).

        Raises:
            json.JSONDecodeError: body is not JSON (including NaN or Infinity). Deliberately not mapped to a 400.
            DependencyIntegrityError: synthesizer returned incomplete output.
            Exception: any storage, queue or notification transport error.
        """
        body = json.loads(raw_body or "", parse_constant=_reject_constant)

        try:
            request = MessageRequest.model_validate(body)
        except ValidationError as e:
            rejection = BadRequestMessageResponse(error_message=_format_validation_error(e), request=body)
            logger.info(f"Submission rejected: {rejection.error_message}")
            return HandlerResult.from_response(rejection)

        logger.info(f"Submission received: text={request.text[:200]!r}")

        response: MessageResponse
        if await self.profanity.is_profane(request.text):
            response = ProfaneTextMessageResponse(request=request)
            logger.info("Submission rejected: profanity-detected")
        else:
            response = await self._accept(request)

        await self.notifications.notify(request, response)
        return HandlerResult.from_response(response)

    async def _accept(self, request: MessageRequest) -> OkMessageResponse:
        message_id = message_id_for(request.text)
        json_key = f"{MESSAGE_KEY_PREFIX}{message_id}.json"

        synthesis: Optional[SpeechSynthesis] = None
        audio_key: Optional[str] = None
        if self.text_to_speech:
            synthesis = await self.synthesizer.synthesize(request.text, self.audio_format)
            audio_key = f"{MESSAGE_KEY_PREFIX}{message_id}.{self.audio_format.file_extension}"

        message = Message(
            message_id=message_id,
            text=request.text,
            url=public_url(json_key, self.base_url),
            audio_url=public_url(audio_key, self.base_url) if audio_key else None,
            audio_format=self.audio_format if self.text_to_speech else None,
            audio_data_base64=base64.b64encode(synthesis.audio).decode("ascii") if synthesis else None,
        )

        await self._persist(message, json_key, audio_key, synthesis)

        await self.queue.send_json(message.to_json_dict())
        approximate_queue_index = await self.queue.get_approximate_depth()

        logger.info(f"Message queued: id={message_id}, approximate_queue_index={approximate_queue_index}")
        return OkMessageResponse(approximate_queue_index=approximate_queue_index, message=message)

    async def _persist(
        self,
        message: Message,
        json_key: str,
        audio_key: Optional[str],
        synthesis: Optional[SpeechSynthesis],
    ) -> None:
        """Both writes are always attempted; the first failure is re-raised once both settle."""
        document = json.dumps(message.to_json_dict(), indent="\t", ensure_ascii=False)
        writes = []
        if synthesis is not None and audio_key is not None:
            writes.append(self.store.put_object(audio_key, synthesis.audio, synthesis.content_type))
        writes.append(self.store.put_object(json_key, document.encode("utf-8"), "application/json"))

        results = await asyncio.gather(*writes, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result


# ============================================================================
# DEPENDENCIES
# ============================================================================

@lru_cache
def get_message_queue() -> SqsMessageQueue:
    return SqsMessageQueue()


@lru_cache
def get_message_service() -> MessageService:
    return MessageService(
        store=S3ObjectStore(),
        queue=get_message_queue(),
        profanity=ProfanityService(build_default_detectors()),
        notifications=build_notification_service(),
        synthesizer=PollySpeechSynthesizer() if settings.OPTION_PERFORM_TEXT_TO_SPEECH else None,
        text_to_speech=settings.OPTION_PERFORM_TEXT_TO_SPEECH,
        audio_format=settings.AUDIO_FORMAT,
    )
