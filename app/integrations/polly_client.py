# app/integrations/polly_client.py
import asyncio
from dataclasses import dataclass
from typing import Optional

from core.aws_client import get_polly_client
from core.config import settings
from core.exceptions import DependencyIntegrityError
from core.logger import logger
from schemas.messages import AudioFormat


@dataclass(frozen=True)
class SpeechSynthesis:
    audio: bytes
    content_type: str


class PollySpeechSynthesizer:
    """Text to speech through Amazon Polly with a fixed voice."""

    def __init__(self, client=None, voice_id: Optional[str] = None):
        self._polly = client or get_polly_client()
        self.voice_id = voice_id or settings.POLLY_VOICE_ID

    async def synthesize(self, text: str, audio_format: AudioFormat) -> SpeechSynthesis:
        """
        Synthesize `text` to audio.

        Raises:
            DependencyIntegrityError: Polly answered without an audio stream
                or without a content type. Partial audio is never returned.
        """
        resp = await asyncio.to_thread(
            self._polly.synthesize_speech,
            OutputFormat=audio_format.value,
            Text=text,
            VoiceId=self.voice_id,
        )

        stream = resp.get("AudioStream")
        if stream is None:
            raise DependencyIntegrityError("`AudioStream` missing from synthesize_speech response")
        content_type = resp.get("ContentType")
        if not content_type:
            raise DependencyIntegrityError("`ContentType` missing from synthesize_speech response")

        audio = await asyncio.to_thread(stream.read)
        logger.info(
            f"Polly synthesis ok voice={self.voice_id} format={audio_format.value} "
            f"content_type={content_type} bytes={len(audio)}"
        )
        return SpeechSynthesis(audio=audio, content_type=content_type)
