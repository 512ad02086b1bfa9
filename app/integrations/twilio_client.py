# app/integrations/twilio_client.py
"""
SMS delivery through the Twilio REST API.

Credentials live in SSM Parameter Store and are cached in-process. The cache
is a single immutable snapshot `(credentials, fetched_at)` that is swapped as
a whole, so concurrent readers never observe a half-updated value. Refreshes
are serialized with an asyncio lock; a refresh re-reads the same parameter,
so a redundant one is harmless.
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from pydantic import ValidationError

from core.aws_client import get_ssm_client
from core.config import settings
from core.exceptions import DependencyIntegrityError
from core.logger import logger
from schemas.twilio_credentials import TwilioCredentials


@dataclass(frozen=True)
class CachedCredentials:
    credentials: TwilioCredentials
    fetched_at: float


class TwilioSmsClient:
    """Sends SMS notifications to a single administrator phone."""

    def __init__(
        self,
        ssm_client=None,
        parameter_name: Optional[str] = None,
        source_phone: Optional[str] = None,
        destination_phone: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
        api_base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ssm = ssm_client or get_ssm_client()
        self.parameter_name = parameter_name or settings.SSM_TWILIO_CREDS_PARAMETER_NAME
        self.source_phone = source_phone or settings.SMS_SOURCE_PHONE
        self.destination_phone = destination_phone or settings.SMS_DESTINATION_PHONE
        self.ttl_seconds = ttl_seconds or settings.TWILIO_CREDENTIALS_TTL_SECONDS
        self.api_base_url = (api_base_url or settings.TWILIO_API_BASE_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.SMS_TIMEOUT_SECONDS
        self._clock = clock
        self._cached: Optional[CachedCredentials] = None
        self._refresh_lock = asyncio.Lock()

    # ========================================================================
    # CREDENTIALS
    # ========================================================================

    def _is_fresh(self, cached: Optional[CachedCredentials]) -> bool:
        return cached is not None and self._clock() - cached.fetched_at <= self.ttl_seconds

    def _load_credentials(self) -> TwilioCredentials:
        logger.info(f"Loading Twilio credentials from SSM parameter={self.parameter_name}")
        resp = self._ssm.get_parameter(Name=self.parameter_name, WithDecryption=True)

        value = (resp.get("Parameter") or {}).get("Value")
        if not value:
            raise DependencyIntegrityError(f"SSM parameter {self.parameter_name} has no value")

        try:
            credentials = TwilioCredentials.model_validate_json(value)
        except ValidationError as e:
            # the pydantic error would echo the secret value back
            raise DependencyIntegrityError(
                f"SSM parameter {self.parameter_name} is not valid Twilio credentials JSON "
                f"({e.error_count()} errors)"
            ) from None

        logger.info(f"Twilio credentials loaded: {credentials.masked()}")
        return credentials

    async def get_credentials(self) -> TwilioCredentials:
        cached = self._cached
        if self._is_fresh(cached):
            return cached.credentials

        async with self._refresh_lock:
            cached = self._cached
            if not self._is_fresh(cached):
                credentials = await asyncio.to_thread(self._load_credentials)
                cached = CachedCredentials(credentials=credentials, fetched_at=self._clock())
                self._cached = cached
        return cached.credentials

    # ========================================================================
    # SENDING
    # ========================================================================

    def _post_message(self, credentials: TwilioCredentials, text: str) -> str:
        url = f"{self.api_base_url}/2010-04-01/Accounts/{credentials.account_sid}/Messages.json"
        resp = requests.post(
            url,
            data={
                "From": self.source_phone,
                "To": self.destination_phone,
                "Body": text,
            },
            auth=(credentials.api_key, credentials.api_secret),
            timeout=self.timeout_seconds,
        )
        resp.raise_for_status()
        return resp.json().get("sid", "")

    async def send_sms(self, text: str) -> str:
        credentials = await self.get_credentials()
        sid = await asyncio.to_thread(self._post_message, credentials, text)
        logger.info(f"SMS sent to={self.destination_phone} sid={sid}")
        return sid
