# schemas/twilio_credentials.py
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


def mask_secret(value: str) -> str:
    """Keep the first and last two characters, star out the rest."""
    if len(value) <= 4:
        return "*" * len(value)
    return value[:2] + "*" * (len(value) - 4) + value[-2:]


class TwilioCredentials(BaseModel):
    """
    Twilio API key credentials, stored as a JSON SecureString in SSM:
    {"accountSid": "...", "apiKey": "...", "apiSecret": "..."}
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    account_sid: str = Field(..., alias="accountSid", min_length=1)
    api_key: str = Field(..., alias="apiKey", min_length=1)
    api_secret: str = Field(..., alias="apiSecret", min_length=1)

    def masked(self) -> Dict[str, str]:
        return {
            "accountSid": mask_secret(self.account_sid),
            "apiKey": mask_secret(self.api_key),
            "apiSecret": mask_secret(self.api_secret),
        }
