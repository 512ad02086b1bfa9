from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.aws_client import validate_aws_credentials
from core.config import settings
from core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles application startup. Settings were already validated on import,
    so this only reports what the deployment is configured to do.
    """
    validate_aws_credentials()
    logger.info(
        f"Lifespan startup: bucket={settings.S3_WEBSITE_BUCKET_NAME}, "
        f"tts={settings.OPTION_PERFORM_TEXT_TO_SPEECH}, "
        f"notification={settings.NOTIFICATION_CHANNEL}/{settings.NOTIFICATION_FAILURE_MODE}"
    )
    yield
    logger.info("Lifespan shutdown.")
