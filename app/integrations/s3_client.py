# app/integrations/s3_client.py
import asyncio
from typing import Any, Dict, Optional, Union
from urllib.parse import urljoin

from core.aws_client import get_s3_client
from core.config import settings
from core.logger import logger


def public_url(key: str, base_url: Optional[str] = None) -> str:
    """Resolve a bucket key against the website base URL."""
    return urljoin(base_url or settings.WEBSITE_BASE_URL, key)


class S3ObjectStore:
    """Writes message artifacts into the website bucket."""

    def __init__(self, client=None, bucket: Optional[str] = None):
        self._s3 = client or get_s3_client()
        self.bucket = bucket or settings.S3_WEBSITE_BUCKET_NAME

    async def put_object(
        self,
        key: str,
        body: Union[bytes, str],
        content_type: str,
    ) -> Dict[str, Any]:
        resp = await asyncio.to_thread(
            self._s3.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
        )
        logger.info(
            f"S3 put ok bucket={self.bucket} key={key} "
            f"content_type={content_type} etag={resp.get('ETag')}"
        )
        return resp
