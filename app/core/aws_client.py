# core/aws_client.py
"""
Centralized AWS client factory to ensure proper credential handling.
This module creates AWS clients with explicit credential configuration.

Retries are disabled on every client: the intake handler performs no retries
of its own and leaves them to the caller.
"""
import boto3
from botocore.config import Config
from core.config import settings
from core.logger import logger
import os


_NO_RETRY_CONFIG = Config(
    connect_timeout=10,
    read_timeout=30,
    retries={'max_attempts': 0}
)


def _credentials():
    # Settings (which loads from .env) first, then the plain environment
    return {
        "aws_access_key_id": getattr(settings, 'AWS_ACCESS_KEY_ID', None) or os.getenv('AWS_ACCESS_KEY_ID'),
        "aws_secret_access_key": getattr(settings, 'AWS_SECRET_ACCESS_KEY', None) or os.getenv('AWS_SECRET_ACCESS_KEY'),
        "aws_session_token": getattr(settings, 'AWS_SESSION_TOKEN', None) or os.getenv('AWS_SESSION_TOKEN'),
    }


def _create_client(service_name: str, label: str):
    try:
        client = boto3.client(
            service_name,
            region_name=settings.AWS_REGION,
            config=_NO_RETRY_CONFIG,
            **_credentials()
        )
        logger.info(f"{label} client initialized with credentials")
        return client
    except Exception as e:
        logger.error(f"Failed to initialize {label} client: {str(e)}")
        raise


def get_s3_client():
    """Get S3 client with proper credentials."""
    return _create_client("s3", "S3")


def get_sqs_client():
    """Get SQS client with proper credentials."""
    return _create_client("sqs", "SQS")


def get_polly_client():
    """Get Polly client with proper credentials."""
    return _create_client("polly", "Polly")


def get_ssm_client():
    """Get SSM (Parameter Store) client with proper credentials."""
    return _create_client("ssm", "SSM")


def get_sns_client():
    """Get SNS client with proper credentials."""
    return _create_client("sns", "SNS")


def validate_aws_credentials():
    """Validate that AWS credentials are properly configured."""
    credentials = _credentials()

    if not credentials["aws_access_key_id"] or not credentials["aws_secret_access_key"]:
        logger.warning("No explicit AWS credentials in settings or environment")
        logger.info("Falling back to the default boto3 credential chain (instance role, "
                    "AWS_PROFILE, or 'aws configure')")
        return False

    logger.info("AWS credentials found and validated")
    return True
