# routers/router.py
"""
FastAPI Router for message submission
"""

from fastapi import (
    APIRouter,
    Depends,
    Request,
    Response,
    status
)

from core.config import settings
from core.logger import logger
from integrations.sqs_client import SqsMessageQueue
from schemas.messages import HealthResponse
from services.message_service import MessageService, get_message_queue, get_message_service


# ============================================================================
# ROUTER CONFIGURATION
# ============================================================================

router = APIRouter(
    prefix="/api",
    tags=["Messages"],
    responses={
        500: {"description": "Internal Server Error"}
    }
)


# ============================================================================
# HEALTH CHECK ENDPOINTS
# ============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Service Health Check",
    description="Validates queue connectivity"
)
async def check_health(
    queue: SqsMessageQueue = Depends(get_message_queue)
) -> HealthResponse:
    health_status = HealthResponse(
        status="healthy",
        message="Message intake is operational",
        text_to_speech=settings.OPTION_PERFORM_TEXT_TO_SPEECH,
        notification_channel=settings.NOTIFICATION_CHANNEL,
    )

    try:
        await queue.ping()
        health_status.sqs_status = "connected"
    except Exception as e:
        logger.error(f"SQS health check failed: {e}")
        health_status.sqs_status = f"error: {str(e)[:100]}"
        health_status.status = "degraded"

    return health_status


# ============================================================================
# MESSAGE ENDPOINTS
# ============================================================================

@router.post(
    "/messages",
    status_code=status.HTTP_200_OK,
    summary="Submit Message",
    description="Queue a message for the LED strip",
    responses={
        400: {"description": "Invalid request or profanity detected"}
    }
)
async def submit_message(
    request: Request,
    service: MessageService = Depends(get_message_service)
) -> Response:
    """
    Accept one message submission.

    The body is read raw so that malformed JSON reaches the handler (and
    fails there) instead of being turned into a 422 by FastAPI.

    Responses:
    - 200: `{approximateQueueIndex, message}`
    - 400: `{errorMessage, request}` or `{errorCode: "profanity-detected", request}`
    - 500: malformed JSON or a failed downstream call
    """
    raw_body = await request.body()

    try:
        result = await service.handle(raw_body)
    except Exception as e:
        logger.exception(f"Message submission failed: {e}")
        raise

    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type="application/json"
    )
