import time
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.lifespan import lifespan
from core.logger import logger
from routers.router import router

QUIET_PATHS = {"/api/health"}


def _allowed_origins() -> list:
    # The website bucket is the only browser client
    if not settings.ENABLE_CORS:
        return ["*"]
    site = urlparse(settings.WEBSITE_BASE_URL)
    return [f"{site.scheme}://{site.netloc}"]


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Intake API for messages shown on the LED strip.

    **POST /api/messages** - Submit a message

    ### Request Body:
    - `text` (required): Message text; trimmed, must not be empty

    ### Response:
    - 200 `{approximateQueueIndex, message}` once the message is stored and queued
    - 400 `{errorMessage, request}` when the body is invalid
    - 400 `{errorCode: "profanity-detected", request}` when the text is rejected

    ### Headers:
    - **Response**: `x-processing-ms`
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.middleware("http")
async def time_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    response.headers["x-processing-ms"] = str(elapsed_ms)

    if request.url.path not in QUIET_PATHS:
        client = request.client.host if request.client else "unknown"
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {elapsed_ms}ms client={client}"
        )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=["x-processing-ms"],
)

app.include_router(router)


@app.get("/", tags=["Root"])
async def root():
    return {
        "service": settings.PROJECT_NAME,
        "version": app.version,
        "status": "running",
        "documentation": app.docs_url,
    }
