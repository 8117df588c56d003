import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cardsurfer.api import deck_router, health_router, search_router, sync_router
from cardsurfer.config import settings
from cardsurfer.db.database import init_db
from cardsurfer.jobs.sync_inventory import get_syncer, run_periodic_sync
from cardsurfer.models.failure import KnownError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: create tables, then run the inventory sync schedule."""
    logger.info("Store domain: %s", settings.shopify_store_domain or "NOT SET")
    client_id = settings.shopify_client_id
    logger.info("Client ID: %s", f"{client_id[:8]}..." if client_id else "NOT SET")
    logger.info("Client secret: %s", "SET" if settings.shopify_client_secret else "NOT SET")

    await init_db()

    sync_task: asyncio.Task[None] | None = None
    if settings.sync_interval_minutes > 0:
        sync_task = asyncio.create_task(
            run_periodic_sync(
                get_syncer(),
                settings.sync_interval_minutes,
                run_immediately=settings.sync_on_startup,
            )
        )

    yield

    if sync_task:
        sync_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sync_task


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cardsurfer"),
    lifespan=lifespan,
)

app.include_router(deck_router, prefix=API_PREFIX)
app.include_router(health_router, prefix=API_PREFIX)
app.include_router(search_router, prefix=API_PREFIX)
app.include_router(sync_router, prefix=API_PREFIX)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Log every request with its status code and duration."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s - %d (%.0fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Domain errors carry their own status code and user-facing message."""
    if exc.status_code >= 500:
        logger.error("%s: %s (%s)", exc.kind.value, exc.message, exc.detail)
    else:
        logger.info("%s: %s", exc.kind.value, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are caller errors: 400 with the first problem."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Missing or invalid {field!r} field: {first.get('msg')}"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": f"Internal server error: {exc}"},
    )


@app.get("/")
async def root() -> dict[str, object]:
    """Service description and endpoint index."""
    return {
        "service": settings.app_name,
        "version": app.version,
        "endpoints": {
            "POST /api/deck/import": "Parse a deck list (text or URL) and match against inventory",
            "POST /api/deck/parse": "Parse a deck list without matching",
            "POST /api/deck/match": "Match card names against inventory",
            "POST /api/deck/auto-select": "Auto-select variants (cheapest or best-condition)",
            "GET /api/search?q=": "Search cards by name",
            "GET /api/sync/status": "Get inventory sync status",
            "POST /api/sync/trigger": "Trigger manual inventory sync",
            "GET /api/health": "Health check",
        },
    }
