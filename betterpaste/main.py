import asyncio
import logging
import logging.config
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from betterpaste.config import Settings, load_settings
from betterpaste.routers.control import limiter, router as control_router
from betterpaste.routers.diff import router as diff_router
from betterpaste.services.dedup_store import DedupStore, FileSessionStorage
from betterpaste.services.dispatcher import SyncDispatcher
from betterpaste.services.patch_inbox import PatchInbox
from betterpaste.services.scanner import Scanner, ScannerState
from betterpaste.services.text_source import build_text_source

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)


def build_scanner(settings: Settings) -> Scanner:
    """Wire a scanner from *settings*; it starts paused."""
    storage = FileSessionStorage(settings.session_file) if settings.session_file else None
    return Scanner(
        SyncDispatcher(settings.server_url, timeout=settings.request_timeout),
        build_text_source(settings.watch_url, settings.watch_html_file),
        state=ScannerState(dedup_store=DedupStore(storage)),
        scan_interval_ms=settings.scan_interval_ms,
        synced_revert_ms=settings.synced_revert_ms,
        max_single_line=settings.suspicious_line_length,
        suppress_in_flight=settings.suppress_in_flight,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = load_settings()
    scanner = build_scanner(settings)
    app.state.settings = settings
    app.state.scanner = scanner
    app.state.inbox = PatchInbox(auto_dismiss=settings.inbox_auto_dismiss)

    loop_task: Optional[asyncio.Task] = None
    if scanner.source is not None:
        loop_task = asyncio.create_task(scanner.run())
    else:
        logger.info("No page configured; scanning only via POST /scanner/scan")

    try:
        yield
    finally:
        scanner.stop()
        if loop_task is not None:
            await loop_task
        await scanner.aclose()


app = FastAPI(
    title="BetterPaste Connector",
    description="Finds patch blocks in chat transcripts and forwards each new one to a local inbox.",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(control_router)
app.include_router(diff_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from BetterPaste"}
