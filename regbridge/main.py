"""
FastAPI application entry point.
Builds the verification service on startup, mounts the routers, adds CORS
and runs the optional background tasks (Telegram polling, ledger sweep).
"""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from regbridge.config import get_settings
from regbridge.routers import auth, register, webhook
from regbridge.services.directory import HandleDirectory
from regbridge.services.errors import BridgeError
from regbridge.services.ledger import VerificationLedger
from regbridge.services.registrar import HttpRegistrar, StubRegistrar
from regbridge.services.verification import VerificationService
from regbridge.telegram.client import tg_client
from regbridge.telegram.poller import run_polling

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


def build_service() -> VerificationService:
    """Construct the service and load the saved chat ids."""
    directory = HandleDirectory(Path(settings.data_dir) / settings.chat_ids_file)
    directory.ensure_data_dir()
    directory.load_all()

    if settings.registration_backend_url:
        registrar = HttpRegistrar(
            settings.registration_backend_url,
            timeout=settings.registration_timeout_seconds,
        )
    else:
        registrar = StubRegistrar()

    return VerificationService(
        directory=directory,
        ledger=VerificationLedger(ttl=timedelta(minutes=settings.code_ttl_minutes)),
        dispatcher=tg_client,
        registrar=registrar,
    )


async def sweep_loop(ledger: VerificationLedger, interval: int) -> None:
    while True:
        await asyncio.sleep(interval)
        ledger.sweep()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: build the service, start the bot. Shutdown: stop background tasks."""
    if not settings.telegram_bot_token:
        logger.error("TELEGRAM_BOT_TOKEN not found! Check your .env file.")
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")

    service = build_service()
    app.state.service = service

    tasks: list[asyncio.Task] = []
    if settings.telegram_polling:
        tasks.append(asyncio.create_task(run_polling(tg_client, service)))
    elif settings.telegram_webhook_url:
        # The HTTP API keeps serving even if Telegram is unreachable at boot.
        try:
            await tg_client.set_webhook(settings.telegram_webhook_url, settings.telegram_webhook_secret)
            logger.info("Telegram webhook registered: %s", settings.telegram_webhook_url)
        except Exception:
            logger.exception("Failed to register Telegram webhook %s", settings.telegram_webhook_url)
    if settings.ledger_sweep_interval_seconds > 0:
        tasks.append(asyncio.create_task(
            sweep_loop(service.ledger, settings.ledger_sweep_interval_seconds)
        ))

    logger.info("Verification bridge started.")
    yield

    logger.info("Stopping bot and server...")
    for task in tasks:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


app = FastAPI(
    title="Registration Verification Bridge",
    description="Telegram verification codes for the student registration website",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
# Tighten CORS_ORIGINS to the registration website in production.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Student-Id", "X-Student-Name"],
)


# ── Error responses ───────────────────────────────────────────────────────────

@app.exception_handler(BridgeError)
async def bridge_error_handler(request: Request, exc: BridgeError):
    logger.info("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        field = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"{field}: {errors[0].get('msg')}" if field else errors[0].get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "An unexpected error occurred"},
    )


# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(auth.router)
app.include_router(register.router)
app.include_router(webhook.router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "service": "Registration Verification Bridge",
        "docs": "/docs",
    }
