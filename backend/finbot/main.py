"""
FastAPI application entry point.

The Telegram bot and the bill reminder scheduler run inside the API process
and are started and stopped with the application lifespan.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from finbot.api.router import api_router
from finbot.bot.application import start_bot, stop_bot
from finbot.config import settings
from finbot.database import SessionLocal, init_db
from finbot.exceptions import FinBotError
from finbot.schemas.common import fail
from finbot.services.bill_reminder_service import BillReminderScheduler

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    bot = await start_bot()
    scheduler = None
    if bot is not None:
        scheduler = BillReminderScheduler(bot.bot_data["reminders"], SessionLocal)
        scheduler.start()
    logger.info("%s API ready", settings.app_name)

    yield

    if scheduler is not None:
        await scheduler.stop()
    await stop_bot(bot)


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="Personal finance tracker with a Telegram front-end and AI-powered entry",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FinBotError)
async def finbot_error_handler(request: Request, exc: FinBotError):
    return JSONResponse(status_code=exc.status_code, content=fail(exc.message))


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content=fail(str(exc.detail)))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Dados invalidos")
    else:
        message = "Dados invalidos"
    return JSONResponse(status_code=400, content=fail(message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=fail("Erro interno do servidor"))


# Include API router
app.include_router(api_router, prefix="/api")


@app.get("/")
def read_root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "running"
    }
