"""Application entrypoint for FastAPI and bot startup."""

import asyncio
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from aiogram import Dispatcher
from aiogram.types import Update
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from thelist.bot.instance import bot
from thelist.bot.router import setup_routers
from thelist.bot.session import user_sessions, wheel_panels
from thelist.config import config
from thelist.core import PRIMARY_LIST_TYPES
from thelist.jobs import setup_all_jobs, shutdown_scheduler, start_scheduler
from thelist.logging import get_logger, setup_logging
from thelist.storage import (
    RecordsRepo,
    UsersRepo,
    close_engine,
    ensure_schema,
    get_session_factory,
)
from thelist.storage.snapshots import get_snapshot_cache

setup_logging(config.log_level)
logger = get_logger(__name__)

dp = Dispatcher()

setup_routers(dp)


async def verify_admin_token(
    authorization: str | None = Header(None, alias="Authorization"),
) -> None:
    """Verify admin token for protected endpoints.

    Args:
        authorization: Authorization header value

    Raises:
        HTTPException: If token is invalid or missing
    """
    if not config.admin_token:
        raise HTTPException(
            status_code=503,
            detail="Admin endpoints not configured (ADMIN_TOKEN not set)",
        )

    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")

    # Support "Bearer <token>" or just "<token>"
    token = authorization
    if authorization.startswith("Bearer "):
        token = authorization[7:]

    if token != config.admin_token:
        raise HTTPException(status_code=403, detail="Invalid admin token")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting application")

    await ensure_schema()
    logger.info("Database tables ensured")

    start_scheduler()
    setup_all_jobs()

    if config.bot_mode == "webhook":
        webhook_full_url = f"{config.webhook_url}{config.webhook_path}"
        logger.info(f"Setting webhook to {webhook_full_url}")
        await bot.set_webhook(
            url=webhook_full_url,
            drop_pending_updates=True,
        )
        logger.info("Webhook registered successfully")

    yield

    logger.info("Shutting down application")

    shutdown_scheduler()

    if config.bot_mode == "webhook":
        await bot.delete_webhook()
        logger.info("Webhook deleted")

    await bot.session.close()
    await close_engine()
    logger.info("Bot session closed")


app = FastAPI(
    title="THE LIST Bot",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"ok": True}


@app.post(config.webhook_path)
async def telegram_webhook(request: Request) -> JSONResponse:
    """Handle incoming Telegram webhook updates."""
    if config.bot_mode != "webhook":
        return JSONResponse(
            status_code=400,
            content={"error": "Webhook mode is not enabled"},
        )

    try:
        data = await request.json()
        update = Update.model_validate(data, context={"bot": bot})
        await dp.feed_update(bot=bot, update=update)
        return JSONResponse(content={"ok": True})
    except Exception as e:
        logger.exception(f"Error processing webhook update: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )


class UserStats(BaseModel):
    """Registered users and live sessions."""

    total: int
    active_sessions: int


class WheelStats(BaseModel):
    """In-memory wheel state."""

    open_panels: int
    cached_snapshots: int


class StatsResponse(BaseModel):
    """Payload of /admin/stats."""

    users: UserStats
    records: dict[str, int]
    wheel: WheelStats


@app.get("/admin/stats", response_model=StatsResponse)
async def get_stats(
    _: None = Depends(verify_admin_token),
) -> StatsResponse:
    """Get application statistics.

    Requires admin token in Authorization header.

    Returns:
        User and record counts, plus in-memory cache sizes
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        records_repo = RecordsRepo(session)
        total_users = await UsersRepo(session).count_users()
        total_records = await records_repo.count_records()
        per_list = {
            list_type: await records_repo.count_records(list_type=list_type)
            for list_type in PRIMARY_LIST_TYPES
        }

    return StatsResponse(
        users=UserStats(total=total_users, active_sessions=len(user_sessions)),
        records={"total": total_records, **per_list},
        wheel=WheelStats(
            open_panels=len(wheel_panels),
            cached_snapshots=len(get_snapshot_cache()),
        ),
    )


async def run_polling() -> None:
    """Run the bot in polling mode."""
    logger.info("Starting bot in polling mode")

    await ensure_schema()
    logger.info("Database tables ensured")

    start_scheduler()
    setup_all_jobs()

    try:
        await dp.start_polling(
            bot,
            drop_pending_updates=True,
            allowed_updates=["message", "callback_query"],
        )
    finally:
        shutdown_scheduler()
        await bot.session.close()
        await close_engine()
        logger.info("Polling stopped, bot session closed")


def main() -> None:
    """Main entrypoint supporting both polling and webhook modes."""
    if len(sys.argv) > 1 and sys.argv[1] == "polling":
        asyncio.run(run_polling())
    elif config.bot_mode == "polling" and len(sys.argv) == 1:
        asyncio.run(run_polling())
    else:
        logger.info(f"Starting FastAPI server on {config.host}:{config.port}")
        uvicorn.run(
            "thelist.main:app",
            host=config.host,
            port=config.port,
            reload=False,
        )


if __name__ == "__main__":
    main()
