"""Safe message sending utilities with retry logic."""

import asyncio
import os
from typing import Any, Awaitable, Callable, TypeVar

from aiogram import Bot
from aiogram.exceptions import (
    TelegramBadRequest,
    TelegramForbiddenError,
    TelegramRetryAfter,
    TelegramServerError,
)
from aiogram.types import FSInputFile, InlineKeyboardMarkup, Message

from thelist.logging import get_logger

logger = get_logger(__name__)

MAX_RETRIES = 3

T = TypeVar("T")


async def _with_retries(
    action: str,
    chat_id: int,
    call: Callable[[], Awaitable[T]],
) -> T | None:
    """Run a Telegram call with backoff on rate limits and server errors.

    Args:
        action: Short description for log lines ("send", "edit", ...)
        chat_id: Target chat ID (for logging)
        call: Zero-arg coroutine factory performing the request

    Returns:
        The call's result, or None if it failed
    """
    last_error: Exception | None = None

    for attempt in range(MAX_RETRIES):
        try:
            return await call()

        except TelegramRetryAfter as e:
            logger.warning(
                f"Rate limited on {action} to {chat_id}, "
                f"retry after {e.retry_after}s (attempt {attempt + 1}/{MAX_RETRIES})"
            )
            last_error = e
            if attempt < MAX_RETRIES - 1:
                await asyncio.sleep(e.retry_after)

        except TelegramServerError as e:
            logger.warning(
                f"Telegram server error on {action} to {chat_id}: {e} "
                f"(attempt {attempt + 1}/{MAX_RETRIES})"
            )
            last_error = e
            if attempt < MAX_RETRIES - 1:
                await asyncio.sleep(2 ** attempt)

        except TelegramForbiddenError:
            logger.info(f"User {chat_id} has blocked the bot or chat is unavailable")
            return None

        except TelegramBadRequest as e:
            if "message is not modified" in str(e):
                logger.debug(f"Skipped no-op {action} in {chat_id}")
            else:
                logger.error(f"Bad request on {action} to {chat_id}: {e}")
            return None

        except Exception as e:
            logger.exception(f"Unexpected error on {action} to {chat_id}: {e}")
            return None

    logger.error(f"Failed {action} to {chat_id} after {MAX_RETRIES} attempts: {last_error}")
    return None


async def safe_send_message(
    bot: Bot | None,
    chat_id: int,
    text: str,
    reply_markup: InlineKeyboardMarkup | None = None,
    **kwargs: Any,
) -> Message | None:
    """Send a message with retry logic for rate limits.

    Returns:
        The sent Message object, or None if sending failed
    """
    if bot is None:
        logger.error("Bot instance is None, cannot send message")
        return None

    return await _with_retries(
        "send",
        chat_id,
        lambda: bot.send_message(
            chat_id=chat_id,
            text=text,
            reply_markup=reply_markup,
            **kwargs,
        ),
    )


async def safe_edit_message(
    bot: Bot | None,
    chat_id: int,
    message_id: int,
    text: str,
    reply_markup: InlineKeyboardMarkup | None = None,
) -> bool:
    """Edit a message's text in place.

    "Message is not modified" errors are treated as no-ops.

    Returns:
        True if Telegram accepted the edit
    """
    if bot is None:
        logger.error("Bot instance is None, cannot edit message")
        return False

    result = await _with_retries(
        "edit",
        chat_id,
        lambda: bot.edit_message_text(
            text=text,
            chat_id=chat_id,
            message_id=message_id,
            reply_markup=reply_markup,
        ),
    )
    return result is not None


async def safe_send_audio(bot: Bot | None, chat_id: int, audio: str) -> Message | None:
    """Send an audio clip given a file_id, URL or local path.

    Returns:
        The sent Message object, or None if sending failed
    """
    if bot is None:
        return None

    audio_input: str | FSInputFile = audio
    if os.path.isfile(audio):
        audio_input = FSInputFile(audio)

    return await _with_retries(
        "audio",
        chat_id,
        lambda: bot.send_audio(chat_id=chat_id, audio=audio_input, disable_notification=True),
    )


async def safe_answer_callback(
    callback_query,
    text: str | None = None,
    show_alert: bool = False,
) -> bool:
    """Safely answer a callback query.

    Returns:
        True if answered successfully, False otherwise
    """
    try:
        await callback_query.answer(text=text, show_alert=show_alert)
        return True
    except Exception as e:
        logger.warning(f"Failed to answer callback: {e}")
        return False
