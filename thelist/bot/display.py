"""Telegram-backed spinner display and acceleration cue."""

import asyncio
from typing import Callable

from aiogram import Bot
from aiogram.types import InlineKeyboardMarkup

from thelist.bot.keyboards import kb_wheel, kb_wheel_result, kb_wheel_spinning
from thelist.bot.messages import (
    result_card,
    spinner_frame,
    spinner_started,
    wheel_notice,
)
from thelist.bot.sender import safe_edit_message, safe_send_audio
from thelist.core.contracts import ALL_LISTS, Candidate
from thelist.logging import get_logger

logger = get_logger(__name__)

Frame = tuple[str, InlineKeyboardMarkup | None]

# Cue sends in flight, held until they finish
_cue_tasks: set[asyncio.Task] = set()


class MessageSpinDisplay:
    """Spinner and result panel rendered into one editable message.

    Telegram throttles edits, so frames are coalesced: at most one edit per
    min_interval_ms, always carrying the newest frame. The last frame
    pushed (result or notice) is always delivered.

    Args:
        bot: Bot instance
        chat_id: Chat holding the panel
        message_id: Panel message to edit
        min_interval_ms: Minimum gap between edits
    """

    def __init__(
        self,
        bot: Bot,
        chat_id: int,
        message_id: int,
        min_interval_ms: int = 800,
    ) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.message_id = message_id
        self.min_interval = min_interval_ms / 1000
        self.target = ALL_LISTS
        self._pending: Frame | None = None
        self._last: Frame | None = None
        self._frame = 0
        self._worker: asyncio.Task | None = None

    def show_spinning(self) -> None:
        self._frame = 0
        self._push(spinner_started(self.target), kb_wheel_spinning())

    def show_current(self, candidate: Candidate) -> None:
        self._frame += 1
        self._push(spinner_frame(candidate, self._frame), kb_wheel_spinning())

    def show_result(self, candidate: Candidate) -> None:
        self._push(result_card(candidate), kb_wheel_result(self.target))

    def show_message(self, text: str) -> None:
        self._push(wheel_notice(text), kb_wheel())

    def clear(self) -> None:
        self._pending = None
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
        self._worker = None

    @property
    def busy(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def _push(self, text: str, reply_markup: InlineKeyboardMarkup | None) -> None:
        self._pending = (text, reply_markup)
        if not self.busy:
            self._worker = asyncio.get_running_loop().create_task(self._flush())

    async def _flush(self) -> None:
        while self._pending is not None:
            frame, self._pending = self._pending, None
            if frame != self._last:
                text, reply_markup = frame
                await safe_edit_message(
                    self.bot, self.chat_id, self.message_id, text, reply_markup
                )
                self._last = frame
            await asyncio.sleep(self.min_interval)


def make_audio_cue(bot: Bot, chat_id: int, audio: str | None) -> Callable[[], object] | None:
    """Build the acceleration cue for a chat, or None when no audio is configured."""
    if not audio:
        return None

    def play() -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(_send_cue(bot, chat_id, audio))
        _cue_tasks.add(task)
        task.add_done_callback(_cue_tasks.discard)
        return task

    return play


async def _send_cue(bot: Bot, chat_id: int, audio: str) -> None:
    try:
        await safe_send_audio(bot, chat_id, audio)
    except Exception as e:
        logger.debug(f"Acceleration cue not delivered to {chat_id}: {e}")
