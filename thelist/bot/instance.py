"""Shared Bot instance. Import from here to avoid circular imports."""

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from thelist.config import config

# Titles and notes are user-supplied; every template escapes them for HTML.
bot = Bot(
    token=config.bot_token,
    default=DefaultBotProperties(parse_mode=ParseMode.HTML, link_preview_is_disabled=True),
)
