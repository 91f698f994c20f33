"""Handler for /start: user registration."""

from aiogram import Router
from aiogram.filters import CommandStart
from aiogram.types import Message

from thelist.bot.keyboards import kb_start
from thelist.bot.messages import start_message
from thelist.bot.sender import safe_send_message
from thelist.bot.session import user_sessions
from thelist.logging import get_logger
from thelist.storage import EventsRepo, UsersRepo, get_session_factory

router = Router(name="start")
logger = get_logger(__name__)


async def ensure_registered(user_id: str) -> bool:
    """Check that the user has run /start, consulting the store on a cold session.

    Args:
        user_id: Telegram user ID as string

    Returns:
        True if the user is registered
    """
    if user_sessions.is_registered(user_id):
        return True

    session_factory = get_session_factory()
    async with session_factory() as session:
        user = await UsersRepo(session).get_user(user_id)

    if user is None:
        return False
    user_sessions.mark_registered(user_id)
    return True


@router.message(CommandStart())
async def handle_start(message: Message) -> None:
    """Handle the /start command."""
    user = message.from_user
    if not user:
        return

    user_id = str(user.id)
    logger.info(f"User {user_id} started the bot")

    session_factory = get_session_factory()
    async with session_factory() as session:
        users_repo = UsersRepo(session)
        await users_repo.get_or_create_user(user_id, display_name=user.first_name)
        await users_repo.update_last_seen(user_id)

        await EventsRepo(session).log_event(
            event_name="bot_start",
            user_id=user_id,
            payload={
                "username": user.username,
                "first_name": user.first_name,
            },
        )

    user_sessions.mark_registered(user_id)

    await safe_send_message(
        bot=message.bot,
        chat_id=message.chat.id,
        text=start_message(user.first_name),
        reply_markup=kb_start(),
    )
