"""Decision wheel panel: open, spin, close."""

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from thelist.bot.display import MessageSpinDisplay, make_audio_cue
from thelist.bot.handlers_start import ensure_registered
from thelist.bot.keyboards import kb_wheel, parse_callback
from thelist.bot.messages import not_registered, wheel_closed, wheel_intro
from thelist.bot.sender import safe_answer_callback, safe_edit_message, safe_send_message
from thelist.bot.session import WheelPanel, user_sessions, wheel_panels
from thelist.config import config
from thelist.core import SpinController, SpinError, WheelSettings
from thelist.logging import get_logger
from thelist.storage import EventsRepo, get_session_factory, make_snapshot_loader

router = Router(name="wheel")
logger = get_logger(__name__)


def build_panel(bot: Bot, chat_id: int, message_id: int, user_id: str) -> WheelPanel:
    """Wire a controller to a panel message.

    Args:
        bot: Bot instance
        chat_id: Chat holding the panel
        message_id: Panel message
        user_id: User whose lists the wheel spins

    Returns:
        New WheelPanel (not yet registered)
    """
    display = MessageSpinDisplay(
        bot,
        chat_id,
        message_id,
        min_interval_ms=config.wheel_edit_interval_ms,
    )
    controller = SpinController(
        display=display,
        loader=make_snapshot_loader(user_id),
        is_authenticated=lambda: user_sessions.is_registered(user_id),
        audio_cue=make_audio_cue(bot, chat_id, config.wheel_cue_audio),
        actor_filter=user_sessions.get_or_create(user_id).actor_filters,
        settings=WheelSettings.from_config(config),
    )
    return WheelPanel(chat_id=chat_id, message_id=message_id, owner_id=user_id, controller=controller)


async def open_wheel(bot: Bot, chat_id: int, user_id: str) -> None:
    """Send a fresh wheel panel, closing the chat's previous one."""
    if not await ensure_registered(user_id):
        await safe_send_message(bot, chat_id, not_registered())
        return

    sent = await safe_send_message(bot, chat_id, wheel_intro(), reply_markup=kb_wheel())
    if sent is None:
        return

    wheel_panels.open(build_panel(bot, chat_id, sent.message_id, user_id))
    logger.info(f"User {user_id} opened wheel panel {sent.message_id} in {chat_id}")


@router.message(Command("wheel"))
async def handle_wheel(message: Message) -> None:
    """Handle /wheel - open the decision wheel."""
    user = message.from_user
    if not user:
        return
    await open_wheel(message.bot, message.chat.id, str(user.id))


@router.callback_query(F.data == "n:wheel")
async def handle_wheel_button(callback: CallbackQuery) -> None:
    await safe_answer_callback(callback)
    if callback.message:
        await open_wheel(callback.bot, callback.message.chat.id, str(callback.from_user.id))


@router.callback_query(F.data == "w:close")
async def handle_wheel_close(callback: CallbackQuery) -> None:
    """Close the panel: cancel any spin and retire the message."""
    if not callback.message:
        return

    await safe_answer_callback(callback)
    chat_id = callback.message.chat.id
    panel = wheel_panels.get(chat_id)
    if panel is not None and panel.message_id == callback.message.message_id:
        wheel_panels.close(chat_id)

    await safe_edit_message(callback.bot, chat_id, callback.message.message_id, wheel_closed())


@router.callback_query(F.data.startswith("w:"))
async def handle_wheel_spin(callback: CallbackQuery) -> None:
    """Spin the wheel for the list named in the button."""
    if not callback.data or not callback.message:
        return

    _, target, _ = parse_callback(callback.data)
    chat_id = callback.message.chat.id
    message_id = callback.message.message_id
    user_id = str(callback.from_user.id)

    # Registration is confirmed against the store here; the controller's
    # own check then only reads the session.
    await ensure_registered(user_id)

    panel = wheel_panels.get(chat_id)
    if panel is None or panel.message_id != message_id or panel.owner_id != user_id:
        # Buttons of an older panel (or one lost on restart) adopt that message
        panel = build_panel(callback.bot, chat_id, message_id, user_id)
        wheel_panels.open(panel)

    display = panel.controller.display
    previous_target, display.target = display.target, target

    try:
        outcome = await panel.controller.spin(target)
    except SpinError as e:
        display.target = previous_target
        await safe_answer_callback(callback, e.user_message, show_alert=True)
        return

    await safe_answer_callback(callback)

    session_factory = get_session_factory()
    async with session_factory() as session:
        await EventsRepo(session).log_event(
            event_name="spin_requested",
            user_id=user_id,
            list_type=outcome.target,
            record_id=outcome.resolved.id if outcome.resolved else None,
            payload={
                "status": outcome.status,
                "pool_size": outcome.pool_size,
                "redirected": bool(
                    outcome.chosen and outcome.resolved and outcome.chosen.id != outcome.resolved.id
                ),
            },
        )
