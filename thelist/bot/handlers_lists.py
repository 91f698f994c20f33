"""List views and item commands (/list, /done, /drop, /edit, /delete)."""

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from thelist.bot.handlers_commands import parse_list_arg, parse_status
from thelist.bot.handlers_start import ensure_registered
from thelist.bot.keyboards import kb_list_sort, kb_lists, parse_callback
from thelist.bot.messages import (
    list_empty,
    list_item_line,
    list_view,
    not_registered,
    record_deleted,
    record_edited,
    record_updated,
)
from thelist.bot.sender import safe_answer_callback, safe_edit_message, safe_send_message
from thelist.bot.session import user_sessions
from thelist.core import SORT_MODES, Status, apply_actor_filter, sort_list_entries
from thelist.logging import get_logger
from thelist.storage import (
    EventsRepo,
    RecordsRepo,
    get_session_factory,
    get_snapshot_cache,
    make_snapshot_loader,
)

router = Router(name="lists")
logger = get_logger(__name__)

LIST_USAGE = "Usage: /list &lt;movies|tv|anime|books&gt; [title|yearAsc|yearDesc|director|series]"
ITEM_USAGE = "Usage: /{command} N, where N is the item number from the last /list."
EDIT_USAGE = (
    "Usage: /edit N [title] [| status | notes], where N is the item number from the last /list. "
    "Blank parts stay as they are; notes \"-\" clears them."
)
MAX_LIST_LINES = 50

# Item command -> record changes (None removes the key)
ITEM_ACTIONS = {
    "done": {"status": Status.COMPLETED.value, "watched": True},
    "drop": {"status": Status.DROPPED.value, "watched": None},
}


async def render_list(user_id: str, list_type: str, mode: str) -> tuple[str, InlineKeyboardMarkup]:
    """Build a list view and remember its numbering for item commands.

    Args:
        user_id: Owner of the list
        list_type: List to show
        mode: Sort mode

    Returns:
        Tuple of (message text, sort keyboard)
    """
    session = user_sessions.get_or_create(user_id)
    session.sort_modes[list_type] = mode

    snapshot = await make_snapshot_loader(user_id)(list_type)
    entries, actor = apply_actor_filter(list_type, list(snapshot.items()), session.actor_filters)
    entries = sort_list_entries(entries, mode)[:MAX_LIST_LINES]

    user_sessions.set_listing(user_id, list_type, [record_id for record_id, _ in entries])

    if not entries:
        text = list_empty(list_type, actor)
    else:
        lines = [list_item_line(i, record) for i, (_, record) in enumerate(entries, 1)]
        if len(snapshot) > MAX_LIST_LINES and len(entries) == MAX_LIST_LINES:
            lines.append(f"… showing the first {MAX_LIST_LINES}")
        text = list_view(list_type, lines, actor)

    return text, kb_list_sort(list_type, mode)


@router.message(Command("list"))
async def handle_list(message: Message, command: CommandObject) -> None:
    """Handle /list <list> [sort]."""
    user = message.from_user
    if not user:
        return

    user_id = str(user.id)
    if not await ensure_registered(user_id):
        await safe_send_message(message.bot, message.chat.id, not_registered())
        return

    parts = (command.args or "").split()
    list_type = parse_list_arg(parts[0]) if parts else None
    if list_type is None:
        await safe_send_message(message.bot, message.chat.id, LIST_USAGE, reply_markup=kb_lists())
        return

    session = user_sessions.get_or_create(user_id)
    mode = parts[1] if len(parts) > 1 else session.sort_modes.get(list_type, "title")
    if mode not in SORT_MODES:
        await safe_send_message(message.bot, message.chat.id, LIST_USAGE)
        return

    text, keyboard = await render_list(user_id, list_type, mode)
    await safe_send_message(message.bot, message.chat.id, text, reply_markup=keyboard)


@router.callback_query(F.data == "n:lists")
async def handle_lists_menu(callback: CallbackQuery) -> None:
    await safe_answer_callback(callback)
    if callback.message:
        await safe_send_message(
            bot=callback.bot,
            chat_id=callback.message.chat.id,
            text="Which list?",
            reply_markup=kb_lists(),
        )


@router.callback_query(F.data.startswith("l:"))
async def handle_list_callback(callback: CallbackQuery) -> None:
    """Show or re-sort a list in place."""
    if not callback.data or not callback.message:
        return

    user_id = str(callback.from_user.id)
    if not await ensure_registered(user_id):
        await safe_answer_callback(callback, not_registered(), show_alert=True)
        return

    _, list_type, extra = parse_callback(callback.data)
    mode = extra[0] if extra and extra[0] in SORT_MODES else "title"
    if parse_list_arg(list_type) != list_type:
        await safe_answer_callback(callback, "Unknown list")
        return

    await safe_answer_callback(callback)
    text, keyboard = await render_list(user_id, list_type, mode)

    edited = await safe_edit_message(
        callback.bot, callback.message.chat.id, callback.message.message_id, text, keyboard
    )
    if not edited:
        await safe_send_message(callback.bot, callback.message.chat.id, text, reply_markup=keyboard)


def parse_edit_args(args: str | None) -> tuple[int, dict]:
    """Parse "/edit N [title] [| status | notes]".

    Blank parts leave the field as it is and notes "-" removes them. A new
    status also drops an explicit watched flag, so the status alone decides
    whether the wheel offers the item again.

    Args:
        args: Text after the command

    Returns:
        Tuple of (item number, record changes with None meaning remove)

    Raises:
        ValueError: With a user-facing message when the input is unusable
    """
    head, *fields = (args or "").split("|")
    parts = head.strip().split(maxsplit=1)
    try:
        index = int(parts[0]) if parts else 0
    except ValueError:
        raise ValueError(EDIT_USAGE) from None

    title = parts[1].strip() if len(parts) > 1 else ""
    fields = [f.strip() for f in fields] + ["", ""]
    status, notes = fields[:2]

    changes: dict = {}
    if title:
        changes["title"] = title
    if status:
        changes["status"] = parse_status(status)
        changes["watched"] = None
    if notes == "-":
        changes["notes"] = None
    elif notes:
        changes["notes"] = notes

    if index < 1 or not changes:
        raise ValueError(EDIT_USAGE)
    return index, changes


async def _handle_item_command(message: Message, command: CommandObject, action: str) -> None:
    user = message.from_user
    if not user:
        return

    user_id = str(user.id)
    if not await ensure_registered(user_id):
        await safe_send_message(message.bot, message.chat.id, not_registered())
        return

    session = user_sessions.get_or_create(user_id)
    list_type = session.last_listing_type
    usage = EDIT_USAGE if action == "edit" else ITEM_USAGE.format(command=action)

    try:
        if action == "edit":
            index, changes = parse_edit_args(command.args)
        else:
            index, changes = int((command.args or "").strip()), ITEM_ACTIONS.get(action)
    except ValueError as e:
        await safe_send_message(message.bot, message.chat.id, str(e) if action == "edit" else usage)
        return

    if list_type is None or not 1 <= index <= len(session.last_listing_ids):
        await safe_send_message(message.bot, message.chat.id, usage)
        return

    record_id = session.last_listing_ids[index - 1]

    session_factory = get_session_factory()
    async with session_factory() as db:
        records_repo = RecordsRepo(db)
        record = await records_repo.get_record(user_id, list_type, record_id)
        if record is None:
            await safe_send_message(message.bot, message.chat.id, "That item no longer exists.")
            return

        title = str(record.get("title") or "(no title)")
        if action == "delete":
            await records_repo.delete_record(user_id, list_type, record_id)
            text = record_deleted(title)
            event_name = "record_deleted"
        else:
            updated = await records_repo.update_record(user_id, list_type, record_id, changes)
            if action == "edit":
                text = record_edited(str((updated or record).get("title") or title))
            else:
                text = record_updated(title, changes["status"])
            event_name = "record_updated"

        await EventsRepo(db).log_event(
            event_name=event_name,
            user_id=user_id,
            list_type=list_type,
            record_id=record_id,
            payload={"action": action},
        )

    get_snapshot_cache().invalidate(user_id, list_type)
    logger.info(f"User {user_id} ran {action} on {list_type}/{record_id}")

    await safe_send_message(message.bot, message.chat.id, text)


@router.message(Command("done"))
async def handle_done(message: Message, command: CommandObject) -> None:
    """Handle /done N - mark an item Completed."""
    await _handle_item_command(message, command, "done")


@router.message(Command("drop"))
async def handle_drop(message: Message, command: CommandObject) -> None:
    """Handle /drop N - mark an item Dropped."""
    await _handle_item_command(message, command, "drop")


@router.message(Command("edit"))
async def handle_edit(message: Message, command: CommandObject) -> None:
    """Handle /edit N - change an item's title, status or notes."""
    await _handle_item_command(message, command, "edit")


@router.message(Command("delete"))
async def handle_delete(message: Message, command: CommandObject) -> None:
    """Handle /delete N."""
    await _handle_item_command(message, command, "delete")
