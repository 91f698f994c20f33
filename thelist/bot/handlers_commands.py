"""Handlers for bot commands (/help, /add, /actor, /search)."""

from html import escape

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message

from thelist.bot.handlers_start import ensure_registered
from thelist.bot.messages import (
    HELP_MESSAGE,
    actor_filter_set,
    list_label,
    not_registered,
    record_added,
    search_result_line,
    search_results,
)
from thelist.bot.sender import safe_answer_callback, safe_send_message
from thelist.bot.session import user_sessions
from thelist.core import PRIMARY_LIST_TYPES, Status, search_library, supports_actor_filter
from thelist.logging import get_logger
from thelist.storage import (
    EventsRepo,
    RecordsRepo,
    get_session_factory,
    get_snapshot_cache,
    make_snapshot_loader,
)

router = Router(name="commands")
logger = get_logger(__name__)

ADD_USAGE = "Usage: /add &lt;list&gt; &lt;title&gt; [| status | series | order | notes]"
ACTOR_USAGE = "Usage: /actor &lt;movies|tv&gt; [name]. Leave the name out to clear it."
SEARCH_LIMIT = 20

LIST_ALIASES = {
    "movie": "movies",
    "movies": "movies",
    "film": "movies",
    "films": "movies",
    "tv": "tvShows",
    "tvshow": "tvShows",
    "tvshows": "tvShows",
    "show": "tvShows",
    "shows": "tvShows",
    "series": "tvShows",
    "anime": "anime",
    "book": "books",
    "books": "books",
}


def parse_list_arg(token: str | None) -> str | None:
    """Map a user-typed list name to its list type, or None if unknown."""
    if not token:
        return None
    return LIST_ALIASES.get(token.strip().lower())


def parse_status(value: str | None) -> str:
    """Match a user-typed status against the known statuses.

    Raises:
        ValueError: If the status matches none of them
    """
    text = (value or "").strip().lower()
    if not text:
        return Status.PLANNED.value
    for status in Status:
        if status.value.lower().startswith(text) or text in status.value.lower().split("/"):
            return status.value
    choices = ", ".join(s.value for s in Status)
    raise ValueError(f"Unknown status. Choose one of: {choices}")


def parse_add_args(args: str | None) -> tuple[str, dict]:
    """Parse "/add <list> <title> [| status | series | order | notes]".

    Args:
        args: Text after the command

    Returns:
        Tuple of (list type, new record)

    Raises:
        ValueError: With a user-facing message when the input is unusable
    """
    head, *fields = (args or "").split("|")
    parts = head.strip().split(maxsplit=1)
    if len(parts) < 2:
        raise ValueError(ADD_USAGE)

    list_type = parse_list_arg(parts[0])
    if list_type is None:
        raise ValueError(f"Unknown list '{escape(parts[0])}'. Use movies, tv, anime or books.")

    title = parts[1].strip()
    if not title:
        raise ValueError("Title is required.")

    fields = [f.strip() for f in fields] + ["", "", "", ""]
    status, series_name, series_order, notes = fields[:4]

    record = {"title": title, "status": parse_status(status)}
    if series_name:
        record["seriesName"] = series_name
    if series_order:
        record["seriesOrder"] = series_order
    if notes:
        record["notes"] = notes
    return list_type, record


@router.message(Command("help"))
async def handle_help(message: Message) -> None:
    """Handle the /help command."""
    await safe_send_message(
        bot=message.bot,
        chat_id=message.chat.id,
        text=HELP_MESSAGE,
    )


@router.callback_query(F.data == "n:help")
async def handle_help_button(callback: CallbackQuery) -> None:
    await safe_answer_callback(callback)
    if callback.message:
        await safe_send_message(
            bot=callback.bot,
            chat_id=callback.message.chat.id,
            text=HELP_MESSAGE,
        )


@router.message(Command("add"))
async def handle_add(message: Message, command: CommandObject) -> None:
    """Handle /add - create a record in one of the lists."""
    user = message.from_user
    if not user:
        return

    user_id = str(user.id)
    if not await ensure_registered(user_id):
        await safe_send_message(message.bot, message.chat.id, not_registered())
        return

    try:
        list_type, record = parse_add_args(command.args)
    except ValueError as e:
        await safe_send_message(message.bot, message.chat.id, str(e))
        return

    session_factory = get_session_factory()
    async with session_factory() as session:
        record_id = await RecordsRepo(session).add_record(user_id, list_type, record)
        await EventsRepo(session).log_event(
            event_name="record_added",
            user_id=user_id,
            list_type=list_type,
            record_id=record_id,
        )

    get_snapshot_cache().invalidate(user_id, list_type)
    logger.info(f"User {user_id} added {record_id} to {list_type}")

    await safe_send_message(
        bot=message.bot,
        chat_id=message.chat.id,
        text=record_added(list_type, record["title"]),
    )


@router.message(Command("actor"))
async def handle_actor(message: Message, command: CommandObject) -> None:
    """Handle /actor - set or clear a list's actor filter."""
    user = message.from_user
    if not user:
        return

    user_id = str(user.id)
    if not await ensure_registered(user_id):
        await safe_send_message(message.bot, message.chat.id, not_registered())
        return

    parts = (command.args or "").strip().split(maxsplit=1)
    list_type = parse_list_arg(parts[0]) if parts else None
    if list_type is None or not supports_actor_filter(list_type):
        await safe_send_message(message.bot, message.chat.id, ACTOR_USAGE)
        return

    name = parts[1].strip() if len(parts) > 1 else ""
    filters = user_sessions.get_or_create(user_id).actor_filters
    filters.set(list_type, name)

    label = list_label(list_type)
    if filters.is_active(list_type):
        text = actor_filter_set(label, filters.value(list_type))
    else:
        text = f"Actor filter cleared for {label}."
    await safe_send_message(message.bot, message.chat.id, text)


@router.message(Command("search"))
async def handle_search(message: Message, command: CommandObject) -> None:
    """Handle /search - search every list."""
    user = message.from_user
    if not user:
        return

    user_id = str(user.id)
    if not await ensure_registered(user_id):
        await safe_send_message(message.bot, message.chat.id, not_registered())
        return

    query = (command.args or "").strip()
    if not query:
        await safe_send_message(message.bot, message.chat.id, "Usage: /search &lt;text&gt;")
        return

    load = make_snapshot_loader(user_id)
    snapshots = {list_type: await load(list_type) for list_type in PRIMARY_LIST_TYPES}
    matches = search_library(snapshots, query)

    lines = [
        search_result_line(i, list_type, record)
        for i, (list_type, _, record) in enumerate(matches[:SEARCH_LIMIT], 1)
    ]
    if len(matches) > SEARCH_LIMIT:
        lines.append(f"… and {len(matches) - SEARCH_LIMIT} more")

    await safe_send_message(message.bot, message.chat.id, search_results(query, lines))
