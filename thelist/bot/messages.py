"""Message templates and text constants."""

from html import escape

from thelist.core.contracts import ALL_LISTS, LIST_LABELS, Candidate, Record

SPINNER_GLYPHS = "◐◓◑◒"

HELP_MESSAGE = (
    "<b>THE LIST</b> keeps your movies, TV shows, anime and books.\n\n"
    "/add &lt;list&gt; &lt;title&gt; [| status | series | order | notes]\n"
    "   e.g. <code>/add movies Dune: Part Two | Planned | Dune | 2</code>\n"
    "/list &lt;list&gt; [title|yearAsc|yearDesc|director|series]\n"
    "/done N, /drop N, /delete N: act on item N of the last list shown\n"
    "/edit N [title] [| status | notes]: change item N, blank parts stay as they are, notes \"-\" clears them\n"
    "/actor &lt;list&gt; [name]: only show/spin titles with this actor\n"
    "/search &lt;text&gt;: search every list\n"
    "/wheel: let the wheel pick what to watch or read next\n\n"
    "Lists: movies, tv, anime, books. The wheel skips completed and dropped "
    "titles, and never suggests a sequel before the earlier part."
)


def start_message(name: str | None = None) -> str:
    """Welcome message."""
    greeting = f"Hi, {escape(name)}!" if name else "Hi!"
    return (
        f"<b>{greeting} Welcome to THE LIST.</b>\n\n"
        "Track what you want to watch and read, then let the wheel decide.\n\n"
        "Start with /add or tap below."
    )


def not_registered() -> str:
    return "Please send /start first so I can set up your lists."


def list_label(target: str) -> str:
    if target == ALL_LISTS:
        return "All lists"
    return LIST_LABELS.get(target, target)


def wheel_intro() -> str:
    """Wheel panel prompt."""
    return "<b>🎡 Decision wheel</b>\n\nWhich list should I pick from?"


def wheel_closed() -> str:
    return "🎡 Wheel closed."


def spinner_started(target: str) -> str:
    return f"<b>🎡 Spinning: {escape(list_label(target))}</b>\n\n<i>Loading…</i>"


def spinner_frame(candidate: Candidate, frame: int = 0) -> str:
    """One animation frame of the spinner."""
    glyph = SPINNER_GLYPHS[frame % len(SPINNER_GLYPHS)]
    source = f"  <i>({escape(list_label(candidate.list_type))})</i>" if candidate.cross_list else ""
    return f"<b>{glyph} Spinning…</b>\n\n{escape(candidate.title)}{source}"


def wheel_notice(text: str) -> str:
    """Empty-state or error text inside the wheel panel."""
    return f"<b>🎡 Decision wheel</b>\n\n{escape(text)}"


def result_card(candidate: Candidate) -> str:
    """Final pick card."""
    record = candidate.record
    verb = "read" if candidate.list_type == "books" else "watch"
    lines = [f"<b>🎉 You should {verb}:</b>", "", f"<b>{escape(candidate.title)}</b>"]

    details = []
    if record.get("year"):
        details.append(str(record["year"]))
    creator = record.get("director") or record.get("author")
    if creator:
        details.append(str(creator))
    if details:
        lines.append(escape(" · ".join(details)))

    if record.get("seriesName"):
        series = str(record["seriesName"])
        if record.get("seriesOrder") not in (None, ""):
            series += f" #{record['seriesOrder']}"
        lines.append(f"📚 {escape(series)}")

    lines.append(f"<i>{escape(list_label(candidate.list_type))}</i>")

    notes = record.get("notes")
    if notes:
        lines.extend(["", escape(str(notes))])

    return "\n".join(lines)


def list_item_line(index: int, record: Record) -> str:
    title = escape(str(record.get("title") or "(no title)"))
    status = record.get("status")
    suffix = f" <i>({escape(str(status))})</i>" if status else ""
    return f"{index}. {title}{suffix}"


def list_view(list_type: str, lines: list[str], actor: str = "") -> str:
    header = f"<b>{escape(list_label(list_type))}</b>"
    if actor:
        header += f"  <i>actor: {escape(actor)}</i>"
    return "\n".join([header, ""] + lines)


def list_empty(list_type: str, actor: str = "") -> str:
    if actor:
        return f"<b>{escape(list_label(list_type))}</b>\n\nNo items match this actor filter yet."
    return f"<b>{escape(list_label(list_type))}</b>\n\nNo items yet. Add something!"


def record_added(list_type: str, title: str) -> str:
    return f"Added <b>{escape(title)}</b> to {escape(list_label(list_type))}."


def record_updated(title: str, status: str) -> str:
    return f"<b>{escape(title)}</b> marked as {escape(status)}."


def record_edited(title: str) -> str:
    return f"Updated <b>{escape(title)}</b>."


def record_deleted(title: str) -> str:
    return f"Deleted <b>{escape(title)}</b>."


def search_results(query: str, lines: list[str]) -> str:
    if not lines:
        return f"No entries match <i>{escape(query)}</i> yet."
    return "\n".join([f"<b>Results for</b> <i>{escape(query)}</i>", ""] + lines)


def search_result_line(index: int, list_type: str, record: Record) -> str:
    title = escape(str(record.get("title") or "(no title)"))
    return f"{index}. {title} <i>({escape(list_label(list_type))})</i>"


def actor_filter_set(label: str, actor: str) -> str:
    return f"{escape(label)} now only show titles with <b>{escape(actor)}</b>."
