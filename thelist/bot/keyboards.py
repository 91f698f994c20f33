"""Inline keyboard builders with compact callback data."""

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from thelist.core.contracts import ALL_LISTS, LIST_LABELS, PRIMARY_LIST_TYPES

# Callback data prefixes:
# w: wheel (spin <list type>|all, close)
# l: list view (<list type>|<sort mode>)
# n: navigation (wheel/lists/help)

SORT_LABELS = {
    "title": "A-Z",
    "yearAsc": "Year ↑",
    "yearDesc": "Year ↓",
    "director": "Creator",
    "series": "Series",
}


def kb_start() -> InlineKeyboardMarkup:
    """Main menu keyboard."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="🎡 Spin the wheel", callback_data="n:wheel")],
            [
                InlineKeyboardButton(text="📚 My lists", callback_data="n:lists"),
                InlineKeyboardButton(text="❓ Help", callback_data="n:help"),
            ],
        ]
    )


def _list_buttons(prefix: str, suffix: str = "") -> list[list[InlineKeyboardButton]]:
    buttons = [
        InlineKeyboardButton(
            text=LIST_LABELS[list_type],
            callback_data=f"{prefix}:{list_type}{suffix}",
        )
        for list_type in PRIMARY_LIST_TYPES
    ]
    return [buttons[:2], buttons[2:]]


def kb_wheel() -> InlineKeyboardMarkup:
    """Wheel panel: pick a source list, spin all, or close."""
    rows = _list_buttons("w")
    rows.append([
        InlineKeyboardButton(text="🎲 All lists", callback_data=f"w:{ALL_LISTS}"),
        InlineKeyboardButton(text="✖ Close", callback_data="w:close"),
    ])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_wheel_spinning() -> InlineKeyboardMarkup:
    """Keyboard while a spin is animating."""
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="✖ Close", callback_data="w:close")]]
    )


def kb_wheel_result(target: str) -> InlineKeyboardMarkup:
    """Keyboard under a settled result."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="🔁 Spin again", callback_data=f"w:{target}"),
                InlineKeyboardButton(text="🎡 Other list", callback_data="n:wheel"),
            ],
            [InlineKeyboardButton(text="✖ Close", callback_data="w:close")],
        ]
    )


def kb_lists() -> InlineKeyboardMarkup:
    """Pick a list to view."""
    return InlineKeyboardMarkup(inline_keyboard=_list_buttons("l", "|title"))


def kb_list_sort(list_type: str, current: str) -> InlineKeyboardMarkup:
    """Sort mode switcher under a list view."""
    row = [
        InlineKeyboardButton(
            text=f"• {label}" if mode == current else label,
            callback_data=f"l:{list_type}|{mode}",
        )
        for mode, label in SORT_LABELS.items()
    ]
    return InlineKeyboardMarkup(
        inline_keyboard=[
            row[:3],
            row[3:],
            [InlineKeyboardButton(text="🎡 Spin this list", callback_data=f"w:{list_type}")],
        ]
    )


# Parsing utilities

def parse_callback(data: str) -> tuple[str, str, list[str]]:
    """Parse callback data into prefix, value, and extra params.

    Examples:
        "w:movies" -> ("w", "movies", [])
        "l:anime|series" -> ("l", "anime", ["series"])
    """
    if ":" not in data:
        return ("", data, [])

    prefix, rest = data.split(":", 1)
    parts = rest.split("|")
    value = parts[0]
    extra = parts[1:] if len(parts) > 1 else []

    return (prefix, value, extra)
