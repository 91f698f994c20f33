"""Tests for bot UX components: parsing, keyboards, sessions and the wheel display."""

import asyncio
import time

import pytest

from thelist.bot import display as display_module
from thelist.bot.display import MessageSpinDisplay, make_audio_cue
from thelist.bot.handlers_commands import parse_add_args, parse_list_arg, parse_status
from thelist.bot.handlers_lists import parse_edit_args
from thelist.bot.keyboards import kb_list_sort, kb_wheel, kb_wheel_result, parse_callback
from thelist.bot.messages import result_card, spinner_frame, wheel_notice
from thelist.bot.session import SessionStore, WheelPanel, WheelPanels
from thelist.core import Candidate, SpinController


class FakeBot:
    """Records the Telegram calls the display makes."""

    def __init__(self) -> None:
        self.edits: list[dict] = []
        self.audio: list[dict] = []

    async def edit_message_text(self, **kwargs):
        self.edits.append(kwargs)
        return True

    async def send_audio(self, **kwargs):
        self.audio.append(kwargs)
        return object()


class StubController:
    def __init__(self, active: bool = False, display=None) -> None:
        self.closed = False
        self.session = object() if active else None
        self.display = display

    def close(self) -> None:
        self.closed = True


async def _drain(display: MessageSpinDisplay) -> None:
    for _ in range(200):
        if not display.busy:
            return
        await asyncio.sleep(0.01)


# Command parsing

def test_parse_list_arg_aliases():
    assert parse_list_arg("Movies") == "movies"
    assert parse_list_arg("tv") == "tvShows"
    assert parse_list_arg("tvShows") == "tvShows"
    assert parse_list_arg("book") == "books"
    assert parse_list_arg("podcasts") is None
    assert parse_list_arg(None) is None


def test_parse_add_args_full():
    list_type, record = parse_add_args("movies Dune: Part Two | planned | Dune | 2")

    assert list_type == "movies"
    assert record == {
        "title": "Dune: Part Two",
        "status": "Planned",
        "seriesName": "Dune",
        "seriesOrder": "2",
    }


def test_parse_add_args_minimal():
    list_type, record = parse_add_args("books The Left Hand of Darkness")

    assert list_type == "books"
    assert record == {"title": "The Left Hand of Darkness", "status": "Planned"}


def test_parse_add_args_notes():
    _, record = parse_add_args("anime Akira | watching | | | rewatch the 4K cut")

    assert record == {"title": "Akira", "status": "Watching/Reading", "notes": "rewatch the 4K cut"}


@pytest.mark.parametrize("args", [None, "", "movies", "podcasts Serial", "movies Dune | bogus"])
def test_parse_add_args_rejects(args):
    with pytest.raises(ValueError):
        parse_add_args(args)


def test_parse_edit_args_changes_only_given_fields():
    assert parse_edit_args("3 Dune: Part Two") == (3, {"title": "Dune: Part Two"})
    assert parse_edit_args("2 | planned") == (2, {"status": "Planned", "watched": None})
    assert parse_edit_args("1 | | loved it") == (1, {"notes": "loved it"})
    assert parse_edit_args("1 | | -") == (1, {"notes": None})


def test_parse_edit_args_undrops_with_title_and_notes():
    index, changes = parse_edit_args("4 Heat | reading | director's cut")

    assert index == 4
    assert changes == {
        "title": "Heat",
        "status": "Watching/Reading",
        "watched": None,
        "notes": "director's cut",
    }


@pytest.mark.parametrize("args", [None, "", "x Dune", "0 Dune", "2", "2 | |", "2 | bogus"])
def test_parse_edit_args_rejects(args):
    with pytest.raises(ValueError):
        parse_edit_args(args)


def test_parse_status():
    assert parse_status("") == "Planned"
    assert parse_status("reading") == "Watching/Reading"
    assert parse_status("Comp") == "Completed"
    assert parse_status("dropped") == "Dropped"


# Keyboards

def test_callback_parsing():
    assert parse_callback("w:movies") == ("w", "movies", [])
    assert parse_callback("l:anime|series") == ("l", "anime", ["series"])
    assert parse_callback("garbage") == ("", "garbage", [])


def test_wheel_keyboard_offers_every_list():
    data = [b.callback_data for row in kb_wheel().inline_keyboard for b in row]

    assert data == ["w:movies", "w:tvShows", "w:anime", "w:books", "w:all", "w:close"]


def test_result_keyboard_spins_same_target_again():
    data = [b.callback_data for row in kb_wheel_result("anime").inline_keyboard for b in row]

    assert data[0] == "w:anime"
    assert "w:close" in data


def test_sort_keyboard_marks_current_mode():
    buttons = [b for row in kb_list_sort("movies", "yearDesc").inline_keyboard for b in row]

    marked = [b for b in buttons if b.text.startswith("•")]
    assert [b.callback_data for b in marked] == ["l:movies|yearDesc"]
    assert buttons[-1].callback_data == "w:movies"


# Messages

def test_messages_escape_user_text():
    candidate = Candidate("1", "movies", {"title": "<b>Bad</b> & co", "notes": "<script>"})

    assert "&lt;b&gt;Bad&lt;/b&gt; &amp; co" in result_card(candidate)
    assert "<script>" not in result_card(candidate)
    assert "&lt;b&gt;" in spinner_frame(candidate)
    assert "&lt;" in wheel_notice("<oops>")


def test_result_card_details():
    card = result_card(
        Candidate(
            "1",
            "books",
            {"title": "Dune", "year": "1965", "author": "Frank Herbert", "seriesName": "Dune", "seriesOrder": 1},
        )
    )

    assert "You should read" in card
    assert "1965 · Frank Herbert" in card
    assert "Dune #1" in card


def test_spinner_frame_shows_source_list_in_all_mode():
    candidate = Candidate("1", "anime", {"title": "Akira"}, cross_list=True)

    assert "(Anime)" in spinner_frame(candidate)
    assert "(Anime)" not in spinner_frame(Candidate("1", "anime", {"title": "Akira"}))


# Sessions and panels

def test_session_store_registration_and_expiry():
    store = SessionStore(ttl_seconds=60)

    assert not store.is_registered("u1")
    store.mark_registered("u1")
    assert store.is_registered("u1")

    store.set_listing("u1", "movies", ["a", "b"])
    session = store.get("u1")
    assert session.last_listing_type == "movies"
    assert session.last_listing_ids == ["a", "b"]

    session.created_at = time.time() - 120
    assert store.prune_expired() == 1
    assert not store.is_registered("u1")
    assert len(store) == 0


def test_session_actor_filters_are_per_user():
    store = SessionStore()
    store.get_or_create("u1").actor_filters.set("movies", "Keanu")

    assert store.get_or_create("u1").actor_filters.is_active("movies")
    assert not store.get_or_create("u2").actor_filters.is_active("movies")


def test_opening_panel_closes_previous_one():
    panels = WheelPanels()
    first = WheelPanel(chat_id=1, message_id=10, owner_id="u1", controller=StubController())
    second = WheelPanel(chat_id=1, message_id=11, owner_id="u1", controller=StubController())
    other_chat = WheelPanel(chat_id=2, message_id=12, owner_id="u2", controller=StubController())

    panels.open(first)
    panels.open(other_chat)
    panels.open(second)

    assert first.controller.closed
    assert not other_chat.controller.closed
    assert panels.get(1) is second

    assert panels.close(1) is second
    assert second.controller.closed
    assert panels.get(1) is None


def test_prune_idle_panels_keeps_running_spins():
    panels = WheelPanels()
    panels.open(WheelPanel(1, 10, "u1", StubController(active=True)))
    panels.open(WheelPanel(2, 20, "u2", StubController(active=False)))

    assert panels.prune_idle() == 1
    assert panels.get(1) is not None
    assert panels.get(2) is None


# Wheel display

@pytest.mark.anyio
async def test_display_coalesces_to_latest_frame():
    bot = FakeBot()
    display = MessageSpinDisplay(bot, chat_id=1, message_id=10, min_interval_ms=0)
    display.target = "movies"
    pick = Candidate("1", "movies", {"title": "Alien"})

    display.show_spinning()
    display.show_current(Candidate("2", "movies", {"title": "Brazil"}))
    display.show_current(pick)
    display.show_result(pick)
    await _drain(display)

    assert len(bot.edits) == 1
    assert bot.edits[0]["text"] == result_card(pick)
    assert bot.edits[0]["message_id"] == 10
    callbacks = [b.callback_data for row in bot.edits[0]["reply_markup"].inline_keyboard for b in row]
    assert "w:movies" in callbacks


@pytest.mark.anyio
async def test_display_skips_identical_frames():
    bot = FakeBot()
    display = MessageSpinDisplay(bot, chat_id=1, message_id=10, min_interval_ms=0)

    display.show_message("Nothing here")
    await _drain(display)
    display.show_message("Nothing here")
    await _drain(display)

    assert len(bot.edits) == 1


@pytest.mark.anyio
async def test_display_clear_drops_pending_frames():
    bot = FakeBot()
    display = MessageSpinDisplay(bot, chat_id=1, message_id=10, min_interval_ms=0)

    display.show_spinning()
    display.clear()
    await asyncio.sleep(0)

    assert bot.edits == []
    assert not display.busy


@pytest.mark.anyio
async def test_audio_cue_sends_configured_clip():
    bot = FakeBot()

    assert make_audio_cue(bot, 1, None) is None

    cue = make_audio_cue(bot, 1, "AwACAgIAAxkBAAI")
    await cue()

    assert bot.audio == [{"chat_id": 1, "audio": "AwACAgIAAxkBAAI", "disable_notification": True}]


@pytest.mark.anyio
async def test_prune_keeps_panel_until_result_is_delivered(timers):
    bot = FakeBot()
    display = MessageSpinDisplay(bot, chat_id=1, message_id=10, min_interval_ms=50)
    display.target = "movies"

    async def load(list_type):
        return {"m": {"title": "Alien"}}

    controller = SpinController(
        display=display,
        loader=load,
        is_authenticated=lambda: True,
        timers=timers,
    )
    panels = WheelPanels()
    panels.open(WheelPanel(1, 10, "u1", controller))

    await controller.spin("movies")
    timers.run_all()
    assert controller.session is None

    assert panels.prune_idle() == 0
    await _drain(display)

    assert "Alien" in bot.edits[-1]["text"]
    assert "You should watch" in bot.edits[-1]["text"]
    assert panels.prune_idle() == 1


def test_prune_skips_panel_with_pending_frame():
    class BusyDisplay:
        busy = True

    panels = WheelPanels()
    panels.open(WheelPanel(1, 10, "u1", StubController(display=BusyDisplay())))

    assert panels.prune_idle() == 0
    assert panels.get(1) is not None


@pytest.mark.anyio
async def test_audio_cue_task_is_held_until_sent():
    bot = FakeBot()
    cue = make_audio_cue(bot, 1, "AwACAgIAAxkBAAI")

    task = cue()
    assert task in display_module._cue_tasks

    await task
    await asyncio.sleep(0)

    assert task not in display_module._cue_tasks
    assert len(bot.audio) == 1
