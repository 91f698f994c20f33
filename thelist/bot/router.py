"""Router configuration and wiring for all bot handlers."""

from aiogram import Dispatcher, Router

from thelist.bot.handlers_commands import router as commands_router
from thelist.bot.handlers_lists import router as lists_router
from thelist.bot.handlers_start import router as start_router
from thelist.bot.handlers_wheel import router as wheel_router

main_router = Router(name="main")


def setup_routers(dp: Dispatcher) -> None:
    """Wire all routers to the dispatcher.

    Order matters - more specific handlers should be included first.
    Start handler registers users, so it goes first.
    Commands handler includes /help, /add, /actor, /search.
    Lists handler includes /list and the item commands.
    Wheel handler owns the wheel panel callbacks.

    Args:
        dp: The aiogram Dispatcher instance
    """
    main_router.include_router(start_router)
    main_router.include_router(commands_router)
    main_router.include_router(lists_router)
    main_router.include_router(wheel_router)

    dp.include_router(main_router)
