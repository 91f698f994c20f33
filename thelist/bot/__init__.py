"""Bot module containing handlers, keyboards, and messaging utilities."""

from thelist.bot.router import setup_routers
from thelist.bot.session import user_sessions, wheel_panels

__all__ = [
    "setup_routers",
    "user_sessions",
    "wheel_panels",
]
