from .message import render_line, render_message
from .log import render_log
from .guilds import render_guilds

__all__ = [
    "render_line",
    "render_message",
    "render_log",
    "render_guilds",
]
