"""Обработчики входящих событий Slack."""

from .errors import guarded
from .events import extract_country, handle_app_mention
from .interactions import handle_interaction, make_responder

__all__ = [
    "extract_country",
    "guarded",
    "handle_app_mention",
    "handle_interaction",
    "make_responder",
]
