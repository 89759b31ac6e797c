"""Pandemico: Slack-бот со статистикой пандемии по странам."""

__version__ = "0.1.0"
