"""Block Kit разметка сообщений Pandemico."""

from .country import (
    action_id,
    build_country_blocks,
    build_unavailable_blocks,
    build_usage_text,
    format_stats,
)
from .health_check import build_health_check_blocks, build_health_check_modal

__all__ = [
    "action_id",
    "build_country_blocks",
    "build_health_check_blocks",
    "build_health_check_modal",
    "build_unavailable_blocks",
    "build_usage_text",
    "format_stats",
]
