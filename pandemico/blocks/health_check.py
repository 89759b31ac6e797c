"""Разметка health check: приглашение в личку и модальное окно."""

from __future__ import annotations

from .country import Block, action_id


def build_health_check_blocks(user: str, prefix: str = "pandemico") -> list[Block]:
    return [
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": "Please perform your regular health check."},
        },
        {
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "Start Health Check"},
                    "action_id": action_id(prefix, "health_check"),
                    "value": user,
                }
            ],
        },
    ]


def _option(text: str, value: str) -> Block:
    return {"text": {"type": "plain_text", "text": text}, "value": value}


def build_health_check_modal() -> Block:
    return {
        "type": "modal",
        "title": {"type": "plain_text", "text": "Health Check"},
        "submit": {"type": "plain_text", "text": "Submit"},
        "close": {"type": "plain_text", "text": "Cancel"},
        "blocks": [
            {
                "type": "input",
                "element": {"type": "plain_text_input"},
                "label": {"type": "plain_text", "text": "Current health status"},
            },
            {
                "type": "input",
                "label": {"type": "plain_text", "text": "Please check applicable statements"},
                "element": {
                    "type": "checkboxes",
                    "options": [
                        _option("I had COVID19 and recovered.", "recovered"),
                        _option("I received a COVID19 vaccine.", "vaccinated"),
                    ],
                },
                "optional": True,
            },
        ],
    }


__all__ = ["build_health_check_blocks", "build_health_check_modal"]
