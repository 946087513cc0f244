# -*- coding: utf-8 -*-
"""Event-based notification styler with emoji headings (Telegram HTML or plain text)."""

from __future__ import annotations

import html
from typing import Any, Callable

from copy_trade_engine.notifications.types import (
    COPY_TRADE_EXECUTED,
    COPY_TRADE_FAILED,
    POSITION_RESOLVED,
    SYSTEM_STARTED,
    SYSTEM_STOPPED,
    NotificationMessage,
    NotificationStyler,
)
from copy_trade_engine.utils.validation import mask_address

_TITLES: dict[str, tuple[str, str]] = {
    COPY_TRADE_EXECUTED: ("🟢", "Copy Trade Executed"),
    COPY_TRADE_FAILED: ("⚠️", "Copy Trade Not Executed"),
    POSITION_RESOLVED: ("🏁", "Position Resolved"),
    SYSTEM_STARTED: ("▶️", "System Started"),
    SYSTEM_STOPPED: ("⏹️", "System Stopped"),
}

Row = tuple[str, Any]


class EventNotificationStyler(NotificationStyler):
    """Render notifications by event_type as titled sections of label/value rows."""

    def render(self, message: NotificationMessage, *, parse_html: bool = False) -> str:
        renderers: dict[str, Callable[[dict[str, Any]], list[tuple[str, list[Row]]]]] = {
            COPY_TRADE_EXECUTED: self._executed_sections,
            COPY_TRADE_FAILED: self._failed_sections,
            POSITION_RESOLVED: self._resolved_sections,
            SYSTEM_STARTED: self._system_sections,
            SYSTEM_STOPPED: self._system_sections,
        }
        payload = dict(message.payload or {})
        build = renderers.get(message.event_type)
        if build is None:
            sections = [("", [(key, payload[key]) for key in sorted(payload) if payload[key] is not None])]
        else:
            sections = build(payload)

        emoji, title = self.title(message.event_type)
        lines = [f"{emoji} {self._bold(message.title or title, parse_html)}"]
        if message.message:
            lines.append(self._text(message.message, parse_html))
        for heading, rows in sections:
            block = self._section(heading, rows, parse_html)
            if block:
                lines.append("")
                lines.append(block)
        return "\n".join(lines).strip()

    @staticmethod
    def title(event_type: str) -> tuple[str, str]:
        """Emoji and human title for an event type."""
        return _TITLES.get(event_type, ("ℹ️", event_type.replace("_", " ").title()))

    def _executed_sections(self, p: dict[str, Any]) -> list[tuple[str, list[Row]]]:
        return [
            ("📊 Trade", [
                ("Market", p.get("title")),
                ("Outcome", p.get("outcome")),
                ("Intent", p.get("intent")),
                ("State", p.get("state")),
                ("Trader", self._wallet(p.get("tracked_wallet"))),
            ]),
            ("💰 Fill", [
                ("Target", self._number(p.get("target"))),
                ("Tokens", self._number(p.get("filled_tokens"))),
                ("USD", self._usd(p.get("filled_usd"))),
                ("Asset", p.get("asset")),
            ]),
        ]

    def _failed_sections(self, p: dict[str, Any]) -> list[tuple[str, list[Row]]]:
        return [
            ("📊 Trade", [
                ("Market", p.get("title")),
                ("Intent", p.get("intent")),
                ("Trader", self._wallet(p.get("tracked_wallet"))),
                ("Asset", p.get("asset")),
            ]),
            ("❌ Reason", [
                ("Reason", p.get("reason")),
                ("Detail", p.get("error_message")),
                ("Attempts", p.get("attempts") or None),
            ]),
        ]

    def _resolved_sections(self, p: dict[str, Any]) -> list[tuple[str, list[Row]]]:
        return [
            ("🏁 Market", [
                ("Market", p.get("title")),
                ("Status", p.get("status")),
                ("Condition ID", p.get("condition_id")),
            ]),
            ("💵 Result", [
                ("Method", p.get("method")),
                ("Tokens", self._number(p.get("tokens"))),
                ("Proceeds", self._usd(p.get("proceeds_usd"))),
                ("Transaction", p.get("tx_hash")),
                ("Reason", p.get("reason")),
            ]),
        ]

    def _system_sections(self, p: dict[str, Any]) -> list[tuple[str, list[Row]]]:
        wallets = p.get("target_wallets") or []
        return [
            ("👛 Wallets", [("", ", ".join(mask_address(str(w)) for w in wallets))]),
            ("⚙️ Strategy", [
                ("Strategy", p.get("strategy")),
                ("Sizing", p.get("sizing_mode")),
            ]),
        ]

    def _section(self, heading: str, rows: list[Row], parse_html: bool) -> str:
        content: list[str] = []
        for label, value in rows:
            if value is None or value == "":
                continue
            text = self._text(str(value), parse_html)
            content.append(f"{self._bold(label + ':', parse_html)} {text}" if label else text)
        if not content:
            return ""
        if heading:
            content.insert(0, f"{self._bold(heading, parse_html)}\n{'─' * 12}")
        return "\n".join(content)

    @staticmethod
    def _text(value: str, parse_html: bool) -> str:
        return html.escape(value, quote=False) if parse_html else value

    @classmethod
    def _bold(cls, value: str, parse_html: bool) -> str:
        return f"<b>{cls._text(value, True)}</b>" if parse_html else value

    @staticmethod
    def _number(value: Any) -> str | None:
        if value is None:
            return None
        try:
            return f"{float(value):,.4f}"
        except (TypeError, ValueError):
            return str(value)

    @staticmethod
    def _usd(value: Any) -> str | None:
        if value is None:
            return None
        try:
            return f"${float(value):,.2f}"
        except (TypeError, ValueError):
            return str(value)

    @staticmethod
    def _wallet(value: Any) -> str | None:
        return mask_address(str(value)) if value else None
