# -*- coding: utf-8 -*-
"""Unit tests for EventNotificationStyler."""

from __future__ import annotations

from copy_trade_engine.notifications.stylers import EventNotificationStyler
from copy_trade_engine.notifications.types import NotificationMessage


def _executed(wallet: str) -> NotificationMessage:
    return NotificationMessage(
        event_type="copy_trade_executed",
        message="OPEN filled: 20.0000 tokens for $10.00",
        payload={
            "tracked_wallet": wallet,
            "asset": "123",
            "intent": "OPEN",
            "state": "FILLED",
            "target": 10.0,
            "filled_tokens": 20.0,
            "filled_usd": 10.0,
            "title": "Rain & <Snow>?",
            "outcome": None,
        },
    )


def test_render_plain_text(wallet: str) -> None:
    text = EventNotificationStyler().render(_executed(wallet))

    assert text.startswith("🟢 Copy Trade Executed")
    assert "Market: Rain & <Snow>?" in text
    assert "Tokens: 20.0000" in text
    assert "USD: $10.00" in text
    assert "Trader: 0x2d27...7706" in text
    assert "Outcome" not in text
    assert "<b>" not in text


def test_render_html_escapes_values(wallet: str) -> None:
    text = EventNotificationStyler().render(_executed(wallet), parse_html=True)

    assert "<b>Copy Trade Executed</b>" in text
    assert "<b>Market:</b> Rain &amp; &lt;Snow&gt;?" in text


def test_render_failed_skips_empty_rows() -> None:
    text = EventNotificationStyler().render(
        NotificationMessage(
            event_type="copy_trade_failed",
            message="Copy size below minimum",
            payload={"reason": "below_minimum", "attempts": 0, "asset": "123"},
        )
    )

    assert "Reason: below_minimum" in text
    assert "Attempts" not in text
    assert "Trader" not in text


def test_render_resolved() -> None:
    text = EventNotificationStyler().render(
        NotificationMessage(
            event_type="position_resolved",
            message="Redeemed 10.00 tokens for $10.00",
            payload={"method": "REDEEMED", "tokens": 10, "proceeds_usd": 10, "tx_hash": "0xabc"},
        )
    )

    assert "🏁 Position Resolved" in text
    assert "Proceeds: $10.00" in text
    assert "Transaction: 0xabc" in text


def test_render_unknown_event_type_lists_payload() -> None:
    text = EventNotificationStyler().render(
        NotificationMessage(event_type="custom_event", message="", payload={"b": 2, "a": 1, "c": None})
    )

    assert text.splitlines()[0] == "ℹ️ Custom Event"
    assert text.index("a: 1") < text.index("b: 2")
    assert "c:" not in text


def test_explicit_title_wins() -> None:
    text = EventNotificationStyler().render(
        NotificationMessage(event_type="system_started", message="", title="Engine up")
    )

    assert text.startswith("▶️ Engine up")
