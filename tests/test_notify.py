"""Tests for the Telegram transport.

No network requests are performed; the client's ``requests`` session
``post`` method is monkeypatched to record calls and return canned
Bot API responses.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pytest
import requests

from chartbot.notify.telegram import (
    ChatMessage,
    ChatPhoto,
    TelegramBot,
    TelegramError,
    is_allowed,
    message_from_api,
)


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _api_message(message_id: int = 7, text: str = "ok") -> Dict[str, Any]:
    return {
        "message_id": message_id,
        "date": 1700000000,
        "chat": {"id": -100123},
        "from": {"id": 55, "username": "chartbot"},
        "text": text,
    }


def _bot_with_responses(monkeypatch: pytest.MonkeyPatch, responses: List[Any]) -> tuple:
    """Create a bot whose session returns ``responses`` in order."""
    bot = TelegramBot("dummy-token", max_retries=0)
    calls: List[Dict[str, Any]] = []

    def fake_post(url: str, **kwargs: Any) -> Any:
        calls.append({"url": url, **kwargs})
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(bot.session, "post", fake_post)
    return bot, calls


def _message() -> ChatMessage:
    return ChatMessage(message_id=42, chat_id=-100123, unixtime=1700000000, username="alice")


def test_token_required() -> None:
    with pytest.raises(ValueError):
        TelegramBot("")


def test_reply_text_posts_reply(monkeypatch: pytest.MonkeyPatch) -> None:
    bot, calls = _bot_with_responses(monkeypatch, [FakeResponse({"ok": True, "result": _api_message(7)})])
    sent = bot.reply_text(_message(), "hello")
    assert sent.message_id == 7
    assert calls[0]["url"] == "https://api.telegram.org/botdummy-token/sendMessage"
    assert calls[0]["json"] == {"chat_id": -100123, "text": "hello", "reply_to_message_id": 42}


def test_reply_photo_uploads_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    image = tmp_path / "chart.png"
    image.write_bytes(b"\x89PNG\r\n\x1a\n")
    bot, calls = _bot_with_responses(monkeypatch, [FakeResponse({"ok": True, "result": _api_message(8)})])
    sent = bot.reply_photo(_message(), ChatPhoto(path=image, width=1015, height=400))
    assert sent.message_id == 8
    assert calls[0]["url"].endswith("/sendPhoto")
    assert calls[0]["data"] == {"chat_id": -100123, "reply_to_message_id": 42}
    name, _fh, mime = calls[0]["files"]["photo"]
    assert name == "chart.png" and mime == "image/png"


def test_reply_photo_missing_file_raises(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    bot, calls = _bot_with_responses(monkeypatch, [])
    with pytest.raises(TelegramError):
        bot.reply_photo(_message(), ChatPhoto(path=tmp_path / "missing.png"))
    assert calls == []


def test_delete_message(monkeypatch: pytest.MonkeyPatch) -> None:
    bot, calls = _bot_with_responses(monkeypatch, [FakeResponse({"ok": True, "result": True})])
    bot.delete(_message())
    assert calls[0]["url"].endswith("/deleteMessage")
    assert calls[0]["json"] == {"chat_id": -100123, "message_id": 42}


def test_api_error_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    """An ``ok: false`` response surfaces the Bot API description."""
    bot, _calls = _bot_with_responses(
        monkeypatch,
        [FakeResponse({"ok": False, "error_code": 400, "description": "Bad Request: message to delete not found"}, 400)],
    )
    with pytest.raises(TelegramError) as excinfo:
        bot.delete(_message())
    assert "message to delete not found" in str(excinfo.value)


def test_network_error_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    bot, _calls = _bot_with_responses(monkeypatch, [requests.ConnectionError("unreachable")])
    with pytest.raises(TelegramError):
        bot.reply_text(_message(), "hello")


def test_non_json_response_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    bot, _calls = _bot_with_responses(monkeypatch, [FakeResponse(ValueError("no json"), 502)])
    with pytest.raises(TelegramError):
        bot.reply_text(_message(), "hello")


def test_get_updates_passes_offset(monkeypatch: pytest.MonkeyPatch) -> None:
    update = {"update_id": 10, "message": _api_message(3, "/chart AAPL")}
    bot, calls = _bot_with_responses(monkeypatch, [FakeResponse({"ok": True, "result": [update]})])
    assert bot.get_updates(offset=10, poll_timeout=5) == [update]
    assert calls[0]["json"]["offset"] == 10
    assert calls[0]["json"]["timeout"] == 5
    assert calls[0]["timeout"] > 5


def test_message_from_api_falls_back_to_user_id() -> None:
    data = _api_message()
    data["from"] = {"id": 99}
    message = message_from_api(data)
    assert message.username == "99"
    assert message.chat_id == -100123
    assert message.unixtime == 1700000000


def test_allowlist() -> None:
    assert is_allowed(-100123, [])
    assert is_allowed(-100123, ["-100123", "5"])
    assert not is_allowed(7, ["-100123"])
