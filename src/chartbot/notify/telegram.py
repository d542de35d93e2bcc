"""Telegram transport for chartbot.

This module wraps the handful of Telegram Bot API methods the chart
command needs: replying with text, replying with a photo, deleting a
message and long-polling for updates.  The rest of the application
talks to the :class:`ChatBot` protocol so tests can use an in-memory
fake instead of the network.

Chats can be restricted with ``TELEGRAM_CHAT_ID_ALLOWLIST``, a
comma-separated list of chat IDs; see :func:`is_allowed`.

HTTP failures and ``"ok": false`` API responses raise
:class:`TelegramError`.  Transient errors (HTTP 429 and 5xx) are
retried with exponential backoff by the underlying session.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

import requests
from pydantic import BaseModel
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.telegram.org"


class TelegramError(RuntimeError):
    """A Telegram Bot API call failed."""


class ChatMessage(BaseModel):
    """The parts of a chat message the bot replies to or deletes."""

    message_id: int
    chat_id: int
    unixtime: int = 0
    username: str = ""
    text: str = ""


class ChatPhoto(BaseModel):
    """A local image file to attach to a reply."""

    path: Path
    width: int = 0
    height: int = 0


class ChatBot(Protocol):
    """Chat capabilities used by the chart command handler."""

    def reply_text(self, message: ChatMessage, text: str) -> ChatMessage:
        raise NotImplementedError

    def reply_photo(self, message: ChatMessage, photo: ChatPhoto) -> ChatMessage:
        raise NotImplementedError

    def delete(self, message: ChatMessage) -> None:
        raise NotImplementedError


def is_allowed(chat_id: Any, allowlist: Sequence[str]) -> bool:
    """Return True if ``chat_id`` may be served.

    An empty allowlist admits every chat.
    """
    if not allowlist:
        return True
    return str(chat_id) in allowlist


def message_from_api(data: Dict[str, Any]) -> ChatMessage:
    """Convert a Telegram ``Message`` object into a :class:`ChatMessage`."""
    sender = data.get("from") or {}
    username = sender.get("username") or str(sender.get("id", ""))
    return ChatMessage(
        message_id=int(data["message_id"]),
        chat_id=int(data["chat"]["id"]),
        unixtime=int(data.get("date", 0)),
        username=username,
        text=data.get("text") or "",
    )


class TelegramBot:
    """:class:`ChatBot` implementation over the Telegram Bot API."""

    def __init__(
        self,
        token: str,
        base_url: str = API_BASE_URL,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
    ) -> None:
        """Initialize the bot client.

        Args:
            token: Telegram bot token.
            base_url: API root, overridable for local Bot API servers.
            timeout: Default request timeout in seconds.
            max_retries: Retry attempts for rate limits and server errors.
            backoff_factor: Backoff factor for exponential backoff.
        """
        if not token:
            raise ValueError("Telegram bot token is not set")
        self.base_url = f"{base_url.rstrip('/')}/bot{token}"
        self.timeout = timeout
        self.session = requests.Session()
        retries = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "POST"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retries)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def _call(
        self,
        method: str,
        data: Dict[str, Any],
        files: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        url = f"{self.base_url}/{method}"
        try:
            if files:
                response = self.session.post(url, data=data, files=files, timeout=timeout or self.timeout)
            else:
                response = self.session.post(url, json=data, timeout=timeout or self.timeout)
        except requests.RequestException as exc:
            raise TelegramError(f"Telegram {method} request failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise TelegramError(
                f"Telegram {method} returned non-JSON response: {response.status_code}"
            ) from exc
        if not payload.get("ok"):
            raise TelegramError(
                f"Telegram {method} failed: {payload.get('error_code')} {payload.get('description')}"
            )
        return payload.get("result")

    def reply_text(self, message: ChatMessage, text: str) -> ChatMessage:
        result = self._call(
            "sendMessage",
            {"chat_id": message.chat_id, "text": text, "reply_to_message_id": message.message_id},
        )
        return message_from_api(result)

    def reply_photo(self, message: ChatMessage, photo: ChatPhoto) -> ChatMessage:
        data = {"chat_id": message.chat_id, "reply_to_message_id": message.message_id}
        try:
            with open(photo.path, "rb") as fh:
                result = self._call("sendPhoto", data, files={"photo": (photo.path.name, fh, "image/png")})
        except OSError as exc:
            raise TelegramError(f"Cannot read photo {photo.path}: {exc}") from exc
        return message_from_api(result)

    def delete(self, message: ChatMessage) -> None:
        self._call("deleteMessage", {"chat_id": message.chat_id, "message_id": message.message_id})

    def get_updates(self, offset: Optional[int] = None, poll_timeout: int = 30) -> List[Dict[str, Any]]:
        """Long-poll for new updates starting at ``offset``."""
        data: Dict[str, Any] = {"timeout": poll_timeout, "allowed_updates": ["message"]}
        if offset is not None:
            data["offset"] = offset
        # The HTTP timeout must outlast the server-side long poll.
        return self._call("getUpdates", data, timeout=poll_timeout + self.timeout) or []


__all__ = [
    "TelegramError",
    "ChatMessage",
    "ChatPhoto",
    "ChatBot",
    "TelegramBot",
    "is_allowed",
    "message_from_api",
]
