"""Chat transport for chartbot.

This package contains the Telegram client the bot uses to reply to
chart commands and to clean up after itself.
"""

from .telegram import ChatBot, ChatMessage, ChatPhoto, TelegramBot, TelegramError  # noqa: F401

__all__ = ["ChatBot", "ChatMessage", "ChatPhoto", "TelegramBot", "TelegramError"]
