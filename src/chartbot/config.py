"""
Configuration constants for chartbot.

This module centralises configuration values that are used across the
application.  Fixed rendering defaults live here as ``Final``
constants; values that vary per deployment are read from environment
variables by :func:`load_settings`.

Environment variables:
    CAPTURE_WEBSITE_BIN: Explicit path to the ``capture-website`` binary.
    CHARTBOT_IMAGE_DIR: Directory for rendered images (default ``./img``).
    CHARTBOT_RENDER_TIMEOUT: Renderer timeout in seconds (default 60).
    CHARTBOT_LOCALE: Widget locale (default ``en``).
    CHARTBOT_DELETE_COMMANDS: Delete the triggering chat command after
        replying (``1``/``true``/``yes``; default off).
    TELEGRAM_BOT_TOKEN: Telegram bot token used by the ``poll`` command.
    TELEGRAM_CHAT_ID_ALLOWLIST: Optional comma-separated chat IDs the bot
        answers in.  When empty every chat is served.
"""

from __future__ import annotations

import os
from typing import Dict, Final, List, Optional

from pydantic import BaseModel, ConfigDict, Field

PROJECT_NAME: Final[str] = "chartbot"

# Default renderer locations by ``sys.platform``.  Platforms missing
# from this table must configure ``CAPTURE_WEBSITE_BIN`` explicitly.
RENDERER_PATHS: Final[Dict[str, str]] = {
    "linux": "/usr/bin/capture-website",
    "darwin": "/usr/local/bin/capture-website",
}

# Renderer input marker meaning "HTML is supplied on stdin".
INLINE_INPUT: Final[str] = "-"

IMAGE_FORMAT: Final[str] = "png"
IMAGE_DIR: Final[str] = "./img"

# Chat chart geometry and capture options.
CHART_WIDTH: Final[int] = 1015
CHART_HEIGHT: Final[int] = 400
CAPTURE_DELAY: Final[int] = 4

# Pixel size of the embedded widget itself; the capture is slightly wider.
WIDGET_WIDTH: Final[int] = 1000
WIDGET_HEIGHT: Final[int] = 400
WIDGET_LOCALE: Final[str] = "en"

DEFAULT_TIME_RANGE: Final[str] = "12M"

# Seconds.
ARTIFACT_TTL: Final[float] = 20.0
PROMPT_TTL: Final[float] = 6.0
SOURCE_DELETE_PAUSE: Final[float] = 1.0
RENDER_TIMEOUT: Final[float] = 60.0
POLL_RETRY_DELAY: Final[float] = 5.0

USAGE_PROMPT: Final[str] = "Please provide a ticker symbol, e.g. /chart AAPL"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes")


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


class BotSettings(BaseModel):
    """Deployment settings resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    telegram_token: Optional[str] = None
    chat_allowlist: List[str] = Field(default_factory=list)
    renderer_path: Optional[str] = None
    image_dir: str = IMAGE_DIR
    render_timeout: float = RENDER_TIMEOUT
    locale: str = WIDGET_LOCALE
    delete_commands: bool = False


def load_settings() -> BotSettings:
    """Build :class:`BotSettings` from the process environment."""
    allowlist_str = os.getenv("TELEGRAM_CHAT_ID_ALLOWLIST", "")
    return BotSettings(
        telegram_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        chat_allowlist=[cid.strip() for cid in allowlist_str.split(",") if cid.strip()],
        renderer_path=os.getenv("CAPTURE_WEBSITE_BIN") or None,
        image_dir=os.getenv("CHARTBOT_IMAGE_DIR") or IMAGE_DIR,
        render_timeout=_env_float("CHARTBOT_RENDER_TIMEOUT", RENDER_TIMEOUT),
        locale=os.getenv("CHARTBOT_LOCALE") or WIDGET_LOCALE,
        delete_commands=_env_flag("CHARTBOT_DELETE_COMMANDS"),
    )


__all__ = [
    "PROJECT_NAME",
    "RENDERER_PATHS",
    "INLINE_INPUT",
    "IMAGE_FORMAT",
    "IMAGE_DIR",
    "CHART_WIDTH",
    "CHART_HEIGHT",
    "CAPTURE_DELAY",
    "DEFAULT_TIME_RANGE",
    "ARTIFACT_TTL",
    "PROMPT_TTL",
    "SOURCE_DELETE_PAUSE",
    "RENDER_TIMEOUT",
    "POLL_RETRY_DELAY",
    "USAGE_PROMPT",
    "BotSettings",
    "load_settings",
]
