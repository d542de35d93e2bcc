"""Chart command handling for chartbot.

:class:`ChartCommandHandler` turns one chat command into a chart reply.
The flow mirrors what a user sees in the chat:

1. Without a ticker the bot replies with a usage prompt and removes the
   prompt and the command a few seconds later.
2. Otherwise a :class:`~chartbot.charts.models.RenderRequest` is built
   with the fixed chat defaults and rendered synchronously.
3. The image is sent as a photo reply, its file is scheduled for
   deletion and, when requested, the triggering command is deleted.

Delivery is best effort.  Render failures are logged and the photo
reply is still attempted; chat transport failures are logged and never
propagate out of :meth:`ChartCommandHandler.handle`.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from pydantic import BaseModel

from ..charts.models import RenderedArtifact, RenderRequest
from ..config import (
    CAPTURE_DELAY,
    CHART_HEIGHT,
    CHART_WIDTH,
    IMAGE_DIR,
    INLINE_INPUT,
    PROMPT_TTL,
    SOURCE_DELETE_PAUSE,
    USAGE_PROMPT,
)
from ..errors import ChartError
from ..notify.telegram import ChatBot, ChatMessage, ChatPhoto, TelegramError
from .scheduler import CleanupScheduler

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    def render(self, request: RenderRequest) -> RenderedArtifact:
        raise NotImplementedError


class CommandOutcome(BaseModel):
    """What a single command invocation did."""

    prompted: bool = False
    rendered: bool = False
    delivered: bool = False
    artifact_path: Optional[Path] = None
    error: Optional[str] = None


def artifact_name(message: ChatMessage, symbol: str) -> str:
    """Return the per-request image base name.

    Combining the message time, message ID, symbol and sender keeps
    names unique across concurrent commands sharing one directory.
    """
    return f"{message.unixtime}-{message.message_id}-{symbol}-{message.username}"


def build_chat_request(
    message: ChatMessage,
    symbol: str,
    time_range: str,
    technical_analysis: bool = False,
    image_dir: str = IMAGE_DIR,
) -> RenderRequest:
    """Build the render request used for chat replies."""
    return RenderRequest(
        symbol=symbol,
        description=symbol,
        time_range=time_range,
        technical_analysis=technical_analysis,
        input=INLINE_INPUT,
        output=artifact_name(message, symbol),
        directory=image_dir,
        width=CHART_WIDTH,
        height=CHART_HEIGHT,
        delay=CAPTURE_DELAY,
        overwrite=True,
        dark_mode=True,
    )


class ChartCommandHandler:
    """Handle ``/chart`` style commands end to end.

    Parameters
    ----------
    bot : ChatBot
        Chat transport used for replies and deletions.
    renderer : Renderer
        Object exposing ``render(request)``, normally a
        :class:`~chartbot.charts.renderer.ChartRenderer`.
    scheduler : CleanupScheduler, optional
        Scheduler for delayed deletions.  A default one with the
        standard artifact lifetime is created when omitted.
    image_dir : str, optional
        Directory rendered images are written to.
    sleep : callable, optional
        Used for the pause before deleting the source command.  Tests
        pass a no-op.
    """

    def __init__(
        self,
        bot: ChatBot,
        renderer: Renderer,
        scheduler: Optional[CleanupScheduler] = None,
        image_dir: str = IMAGE_DIR,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.bot = bot
        self.renderer = renderer
        self.scheduler = scheduler or CleanupScheduler()
        self.image_dir = image_dir
        self._sleep = sleep

    def _delete_quietly(self, message: Optional[ChatMessage]) -> None:
        if message is None:
            return
        try:
            self.bot.delete(message)
        except TelegramError as exc:
            logger.warning("could not delete message %s: %s", message.message_id, exc)

    def _prompt_usage(self, message: ChatMessage) -> CommandOutcome:
        prompt: Optional[ChatMessage] = None
        try:
            prompt = self.bot.reply_text(message, USAGE_PROMPT)
        except TelegramError as exc:
            logger.warning("could not send usage prompt: %s", exc)

        def _cleanup() -> None:
            self._delete_quietly(prompt)
            self._delete_quietly(message)

        self.scheduler.schedule(PROMPT_TTL, _cleanup, name=f"prompt:{message.message_id}")
        return CommandOutcome(prompted=True)

    def handle(
        self,
        message: ChatMessage,
        symbol: str,
        time_range: str,
        delete_source: bool = False,
        technical_analysis: bool = False,
    ) -> CommandOutcome:
        """Render and send a chart for ``symbol`` in reply to ``message``."""
        if not symbol:
            return self._prompt_usage(message)

        outcome = CommandOutcome()
        request = build_chat_request(message, symbol, time_range, technical_analysis, self.image_dir)
        try:
            artifact = self.renderer.render(request)
            outcome.rendered = True
        except ChartError as exc:
            logger.error("chart render failed for %s: %s", symbol, exc)
            outcome.error = str(exc)
            artifact = RenderedArtifact.from_request(request)
        outcome.artifact_path = artifact.path

        photo = ChatPhoto(path=artifact.path, width=CHART_WIDTH, height=CHART_HEIGHT)
        try:
            self.bot.reply_photo(message, photo)
            outcome.delivered = True
        except TelegramError as exc:
            logger.error("could not send chart %s: %s", artifact.path, exc)

        self.scheduler.schedule_deletion(artifact.path)

        self._sleep(SOURCE_DELETE_PAUSE)
        if delete_source:
            self._delete_quietly(message)
        return outcome


__all__ = ["ChartCommandHandler", "CommandOutcome", "artifact_name", "build_chat_request"]
