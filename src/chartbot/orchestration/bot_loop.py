"""Long-polling loop that feeds chat commands to the chart handler.

Two commands are recognised::

    /chart <SYMBOL> [RANGE]   compact overview chart
    /ta <SYMBOL> [RANGE]      technical-analysis chart with an SMA study

``RANGE`` is a TradingView range such as ``1M`` or ``12M`` and defaults
to ``DEFAULT_TIME_RANGE``.  It is passed on in overview suffix form
(``"|12M"``).  Each accepted command is handled on its own thread so a
slow render does not hold up the chat; there is no throttling.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any, Callable, Dict, Optional, Sequence

from pydantic import BaseModel

from ..config import DEFAULT_TIME_RANGE, POLL_RETRY_DELAY
from ..notify.telegram import ChatMessage, TelegramBot, TelegramError, is_allowed, message_from_api
from .chart_command import ChartCommandHandler

logger = logging.getLogger(__name__)

# Command name -> technical analysis flag.
COMMANDS: Dict[str, bool] = {
    "/chart": False,
    "/ta": True,
}

# Exchange-qualified tickers such as "NASDAQ:AAPL", "BRK.B" or "BTCUSD".
SYMBOL_PATTERN = re.compile(r"[A-Z0-9:._!&-]{1,32}")
# TradingView ranges such as "1D", "12M", "YTD" or "ALL".
RANGE_PATTERN = re.compile(r"[0-9]{0,3}[A-Z]{1,3}")


class ChartCommand(BaseModel):
    """A parsed chart command."""

    symbol: str
    time_range: str
    technical_analysis: bool = False
    delete_source: bool = False


def parse_command(text: str, delete_source: bool = False) -> Optional[ChartCommand]:
    """Parse chat ``text`` into a :class:`ChartCommand`.

    Returns ``None`` when the text is not a chart command.  A command
    without a symbol, or with a symbol or range containing anything but
    ticker characters, parses with an empty ``symbol`` so the handler
    answers with the usage prompt.
    """
    parts = (text or "").split()
    if not parts:
        return None
    # "/chart@mybot" addresses a specific bot in group chats.
    name = parts[0].split("@", 1)[0].lower()
    if name not in COMMANDS:
        return None
    symbol = parts[1].upper() if len(parts) > 1 else ""
    range_code = parts[2].upper() if len(parts) > 2 else DEFAULT_TIME_RANGE
    # Both values end up inside the widget script and the image file name.
    if not SYMBOL_PATTERN.fullmatch(symbol) or not RANGE_PATTERN.fullmatch(range_code):
        symbol = ""
        range_code = DEFAULT_TIME_RANGE
    return ChartCommand(
        symbol=symbol,
        time_range=f"|{range_code}",
        technical_analysis=COMMANDS[name],
        delete_source=delete_source,
    )


def dispatch(
    handler: ChartCommandHandler,
    message: ChatMessage,
    delete_source: bool = False,
) -> Optional[threading.Thread]:
    """Start a worker thread for ``message`` if it is a chart command."""
    command = parse_command(message.text, delete_source=delete_source)
    if command is None:
        return None

    def _work() -> None:
        try:
            handler.handle(
                message,
                command.symbol,
                command.time_range,
                delete_source=command.delete_source,
                technical_analysis=command.technical_analysis,
            )
        except Exception:
            logger.exception("chart command %r failed", message.text)

    worker = threading.Thread(target=_work, name=f"chart-{message.message_id}", daemon=True)
    worker.start()
    return worker


def run_bot(
    bot: TelegramBot,
    handler: ChartCommandHandler,
    allowlist: Sequence[str] = (),
    delete_source: bool = False,
    once: bool = False,
    poll_timeout: int = 30,
    on_update: Optional[Callable[[Dict[str, Any]], None]] = None,
    retry_delay: float = POLL_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Poll Telegram for updates and dispatch chart commands.

    Parameters
    ----------
    bot : TelegramBot
        Client used for polling.
    handler : ChartCommandHandler
        Handler receiving parsed commands.
    allowlist : sequence of str
        Chat IDs to serve; empty serves every chat.
    delete_source : bool
        Delete the command message after replying.
    once : bool
        Process a single batch of updates and return.
    poll_timeout : int
        Server-side long-poll timeout in seconds.
    on_update : callable, optional
        Hook invoked with each raw update before dispatch.
    retry_delay : float
        Seconds to wait after a failed poll before polling again.
    sleep : callable, optional
        Used for the retry wait.  Tests pass a recorder.
    """
    offset: Optional[int] = None
    while True:
        try:
            updates = bot.get_updates(offset=offset, poll_timeout=poll_timeout)
        except TelegramError as exc:
            logger.warning("polling failed, retrying in %ss: %s", retry_delay, exc)
            updates = []
            sleep(retry_delay)
        for update in updates:
            offset = int(update["update_id"]) + 1
            if on_update is not None:
                on_update(update)
            data = update.get("message")
            if not data or "text" not in data:
                continue
            message = message_from_api(data)
            if not is_allowed(message.chat_id, allowlist):
                logger.info("ignoring message from chat %s", message.chat_id)
                continue
            dispatch(handler, message, delete_source=delete_source)
        if once:
            return


__all__ = ["COMMANDS", "SYMBOL_PATTERN", "RANGE_PATTERN", "ChartCommand", "parse_command", "dispatch", "run_bot"]
