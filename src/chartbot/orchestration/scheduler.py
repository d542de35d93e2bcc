"""Delayed one-shot tasks for chartbot.

Rendered images and usage prompts are short lived: the bot removes them
a few seconds after they were sent.  This module runs such clean-ups on
daemon :class:`threading.Timer` threads.  Each scheduled task keeps a
cancellation handle even though the bot itself never cancels.

Clean-up is best effort.  A task that raises is logged and forgotten;
nothing is retried and nothing reaches the caller.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from ..config import ARTIFACT_TTL

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for a pending delayed call."""

    def __init__(self, delay: float, func: Callable[[], None], name: str) -> None:
        self.name = name
        self.delay = delay
        self._func = func
        self._fired = threading.Event()
        self._timer = threading.Timer(delay, self._run)
        self._timer.daemon = True
        self._timer.name = f"chartbot-{name}"

    def _run(self) -> None:
        self._fired.set()
        try:
            self._func()
        except Exception:
            logger.exception("scheduled task %s failed", self.name)

    def start(self) -> "ScheduledTask":
        self._timer.start()
        return self

    def cancel(self) -> None:
        """Stop the task if it has not fired yet."""
        self._timer.cancel()

    def join(self, timeout: Optional[float] = None) -> None:
        self._timer.join(timeout)

    @property
    def fired(self) -> bool:
        return self._fired.is_set()


def delete_file(path: Union[str, Path]) -> bool:
    """Remove ``path``, logging instead of raising on failure."""
    try:
        os.remove(path)
    except OSError as exc:
        logger.warning("could not delete %s: %s", path, exc)
        return False
    logger.debug("deleted %s", path)
    return True


class CleanupScheduler:
    """Schedules delayed deletion of rendered artifacts.

    Parameters
    ----------
    delay_seconds : float, optional
        Lifetime of an artifact before it is deleted.  Defaults to
        ``ARTIFACT_TTL`` (20 seconds).
    """

    def __init__(self, delay_seconds: float = ARTIFACT_TTL) -> None:
        self.delay_seconds = delay_seconds

    def schedule(self, delay: float, func: Callable[[], None], name: str = "task") -> ScheduledTask:
        """Run ``func`` once after ``delay`` seconds on a daemon thread."""
        return ScheduledTask(delay, func, name).start()

    def schedule_deletion(self, path: Union[str, Path]) -> ScheduledTask:
        """Delete the file at ``path`` once the artifact lifetime elapses."""
        return self.schedule(self.delay_seconds, lambda: delete_file(path), name=f"delete:{path}")


__all__ = ["ScheduledTask", "CleanupScheduler", "delete_file"]
