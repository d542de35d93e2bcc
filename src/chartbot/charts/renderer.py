"""Headless screenshot renderer for chart widgets.

Charts are produced by the external ``capture-website`` command line
tool.  The widget HTML is piped to its standard input and the tool
writes a PNG screenshot to the ``--output`` path.  Requests pointing at
a remote page instead pass the URL as the trailing positional argument
and leave stdin closed.

The process boundary is the :class:`ProcessRunner` protocol so tests
can substitute a fake runner and never spawn a real browser.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List, NamedTuple, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from ..config import RENDER_TIMEOUT, RENDERER_PATHS, WIDGET_LOCALE
from ..errors import RenderError, UnsupportedPlatformError
from .models import RenderedArtifact, RenderRequest
from .request import build_arguments, validate_request

logger = logging.getLogger(__name__)


class ProcessResult(NamedTuple):
    returncode: int
    output: str


class ProcessRunner(Protocol):
    """Runs an external command and reports its exit status.

    Implementations raise ``OSError`` when the command cannot be
    started and ``subprocess.TimeoutExpired`` when it overruns.
    """

    def run(self, args: List[str], stdin: Optional[bytes] = None) -> ProcessResult:
        raise NotImplementedError


class SubprocessRunner:
    """:class:`ProcessRunner` backed by :func:`subprocess.run`.

    Standard output and standard error are merged into one captured
    stream for diagnostics.
    """

    def __init__(self, timeout: Optional[float] = RENDER_TIMEOUT) -> None:
        self.timeout = timeout

    def run(self, args: List[str], stdin: Optional[bytes] = None) -> ProcessResult:
        # Remote captures get the null device rather than our own stdin.
        completed = subprocess.run(
            args,
            input=stdin,
            stdin=subprocess.DEVNULL if stdin is None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=self.timeout,
        )
        output = (completed.stdout or b"").decode("utf-8", errors="replace")
        return ProcessResult(completed.returncode, output)


def resolve_renderer_path(explicit: Optional[str] = None, platform: Optional[str] = None) -> str:
    """Return the renderer executable to use.

    An explicit path wins, then the ``CAPTURE_WEBSITE_BIN`` environment
    variable, then the default for the host platform.

    Raises
    ------
    UnsupportedPlatformError
        If no explicit path is configured and the platform has no
        default location.
    """
    path = explicit or os.getenv("CAPTURE_WEBSITE_BIN")
    if path:
        return path
    platform = platform or sys.platform
    try:
        return RENDERER_PATHS[platform]
    except KeyError:
        raise UnsupportedPlatformError(platform) from None


class RendererConfig(BaseModel):
    """Immutable renderer settings, resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    binary_path: str
    timeout: float = RENDER_TIMEOUT
    locale: str = WIDGET_LOCALE

    @classmethod
    def resolve(
        cls,
        explicit: Optional[str] = None,
        platform: Optional[str] = None,
        timeout: float = RENDER_TIMEOUT,
        locale: str = WIDGET_LOCALE,
    ) -> "RendererConfig":
        return cls(
            binary_path=resolve_renderer_path(explicit, platform),
            timeout=timeout,
            locale=locale,
        )


class ChartRenderer:
    """Render :class:`RenderRequest` objects into image files."""

    def __init__(self, config: RendererConfig, runner: Optional[ProcessRunner] = None) -> None:
        self.config = config
        self.runner: ProcessRunner = runner or SubprocessRunner(timeout=config.timeout)

    def render(self, request: RenderRequest) -> RenderedArtifact:
        """Validate ``request``, run the renderer and describe the result.

        The call blocks until the renderer exits.  The returned artifact
        path is where the renderer was told to write; its existence is
        not checked.

        Raises
        ------
        ValidationError
            If the request is incomplete.  Nothing is spawned.
        RenderError
            If the renderer cannot start, times out or exits non-zero.
        """
        validate_request(request, locale=self.config.locale)
        args = build_arguments(request)
        stdin: Optional[bytes] = None
        if request.html:
            stdin = request.html.encode("utf-8")
        elif not request.is_inline:
            args.append(request.input)
        try:
            Path(request.directory).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RenderError(f"Cannot create output directory {request.directory}: {exc}") from exc
        cmd = [self.config.binary_path] + args
        logger.info("rendering %s to %s", request.symbol, request.file_path)
        try:
            result = self.runner.run(cmd, stdin)
        except subprocess.TimeoutExpired as exc:
            output = exc.output or b""
            if isinstance(output, bytes):
                output = output.decode("utf-8", errors="replace")
            raise RenderError(f"Renderer timed out after {exc.timeout}s", output=output) from exc
        except OSError as exc:
            raise RenderError(f"Failed to start renderer {self.config.binary_path}: {exc}") from exc
        if result.returncode != 0:
            raise RenderError(
                f"Renderer exited with status {result.returncode}",
                output=result.output,
                returncode=result.returncode,
            )
        return RenderedArtifact.from_request(request)


__all__ = [
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "resolve_renderer_path",
    "RendererConfig",
    "ChartRenderer",
]
