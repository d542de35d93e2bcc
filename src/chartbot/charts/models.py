"""Pydantic models for chart render requests and their artifacts.

A :class:`RenderRequest` describes one screenshot of a TradingView
widget.  It is mutable on purpose: validation attaches the generated
markup and fixes the output format in place before the argument list
is built.  A :class:`RenderedArtifact` points at the image file the
renderer wrote.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from ..config import IMAGE_DIR, IMAGE_FORMAT, INLINE_INPUT


class RenderRequest(BaseModel):
    """A single chart render job."""

    symbol: str = ""
    description: str = ""
    time_range: str = ""
    technical_analysis: bool = False
    # ``"-"`` reads HTML from stdin; anything else is a remote source.
    input: str = INLINE_INPUT
    output: str = ""
    directory: str = IMAGE_DIR
    width: int = 0
    height: int = 0
    delay: int = 0
    overwrite: bool = False
    dark_mode: bool = False
    html: str = ""
    format: str = IMAGE_FORMAT

    @property
    def file_name(self) -> str:
        return f"{self.output}.{self.format}"

    @property
    def file_path(self) -> Path:
        return Path(self.directory) / self.file_name

    @property
    def is_inline(self) -> bool:
        return self.input == INLINE_INPUT


class RenderedArtifact(BaseModel):
    """The image file produced for a request."""

    path: Path
    width: int
    height: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_request(cls, request: RenderRequest, created_at: Optional[datetime] = None) -> "RenderedArtifact":
        artifact = cls(path=request.file_path, width=request.width, height=request.height)
        if created_at is not None:
            artifact.created_at = created_at
        return artifact


__all__ = ["RenderRequest", "RenderedArtifact"]
