"""Exception hierarchy for the chart rendering pipeline.

All pipeline failures derive from :class:`ChartError` so callers that
treat rendering as best-effort can catch a single type.
"""

from __future__ import annotations

from typing import Literal, Optional

ValidationKind = Literal["missing-symbol", "missing-description", "missing-input", "missing-output"]


class ChartError(Exception):
    """Base class for chart pipeline errors."""


class ValidationError(ChartError):
    """A render request is missing a required field."""

    def __init__(self, kind: ValidationKind, message: Optional[str] = None) -> None:
        self.kind = kind
        super().__init__(message or f"Invalid render request: {kind}")


class UnsupportedPlatformError(ChartError):
    """No default renderer location is known for the host platform."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(
            f"Unsupported platform {platform!r}; set CAPTURE_WEBSITE_BIN to the renderer path"
        )


class RenderError(ChartError):
    """The renderer process could not be started or exited non-zero."""

    def __init__(self, message: str, output: str = "", returncode: Optional[int] = None) -> None:
        self.output = output
        self.returncode = returncode
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.output:
            return f"{base}\n{self.output.strip()}"
        return base


__all__ = ["ChartError", "ValidationError", "UnsupportedPlatformError", "RenderError"]
