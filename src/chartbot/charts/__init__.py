"""Chart rendering utilities for chartbot.

This package builds TradingView widget markup, validates render
requests and drives the external ``capture-website`` screenshot tool.
See :mod:`chartbot.charts.renderer` for details.
"""

from .models import RenderedArtifact, RenderRequest
from .renderer import (
    ChartRenderer,
    ProcessResult,
    ProcessRunner,
    RendererConfig,
    SubprocessRunner,
    resolve_renderer_path,
)
from .request import build_arguments, validate_request
from .widgets import build_markup, detail_widget, overview_widget

__all__ = [
    "RenderRequest",
    "RenderedArtifact",
    "ChartRenderer",
    "ProcessResult",
    "ProcessRunner",
    "RendererConfig",
    "SubprocessRunner",
    "resolve_renderer_path",
    "build_arguments",
    "validate_request",
    "build_markup",
    "detail_widget",
    "overview_widget",
]
