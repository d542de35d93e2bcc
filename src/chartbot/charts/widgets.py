"""TradingView widget markup for chart screenshots.

Two widget flavours are supported:

* the overview ``MediumWidget`` showing a compact price chart for one
  symbol, where the time range is appended to the symbol
  (``"AAPL|12M"``), and
* the detail ``TradingView.widget`` used in technical-analysis mode,
  which takes the range as its own ``"range"`` setting and enables a
  simple moving average study.

The functions here are pure string builders.  Inputs are not checked;
bad symbols simply yield markup the renderer fails to draw.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from ..config import WIDGET_HEIGHT, WIDGET_LOCALE, WIDGET_WIDTH
from .models import RenderRequest

_WIDGET_TEMPLATE = """
<!-- TradingView Widget BEGIN -->
<div class="tradingview-widget-container">
  <div id="{container_id}"></div>
  <div class="tradingview-widget-copyright">Chart data provided by TradingView</div>
  <script type="text/javascript" src="https://s3.tradingview.com/tv.js"></script>
  <script type="text/javascript">
  new {constructor}(
  {settings}
  );
  </script>
</div>
<!-- TradingView Widget END -->
"""

OVERVIEW_CONTAINER_ID = "tradingview_9efce"
DETAIL_CONTAINER_ID = "tradingview_f9dfa"


def _render(constructor: str, container_id: str, settings: Dict[str, Any]) -> str:
    return _WIDGET_TEMPLATE.format(
        container_id=container_id,
        constructor=constructor,
        settings=json.dumps(settings, indent=2, ensure_ascii=False),
    )


def overview_widget(
    symbol: str,
    description: str,
    time_range: str,
    *,
    locale: str = WIDGET_LOCALE,
    width: int = WIDGET_WIDTH,
    height: int = WIDGET_HEIGHT,
) -> str:
    """Return markup for the compact overview widget.

    ``time_range`` is appended verbatim to ``symbol``; callers pass the
    TradingView suffix form such as ``"|12M"``.
    """
    settings: Dict[str, Any] = {
        "symbols": [[description, f"{symbol}{time_range}"]],
        "chartOnly": False,
        "width": width,
        "height": height,
        "locale": locale,
        "colorTheme": "dark",
        "gridLineColor": "#2A2E39",
        "trendLineColor": "#1976D2",
        "fontColor": "#787B86",
        "underLineColor": "rgba(55, 166, 239, 0.15)",
        "isTransparent": False,
        "autosize": False,
        "container_id": OVERVIEW_CONTAINER_ID,
    }
    return _render("TradingView.MediumWidget", OVERVIEW_CONTAINER_ID, settings)


def detail_widget(
    symbol: str,
    time_range: str,
    *,
    locale: str = WIDGET_LOCALE,
    width: int = WIDGET_WIDTH,
    height: int = WIDGET_HEIGHT,
) -> str:
    """Return markup for the full technical-analysis widget.

    The first character of ``time_range`` is the overview separator and
    is dropped, so ``"|12M"`` becomes the range ``"12M"``.
    """
    settings: Dict[str, Any] = {
        "width": width,
        "height": height,
        "symbol": symbol,
        "timezone": "America/New_York",
        "theme": "dark",
        "style": "1",
        "locale": locale,
        "toolbar_bg": "#f1f3f6",
        "enable_publishing": False,
        "hide_top_toolbar": True,
        "range": time_range[1:],
        "allow_symbol_change": True,
        "save_image": False,
        "studies": ["MASimple@tv-basicstudies"],
        "container_id": DETAIL_CONTAINER_ID,
    }
    return _render("TradingView.widget", DETAIL_CONTAINER_ID, settings)


def build_markup(request: RenderRequest, *, locale: str = WIDGET_LOCALE) -> str:
    """Pick the widget variant for ``request`` and return its markup."""
    if request.technical_analysis:
        return detail_widget(request.symbol, request.time_range, locale=locale)
    return overview_widget(request.symbol, request.description, request.time_range, locale=locale)


__all__ = ["overview_widget", "detail_widget", "build_markup"]
