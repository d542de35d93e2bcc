"""Command-line interface for chartbot.

This module uses the :mod:`click` library to expose the chart pipeline:

* ``render`` screenshots one chart into a local PNG file,
* ``markup`` prints the widget HTML without rendering,
* ``config-check`` reports the resolved renderer location,
* ``poll`` runs the Telegram bot.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

import click

from .charts.models import RenderRequest
from .charts.renderer import ChartRenderer, RendererConfig
from .charts.widgets import build_markup
from .config import (
    CAPTURE_DELAY,
    CHART_HEIGHT,
    CHART_WIDTH,
    DEFAULT_TIME_RANGE,
    INLINE_INPUT,
    load_settings,
)
from .errors import ChartError
from .notify.telegram import TelegramBot
from .orchestration.bot_loop import run_bot
from .orchestration.chart_command import ChartCommandHandler


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity (default: WARNING).",
)
def cli(log_level: str) -> None:
    """chartbot command-line interface."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_renderer(binary: Optional[str]) -> ChartRenderer:
    """Construct the renderer from settings.

    Factored out so tests can monkeypatch it with a fake.
    """
    settings = load_settings()
    config = RendererConfig.resolve(
        explicit=binary or settings.renderer_path,
        timeout=settings.render_timeout,
        locale=settings.locale,
    )
    return ChartRenderer(config)


def _build_bot(token: str) -> TelegramBot:
    return TelegramBot(token)


@cli.command()
@click.option("--symbol", required=True, type=str, help="Ticker symbol, e.g. AAPL or NASDAQ:AAPL.")
@click.option("--description", type=str, default=None, help="Chart label (default: the symbol).")
@click.option("--range", "range_code", type=str, default=DEFAULT_TIME_RANGE, show_default=True, help="TradingView range code.")
@click.option("--technical-analysis", "-t", is_flag=True, default=False, help="Use the detail widget with an SMA study.")
@click.option("--url", type=str, default=None, help="Screenshot a remote page instead of the generated widget.")
@click.option("--out-dir", type=str, default=None, help="Output directory (default: CHARTBOT_IMAGE_DIR or ./img).")
@click.option("--output", type=str, default=None, help="Output base name (default: <unixtime>-<symbol>).")
@click.option("--width", type=int, default=CHART_WIDTH, show_default=True)
@click.option("--height", type=int, default=CHART_HEIGHT, show_default=True)
@click.option("--delay", type=int, default=CAPTURE_DELAY, show_default=True, help="Seconds to wait before capture.")
@click.option("--binary", type=str, default=None, help="Path to the capture-website executable.")
def render(
    symbol: str,
    description: Optional[str],
    range_code: str,
    technical_analysis: bool,
    url: Optional[str],
    out_dir: Optional[str],
    output: Optional[str],
    width: int,
    height: int,
    delay: int,
    binary: Optional[str],
) -> None:
    """Render one chart to a PNG file and print its path."""
    settings = load_settings()
    request = RenderRequest(
        symbol=symbol,
        description=description or symbol,
        time_range=f"|{range_code}",
        technical_analysis=technical_analysis,
        input=url or INLINE_INPUT,
        output=output or f"{int(time.time())}-{symbol.replace(':', '_')}",
        directory=out_dir or settings.image_dir,
        width=width,
        height=height,
        delay=delay,
        overwrite=True,
        dark_mode=True,
    )
    try:
        renderer = _build_renderer(binary)
        artifact = renderer.render(request)
    except ChartError as exc:
        raise click.ClickException(str(exc))
    click.echo(str(artifact.path))


@cli.command()
@click.option("--symbol", required=True, type=str)
@click.option("--range", "range_code", type=str, default=DEFAULT_TIME_RANGE, show_default=True)
@click.option("--technical-analysis", "-t", is_flag=True, default=False)
def markup(symbol: str, range_code: str, technical_analysis: bool) -> None:
    """Print the widget HTML that would be rendered for SYMBOL."""
    request = RenderRequest(
        symbol=symbol,
        description=symbol,
        time_range=f"|{range_code}",
        technical_analysis=technical_analysis,
    )
    click.echo(build_markup(request, locale=load_settings().locale))


@cli.command(name="config-check")
def config_check() -> None:
    """Report the renderer executable and Telegram configuration.

    Exits with status 2 when no renderer location can be resolved for
    this platform.
    """
    settings = load_settings()
    try:
        config = RendererConfig.resolve(explicit=settings.renderer_path)
    except ChartError as exc:
        click.echo(str(exc), err=True)
        ctx = click.get_current_context()
        ctx.exit(2)
    found = "found" if os.path.isfile(config.binary_path) else "missing"
    click.echo(f"renderer: {config.binary_path} ({found})")
    click.echo(f"image dir: {settings.image_dir}")
    click.echo(f"telegram token: {'set' if settings.telegram_token else 'not set'}")


@cli.command()
@click.option("--once", is_flag=True, default=False, help="Process one batch of updates then exit.")
@click.option("--binary", type=str, default=None, help="Path to the capture-website executable.")
def poll(once: bool, binary: Optional[str]) -> None:
    """Run the Telegram bot, answering /chart and /ta commands."""
    settings = load_settings()
    if not settings.telegram_token:
        raise click.UsageError("TELEGRAM_BOT_TOKEN is not set")
    try:
        renderer = _build_renderer(binary)
    except ChartError as exc:
        raise click.ClickException(str(exc))
    bot = _build_bot(settings.telegram_token)
    handler = ChartCommandHandler(bot, renderer, image_dir=settings.image_dir)
    click.echo("chartbot polling for commands")
    run_bot(
        bot,
        handler,
        allowlist=settings.chat_allowlist,
        delete_source=settings.delete_commands,
        once=once,
    )
