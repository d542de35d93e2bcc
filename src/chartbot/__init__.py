"""Top-level package for chartbot.

chartbot answers chat commands with TradingView chart screenshots.  The
command-line interface lives in :mod:`chartbot.cli`, the rendering
pipeline in :mod:`chartbot.charts`, the Telegram transport in
:mod:`chartbot.notify` and command handling in
:mod:`chartbot.orchestration`.
"""

__all__ = [
    "cli",
    "charts",
    "notify",
    "orchestration",
]
