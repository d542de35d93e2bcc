"""Orchestration helpers for chartbot.

This package wires chat commands to the chart renderer: command
parsing and polling, the per-command handler and the delayed clean-up
scheduler.
"""

from .bot_loop import ChartCommand, dispatch, parse_command, run_bot  # noqa: F401
from .chart_command import ChartCommandHandler, CommandOutcome  # noqa: F401
from .scheduler import CleanupScheduler, ScheduledTask  # noqa: F401

__all__ = [
    "ChartCommand",
    "dispatch",
    "parse_command",
    "run_bot",
    "ChartCommandHandler",
    "CommandOutcome",
    "CleanupScheduler",
    "ScheduledTask",
]
