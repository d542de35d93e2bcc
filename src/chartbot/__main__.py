"""Entry point for running chartbot as a module.

This allows the CLI to be invoked with ``python -m chartbot``.
"""

from .cli import cli

if __name__ == "__main__":  # pragma: no cover
    cli()
