"""Main CLI command group for pcmkit."""

from __future__ import annotations

import click

import pcmkit
from pcmkit.logging import configure_logging


@click.group()
@click.version_option(version=pcmkit.__version__, prog_name="pcmkit")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (default: PCMKIT_LOG_LEVEL or WARNING).",
)
def cli(log_level: str | None) -> None:
    """pcmkit — gain, noise reduction and anti-distortion for PCM audio."""
    if log_level is not None:
        configure_logging(level=log_level, force=True)
