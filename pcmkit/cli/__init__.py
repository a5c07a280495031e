"""CLI for pcmkit.

Registers all commands on the main group.
"""

from pcmkit.cli.info import info
from pcmkit.cli.main import cli
from pcmkit.cli.process import process

__all__ = ["cli", "info", "process"]
