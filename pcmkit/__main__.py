"""Allow ``python -m pcmkit``."""

from pcmkit.cli import cli

cli()
