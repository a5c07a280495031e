"""`pcmkit info` command — describe an audio file's PCM layout."""

from __future__ import annotations

import math
import sys
from pathlib import Path

import click
import numpy as np

from pcmkit.audio_io import read_audio
from pcmkit.cli.main import cli
from pcmkit.codec.pcm import PcmCodec
from pcmkit.exceptions import AudioFormatError
from pcmkit.session import format_details


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(input_path: Path) -> None:
    """Print format details, duration and peak level of INPUT_PATH."""
    try:
        data, audio_format = read_audio(input_path)
        samples = PcmCodec(audio_format).decode(data)
    except AudioFormatError as err:
        click.echo(f"Error: {err}", err=True)
        sys.exit(1)

    frames = samples.shape[1]
    peak = float(np.max(np.abs(samples))) if samples.size else 0.0
    peak_dbfs = 20 * math.log10(peak) if peak > 0 else -math.inf

    click.echo(format_details(audio_format))
    click.echo(f"Frames: {frames}")
    click.echo(f"Duration: {frames / audio_format.sample_rate:.3f} s")
    click.echo(f"Peak: {peak_dbfs:.2f} dBFS")
