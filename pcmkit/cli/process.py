"""`pcmkit process` command — run the processing chain over an audio file."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from pcmkit.audio_io import container_for, read_audio, write_audio
from pcmkit.cli.main import cli
from pcmkit.config.processing import ProcessingConfig
from pcmkit.config.settings import get_settings
from pcmkit.exceptions import AudioFormatError
from pcmkit.processing.pipeline import AudioProcessingPipeline


def _build_config(
    amplification: float | None,
    noise_reduction: dict[str, Any],
    anti_distortion: dict[str, Any],
) -> ProcessingConfig:
    """Overlay explicit CLI options on the environment defaults."""
    base = get_settings().processing.to_config().model_dump()
    if amplification is not None:
        base["amplification"] = amplification
    base["noise_reduction"].update({k: v for k, v in noise_reduction.items() if v is not None})
    base["anti_distortion"].update({k: v for k, v in anti_distortion.items() if v is not None})
    return ProcessingConfig.model_validate(base)


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--gain", "amplification", type=float, default=None, help="Amplification factor.")
@click.option(
    "--noise-reduction/--no-noise-reduction",
    default=None,
    help="Enable spectral noise reduction.",
)
@click.option("--reduction-factor", type=float, default=None, help="Noise reduction strength.")
@click.option("--noise-floor", type=float, default=None, help="Spectral magnitude floor.")
@click.option(
    "--smoothing",
    "smoothing_factor",
    type=float,
    default=None,
    help="Inter-frame gain smoothing in [0, 1].",
)
@click.option(
    "--anti-distortion/--no-anti-distortion",
    default=None,
    help="Enable the look-ahead limiter.",
)
@click.option("--threshold", type=float, default=None, help="Limiter threshold in (0, 1].")
@click.option("--ratio", type=float, default=None, help="Base compression ratio (>= 1).")
@click.option("--makeup-gain", type=float, default=None, help="Gain applied after compression.")
@click.option(
    "--soft-clip/--hard-clip",
    "use_soft_clip",
    default=None,
    help="Clipper applied after the limiter.",
)
@click.option(
    "--noise-profile",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Noise-only recording to learn the noise profile from (enables noise reduction).",
)
@click.option(
    "--noise-range",
    type=int,
    nargs=2,
    default=None,
    metavar="START END",
    help="Inclusive frame range of INPUT holding only noise (enables noise reduction).",
)
def process(
    input_path: Path,
    output_path: Path,
    amplification: float | None,
    noise_reduction: bool | None,
    reduction_factor: float | None,
    noise_floor: float | None,
    smoothing_factor: float | None,
    anti_distortion: bool | None,
    threshold: float | None,
    ratio: float | None,
    makeup_gain: float | None,
    use_soft_clip: bool | None,
    noise_profile: Path | None,
    noise_range: tuple[int, int] | None,
) -> None:
    """Process INPUT_PATH and write the result to OUTPUT_PATH.

    Chain: gain -> noise reduction -> anti-distortion.
    """
    if noise_profile is not None or noise_range:
        noise_reduction = True if noise_reduction is None else noise_reduction

    try:
        config = _build_config(
            amplification,
            {
                "enabled": noise_reduction,
                "reduction_factor": reduction_factor,
                "noise_floor": noise_floor,
                "smoothing_factor": smoothing_factor,
            },
            {
                "enabled": anti_distortion,
                "threshold": threshold,
                "ratio": ratio,
                "makeup_gain": makeup_gain,
                "use_soft_clip": use_soft_clip,
            },
        )
    except ValidationError as err:
        click.echo(f"Error: invalid parameters: {err}", err=True)
        sys.exit(1)

    pipeline = AudioProcessingPipeline()

    try:
        data, audio_format = read_audio(input_path)

        if noise_profile is not None:
            noise_data, noise_format = read_audio(noise_profile)
            pipeline.learn_noise_profile(noise_data, noise_format)

        if noise_range:
            start, end = noise_range
            if not pipeline.learn_noise_profile_from_range(data, audio_format, start, end):
                click.echo(f"Error: invalid noise range {start}..{end}", err=True)
                sys.exit(1)

        processed = pipeline.process(data, audio_format, config)
        write_audio(output_path, processed, audio_format, container_for(output_path))
    except AudioFormatError as err:
        click.echo(f"Error: {err}", err=True)
        sys.exit(1)

    stages = ["gain"]
    if config.noise_reduction.enabled:
        stages.append("noise_reduction")
    if config.anti_distortion.enabled:
        stages.append("anti_distortion")
    click.echo(
        f"Wrote {output_path} ({audio_format.frame_count(len(processed))} frames, "
        f"stages: {', '.join(stages)}, noise profile: {pipeline.noise_profile_state.value})"
    )
