"""Command line interface for scenetq."""
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from loguru import logger
from pydantic import ValidationError

from .config import SearchConfig
from .core.video.errors import ScenetqError, ScoringAborted
from .decoding import open_decoder
from .encoding.params import format_encoder_options, get_encoder_version, registry
from .encoding.runner import Av1anRunner
from .scenes.models import ScenesInfo
from .scenes.stats import quality_stats, valid_scores
from .scenes.store import FileTrialStore, ScoreCache
from .scoring import always_abort, always_continue, score_pair
from .search import OverrideEmitter, QuantizerSearch
from .utils.logging import setup_logging
from .utils.validation import derived_path


def prompt_recovery(collected: int, expected: int) -> bool:
    """Ask whether to keep a partial set of scores."""
    click.echo(
        f"Scoring workers finished with {collected} of {expected} frames scored.",
        err=True
    )
    return click.confirm("PAUSED: Would you like to continue?", default=False, err=True)


STALL_POLICIES = {
    "prompt": prompt_recovery,
    "continue": always_continue,
    "abort": always_abort,
}


def load_metric():
    from .scoring.ssimulacra2 import Ssimulacra2Metric
    return Ssimulacra2Metric()


def build_config(options: Dict[str, Any]) -> SearchConfig:
    """SearchConfig from CLI options, leaving unset options to defaults."""
    try:
        return SearchConfig(**{k: v for k, v in options.items() if v is not None})
    except ValidationError as e:
        raise click.UsageError(str(e)) from e


def color_options(f):
    for name in ("primaries", "transfer", "matrix", "color-range"):
        f = click.option(f"--{name}", default=None,
                         help=f"Source {name.replace('-', ' ')} tag (default: inferred)")(f)
    return f


def logging_options(f):
    f = click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path),
                     default=None, help="Also log to this file")(f)
    f = click.option("--log-level", default="INFO", show_default=True,
                     type=click.Choice(["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"],
                                       case_sensitive=False))(f)
    return f


def run_guarded(action) -> None:
    """Run a command body, mapping scenetq errors to exit codes."""
    try:
        action()
    except ScoringAborted as e:
        logger.warning(e.message)
        click.echo("Aborted.", err=True)
        sys.exit(0)
    except ScenetqError as e:
        click.echo(f"Error: {e.message}", err=True)
        if e.details:
            logger.debug(e.details)
        sys.exit(1)


@click.group()
@click.version_option(package_name="scenetq")
def main() -> None:
    """Per-scene quality targeting for AV1 encodes."""


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--scenes", "scenes_path", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Scenes file on the canonical timeline")
@click.option("--trial-scenes", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Scenes file for the strided source (default: --scenes)")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Override scenes file (default: <source>_override.json)")
@click.option("--state", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Search state file (default: <source>_scores.json)")
@click.option("-e", "--encoder", type=click.Choice(registry.names), default=None)
@click.option("-q", "--quantizer", type=float, default=None, help="Base quantizer")
@click.option("-s", "--speed", type=int, default=None, help="Final encode speed")
@click.option("--search-speed", type=int, default=None, help="Trial encode speed")
@click.option("--step", "quantizer_step", type=float, default=None,
              help="Quantizer distance between trials")
@click.option("--range", "quantizer_range", default=None, help='Quantizer range, e.g. "[25, 55]"')
@click.option("--compensation", "quality_compensation", type=float, default=None,
              help="Added to trial mean scores before fitting")
@click.option("-t", "--target", "target_quality", type=float, default=None,
              help="Target mean score per scene")
@click.option("--cycle", type=int, default=None, help="Frame stride of the trial source")
@click.option("--threads", type=int, default=None, help="Scoring threads")
@click.option("-w", "--workers", type=int, default=None, help="av1an workers")
@click.option("--tiles", type=int, default=None)
@click.option("--pixel-format", default=None)
@click.option("-p", "--parameters", "encoder_params", default=None,
              help='Extra encoder parameters, e.g. "--film-grain 8"')
@click.option("-m", "--source-filter", type=click.Choice(["bestsource", "lsmash", "dgdecnv"]),
              default=None)
@click.option("--on-stall", type=click.Choice(list(STALL_POLICIES)), default="prompt",
              show_default=True, help="What to do when scoring stops early")
@color_options
@logging_options
def search(source: Path, scenes_path: Path, trial_scenes: Optional[Path],
           output: Optional[Path], state: Optional[Path], on_stall: str, **options) -> None:
    """Find a quantizer per scene of SOURCE and write zone overrides.

    SOURCE is the strided VapourSynth script (or video) the trials encode.
    """
    config = build_config(options)
    setup_logging(config.log_level, config.log_file)
    output = output or derived_path(source, "_override.json")
    state = state or derived_path(source, "_scores.json")

    def action():
        scenes = ScenesInfo.load(scenes_path)
        quantizer_search = QuantizerSearch(
            config,
            runner=Av1anRunner(config),
            store=FileTrialStore(state, scenes),
            metric=load_metric(),
            open_source=open_decoder,
            recovery=STALL_POLICIES[on_stall]
        )
        solved = quantizer_search.run(source, trial_scenes or scenes_path, scenes)
        OverrideEmitter(config).emit(solved, scenes_path, output)
        logger.info(
            "Final encoder options: " + format_encoder_options(
                config.encoder, config.quantizer_range, config.speed,
                config.tiles, config.color_tags(), extra=config.extra_params
            )
        )
        click.echo(str(output))

    run_guarded(action)


@main.command()
@click.argument("reference", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("distorted", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--cycle", type=int, default=None, help="Frame stride of DISTORTED")
@click.option("--threads", type=int, default=None, help="Scoring threads")
@click.option("-m", "--source-filter", type=click.Choice(["bestsource", "lsmash", "dgdecnv"]),
              default=None)
@click.option("--on-stall", type=click.Choice(list(STALL_POLICIES)), default="prompt",
              show_default=True)
@color_options
@logging_options
def score(reference: Path, distorted: Path, on_stall: str, **options) -> None:
    """Score DISTORTED against REFERENCE frame by frame and print a summary."""
    config = build_config(options)
    setup_logging(config.log_level, config.log_file)

    def action():
        cache = ScoreCache(distorted)
        if cache.exists():
            scores = cache.load()
        else:
            scores = score_pair(
                open_decoder(reference, config.source_filter),
                open_decoder(distorted, config.source_filter),
                load_metric(),
                color=config.color_tags(),
                cycle=config.cycle,
                threads=config.threads,
                recovery=STALL_POLICIES[on_stall]
            )
            cache.save(scores)
        valid = list(valid_scores(scores).values())
        if not valid:
            click.echo("No valid scores", err=True)
            sys.exit(1)
        stats = quality_stats(valid)
        click.echo(f"Frames:          {len(valid)}")
        for field, value in stats.model_dump().items():
            click.echo(f"{field + ':':<16} {value:.4f}")

    run_guarded(action)


@main.command()
@click.argument("encoder", type=click.Choice(registry.names))
@click.option("--range", "quantizer_range", default=None, help='Quantizer range, e.g. "[25, 55]"')
@click.option("-s", "--speed", type=int, default=None)
@click.option("--tiles", type=int, default=None)
@click.option("-p", "--parameters", "encoder_params", default=None,
              help="Extra encoder parameters")
@color_options
def encoder(**options) -> None:
    """Print the installed ENCODER version and its final encode options."""
    config = build_config(options)

    def action():
        click.echo(get_encoder_version(config.encoder))
        click.echo(format_encoder_options(
            config.encoder, config.quantizer_range, config.speed,
            config.tiles, config.color_tags(), extra=config.extra_params
        ))

    run_guarded(action)


if __name__ == '__main__':
    main()
