"""CLI command for beat tracking from novelty .npy files."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ...pipeline.beats import BEATS_OUTPUT_DIR, FS_NOV, NOVELTY_DIR, run_beats
from ...tracking import TrackingConfig
from ..base import BaseCLI

app = typer.Typer(
    name="beats",
    help="Track beats in novelty .npy files and write beat times to data/derived/beats",
)


@app.callback(invoke_without_command=True)
def beats(
    files: Annotated[
        list[Path],
        typer.Argument(
            help="Novelty .npy file(s) to process. If omitted, all .npy in data/derived/novelty are used.",
        ),
    ] = [],
    fs: Annotated[
        float,
        typer.Option("--fs", help="Novelty feature sample rate in Hz. Default: 100."),
    ] = FS_NOV,
    min_ibi: Annotated[
        float,
        typer.Option("--min-ibi", help="Shortest beat period in seconds (fastest tempo). Default: 0.3."),
    ] = 0.3,
    max_ibi: Annotated[
        float,
        typer.Option("--max-ibi", help="Longest beat period in seconds (slowest tempo). Default: 1.0."),
    ] = 1.0,
    average_salience: Annotated[
        bool,
        typer.Option(
            "--average-salience",
            help="Score agents by average rather than summed salience (favours slower tempi).",
        ),
    ] = False,
    seed: Annotated[
        list[float],
        typer.Option("--seed", "-s", help="Known beat time in seconds; repeat for two or more to skip induction."),
    ] = [],
    stop: Annotated[
        float | None,
        typer.Option("--stop", help="Do not track beats after this time (seconds)."),
    ] = None,
    unfilled: Annotated[
        bool,
        typer.Option("--unfilled", help="Also write the beats before interpolation (<track>_beats_unfilled.npy)."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be written without writing files."),
    ] = False,
    no_log: Annotated[
        bool,
        typer.Option("--no-log", help="Do not write a log file to data/logs/derived."),
    ] = False,
) -> None:
    """Track beats in novelty files and write to data/derived/beats.

    Output: <track_name>_beats.npy
    """
    cli = BaseCLI("beats")

    novelty_list = list(files) if files else None
    config = TrackingConfig(min_ibi=min_ibi, max_ibi=max_ibi, use_average_salience=average_salience)

    def _run() -> dict:
        return run_beats(
            novelty_files=novelty_list,
            output_dir=BEATS_OUTPUT_DIR,
            novelty_dir=NOVELTY_DIR,
            fs=fs,
            config=config,
            seed_beats=list(seed) or None,
            stop=stop,
            save_unfilled=unfilled,
            dry_run=dry_run,
        )

    pre_message = (
        "Tracking beats (dry-run; no files will be written)..."
        if dry_run
        else "Tracking beats for "
        + (f"{len(novelty_list)} file(s)..." if novelty_list else "all novelty files in folder...")
    )
    cli.handle_cli_operation(
        operation="beats",
        op_callable=_run,
        pre_message=pre_message,
        log_module="beats",
        log_dry_run=dry_run,
        enable_log=not no_log,
        log_context={"fs": fs, "min_ibi": min_ibi, "max_ibi": max_ibi, "seed": list(seed)},
    )
