"""Pipeline for computing beat times from novelty .npy files."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from ..global_config import DERIVED_DIR
from ..onsets import onset_events_from_novelty
from ..tracking import TrackingConfig, beat_track, beats_from_times, event_times

logger = logging.getLogger(__name__)

FS_NOV = 100.0
NOVELTY_DIR = DERIVED_DIR / "novelty"
BEATS_OUTPUT_DIR = DERIVED_DIR / "beats"


def _resolve_novelty_files(files: list[Path] | None, novelty_dir: Path) -> list[Path]:
    """Return list of novelty paths: explicit if given, else all .npy in novelty_dir."""
    if files:
        return [Path(p).resolve() for p in files]
    if not novelty_dir.exists():
        return []
    return sorted(novelty_dir.glob("*.npy"))


def _track_name_from_novelty_stem(stem: str) -> str:
    """Extract track name from novelty filename stem."""
    if "_novelty_" in stem:
        return stem.split("_novelty_")[0]
    return stem


def _beat_stats(beat_times: np.ndarray, duration: float) -> dict:
    """Summary statistics for a beat time array, merged into the item dict."""
    n = int(len(beat_times))
    ibi = np.diff(beat_times) if n > 1 else np.zeros(0)
    ibi_mean = float(np.mean(ibi)) if ibi.size else 0.0
    t_first = float(beat_times[0]) if n else 0.0
    t_last = float(beat_times[-1]) if n else 0.0
    return {
        "num_beats": n,
        "implied_bpm": 60.0 / ibi_mean if ibi_mean > 0 else 0.0,
        "shape": tuple(beat_times.shape),
        "dtype": str(beat_times.dtype),
        "ibi_min": float(np.min(ibi)) if ibi.size else 0.0,
        "ibi_max": float(np.max(ibi)) if ibi.size else 0.0,
        "ibi_mean": ibi_mean,
        "ibi_std": float(np.std(ibi)) if ibi.size else 0.0,
        "t_first": t_first,
        "t_last": t_last,
        "duration": duration,
        "coverage_ratio": (t_last - t_first) / duration if duration > 0 else 0.0,
    }


def run_beats(
    *,
    novelty_files: list[Path] | None = None,
    output_dir: Path = BEATS_OUTPUT_DIR,
    novelty_dir: Path = NOVELTY_DIR,
    fs: float = FS_NOV,
    config: TrackingConfig | None = None,
    seed_beats: list[float] | None = None,
    stop: float | None = None,
    save_unfilled: bool = False,
    dry_run: bool = False,
) -> dict:
    """Track beats in novelty files and write beat times as .npy to output_dir.

    If novelty_files is None or empty, uses all .npy in novelty_dir.
    Output filename: <track_name>_beats.npy (plus <track_name>_beats_unfilled.npy
    with save_unfilled). Tracks where no agent survives are skipped.

    Returns:
        Dict with success, total, succeeded, failed, skipped, message, items, failures.
    """
    config = config or TrackingConfig()
    for warning in config.range_warnings():
        logger.warning("Tracking config: %s", warning)

    paths = _resolve_novelty_files(novelty_files, novelty_dir)
    if not paths:
        return {
            "success": True,
            "total": 0,
            "succeeded": 0,
            "failed": 0,
            "skipped": 0,
            "message": "No novelty files to process.",
            "items": [],
            "failures": [],
        }

    output_dir = Path(output_dir)
    if not dry_run:
        output_dir.mkdir(parents=True, exist_ok=True)

    seed = beats_from_times(sorted(seed_beats)) if seed_beats else []

    succeeded = 0
    failed = 0
    skipped = 0
    items: list[dict] = []
    failures: list[dict] = []

    for nov_path in paths:
        track_name = _track_name_from_novelty_stem(nov_path.stem)
        out_name = f"{track_name}_beats.npy"
        out_path = output_dir / out_name

        if not nov_path.exists():
            failed += 1
            failures.append({"item": str(nov_path), "reason": "File not found"})
            items.append({"file": nov_path.name, "status": "failed", "detail": "File not found"})
            continue

        try:
            novelty = np.load(nov_path).astype(np.float64)
            if novelty.ndim != 1:
                raise ValueError(f"Expected 1D novelty, got shape {novelty.shape}")

            onsets = onset_events_from_novelty(novelty, fs)
            logger.info("%s: %d onset(s) from %d frame(s)", track_name, len(onsets), len(novelty))
            result = beat_track(onsets, config=config, beats=seed, stop=stop)

            if not result.found:
                skipped += 1
                items.append({
                    "file": nov_path.name,
                    "status": "skipped",
                    "detail": "No beats found",
                    "num_onsets": len(onsets),
                })
                continue

            beat_times = event_times(result.beats)
            if not dry_run:
                np.save(out_path, beat_times, allow_pickle=False)
                if save_unfilled:
                    np.save(
                        output_dir / f"{track_name}_beats_unfilled.npy",
                        event_times(result.unfilled),
                        allow_pickle=False,
                    )

            succeeded += 1
            items.append({
                "file": nov_path.name,
                "input_novelty": nov_path.name,
                "output": out_name,
                "status": "success",
                "num_onsets": len(onsets),
                "num_unfilled": len(result.unfilled),
                **_beat_stats(beat_times, len(novelty) / fs),
            })
        except Exception as e:
            logger.exception("Beat tracking failed for %s", nov_path)
            failed += 1
            failures.append({"item": str(nov_path), "reason": str(e)})
            items.append({"file": nov_path.name, "status": "failed", "detail": str(e)})

    return {
        "success": failed == 0,
        "total": len(paths),
        "succeeded": succeeded,
        "failed": failed,
        "skipped": skipped,
        "message": f"Processed {len(paths)} file(s). Succeeded: {succeeded}, failed: {failed}, skipped: {skipped}."
        + (" [DRY RUN]" if dry_run else ""),
        "items": items,
        "failures": failures,
    }
