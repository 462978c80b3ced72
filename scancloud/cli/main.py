from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
import typer
import yaml
from pydantic import ValidationError

from ..config import ScenarioConfig
from ..core.utils import configure_logging
from ..sdk import integrate_from_config

app = typer.Typer(help="scancloud: motion-compensated laser scan integration")

DEFAULT_SCENARIO = {
    "integrator": {
        "target_frame": "odom",
        "min_range_cutoff_offset": 1.0,
        "max_range_cutoff_offset": 0.95,
        "interpolate_scans": True,
        "tf_lookup_timeout_s": 0.0,
    },
    "frames": {"fixed": "odom", "base": "base_link", "sensor": "laser"},
    "trajectory": {
        "kind": "waypoints",
        "waypoints": [[-3.0, -1.0, 0.0], [3.0, -1.0, 0.0], [3.0, 1.5, 0.0]],
        "speed_mps": 1.5,
    },
    "mount": {"xyz": [0.2, 0.0, 0.3], "rpy_deg": [0.0, 0.0, 0.0]},
    "scanner": {"beam_count": 720, "scan_rate_hz": 10.0, "num_scans": 40, "range_max_m": 20.0},
    "room": {"width_m": 10.0, "depth_m": 6.0},
    "cloud": {"scans_per_cloud": 10},
    "seed": 7,
}


def _execute_run(
    config: Path,
    scans_per_cloud: Optional[int],
    num_scans: Optional[int],
    seed: Optional[int],
    log_level: str,
) -> None:
    try:
        configure_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
    try:
        result = integrate_from_config(config, scans_per_cloud=scans_per_cloud, num_scans=num_scans, seed=seed)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"Invalid configuration {config}:\n{exc}", err=True)
        raise typer.Exit(code=2) from exc

    for idx, cloud in enumerate(result.clouds):
        if len(cloud):
            lo = np.min(cloud.xyz, axis=0)
            hi = np.max(cloud.xyz, axis=0)
            extent = f"[{lo[0]:.2f}, {lo[1]:.2f}, {lo[2]:.2f}] .. [{hi[0]:.2f}, {hi[1]:.2f}, {hi[2]:.2f}]"
        else:
            extent = "empty"
        scans = len(np.unique(cloud.attrs["scan_index"])) if len(cloud) else 0
        typer.echo(f"cloud {idx}: {len(cloud)} points from {scans} scans, extent {extent}")

    stats = result.stats
    typer.echo(
        f"Integrated {stats['integrated']}/{stats['scans']} scans "
        f"({stats['rejected']} rejected) -> {stats['points']} points in {stats['clouds']} clouds"
    )


@app.command("run")
def run(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML scenario file."),
    scans_per_cloud: Optional[int] = typer.Option(None, "--scans-per-cloud", min=1, help="Close a cloud after this many integrated scans."),
    num_scans: Optional[int] = typer.Option(None, "--num-scans", min=0, help="Override the number of generated scans."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Override random seed."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Integrate a synthetic scan sequence described by a YAML scenario."""

    _execute_run(config, scans_per_cloud, num_scans, seed, log_level)


@app.command("init-config")
def init_config(
    output: Path = typer.Argument(..., help="Where to write the scenario YAML."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    """Write a ready-to-run example scenario."""

    out = output.resolve()
    if out.exists() and not force:
        raise typer.BadParameter(f"{out} already exists (use --force to overwrite)", param_hint="OUTPUT")
    # round-trip through the schema so the written file is always loadable
    ScenarioConfig.model_validate(DEFAULT_SCENARIO)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        yaml.safe_dump(DEFAULT_SCENARIO, f, sort_keys=False)
    typer.echo(f"Wrote example scenario to {out}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
