#!/usr/bin/env python3
"""
Visual diagnostics for fused volumetric frames.

Loads a volume written by the fusion pipeline and generates:
1. Color projections along each grid axis
2. Weight (observation count) slices through the grid center
3. A histogram of per-voxel weights
4. A JSON summary of occupancy statistics
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

import numpy as np

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "src"))

from depthfuse.adapters.volume_writer import load_volume
from depthfuse.voxelization.frame_grid import FrameGrid

from plot_utils import (
    close_all_figures,
    ensure_output_dir,
    plot_3d_grid_slice,
    plot_color_projections,
    plot_weight_histogram,
    setup_logging_for_plots,
)

logger = logging.getLogger(__name__)


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Visual diagnostics for a fused volumetric frame",
    )
    parser.add_argument("--volume-file", type=str, required=True, help="Path to .npz or .h5 volume")
    parser.add_argument("--output-dir", type=str, required=True, help="Directory for plots and summary")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def generate_summary(grid: FrameGrid) -> Dict[str, Any]:
    """Occupancy statistics plus per-axis populated extents."""
    summary = grid.get_grid_statistics()
    coordinates = grid.populated_coordinates()
    if len(coordinates):
        summary["extent_min"] = [int(v) for v in coordinates.min(axis=0)]
        summary["extent_max"] = [int(v) for v in coordinates.max(axis=0)]
        summary["mean_color"] = [float(v) for v in grid.rgb[grid.alpha > 0].mean(axis=0)]
    else:
        summary["extent_min"] = None
        summary["extent_max"] = None
        summary["mean_color"] = None
    return summary


def generate_diagnostics(grid: FrameGrid, output_dir: Path, name: str) -> Dict[str, Any]:
    """Write all plots and the summary for one grid."""
    plot_color_projections(
        grid.rgb, grid.alpha, f"{name}: color projections", str(output_dir / f"{name}_projections.png")
    )
    center = grid.grid_size // 2
    for axis, axis_name in enumerate("xyz"):
        plot_3d_grid_slice(
            grid.alpha,
            axis,
            center,
            f"{name}: weight at {axis_name}={center}",
            str(output_dir / f"{name}_weight_slice_{axis_name}.png"),
        )
    plot_weight_histogram(grid.alpha, f"{name}: weight distribution", str(output_dir / f"{name}_weights.png"))

    summary = generate_summary(grid)
    with open(output_dir / f"{name}_summary.json", "w") as f:
        json.dump(summary, f, indent=2)
    close_all_figures()
    return summary


def main(argv=None) -> int:
    args = parse_arguments(argv)
    setup_logging_for_plots()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    volume_path = Path(args.volume_file)
    output_dir = ensure_output_dir(args.output_dir)

    grid = load_volume(volume_path)
    summary = generate_diagnostics(grid, output_dir, volume_path.stem)
    logger.info(
        f"{volume_path.name}: {summary['populated_voxels']} populated voxels, "
        f"max weight {summary['weight_stats']['max']:.0f}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
