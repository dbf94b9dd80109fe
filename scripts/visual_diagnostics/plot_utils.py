"""
Plotting utilities for visual diagnostics.

This module provides reusable plotting functions for visualizing fused
volumetric frames with matplotlib.
"""

import logging
import numpy as np
from pathlib import Path
from typing import Optional, Any

# Set matplotlib to non-interactive backend for automation
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)

AXIS_NAMES = ("X", "Y", "Z")


def ensure_output_dir(output_dir: str) -> Path:
    """
    Ensure output directory exists and return Path object.

    Args:
        output_dir: Output directory path

    Returns:
        Path object for the output directory
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    return output_path


def close_all_figures():
    """Close all matplotlib figures to free memory."""
    plt.close("all")


def _save(fig: plt.Figure, output_path: str, what: str):
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Saved {what} to {output_path}")


def plot_3d_grid_slice(
    grid_data_3d: np.ndarray,
    slice_dim_idx: int,
    slice_val_idx: int,
    title: str,
    output_path: str,
    cmap: str = "viridis",
    norm: Optional[Any] = None,
) -> plt.Figure:
    """
    Plot a 2D slice through a scalar 3D grid.

    Args:
        grid_data_3d: 3D numpy array indexed [x, y, z]
        slice_dim_idx: Dimension to slice (0=X, 1=Y, 2=Z)
        slice_val_idx: Index along slice dimension
        title: Plot title
        output_path: Path to save the plot
        cmap: Colormap name
        norm: Color normalization

    Returns:
        matplotlib Figure object
    """
    if slice_dim_idx not in (0, 1, 2):
        raise ValueError("slice_dim_idx must be 0, 1, or 2")

    slice_data = np.take(grid_data_3d, slice_val_idx, axis=slice_dim_idx)
    remaining = [name for i, name in enumerate(AXIS_NAMES) if i != slice_dim_idx]

    fig, ax = plt.subplots(figsize=(8, 6))
    # imshow puts the first array axis on the vertical
    im = ax.imshow(
        slice_data.T,
        cmap=cmap,
        norm=norm,
        origin="lower",
        interpolation="nearest",
    )
    plt.colorbar(im, ax=ax)
    ax.set_title(title)
    ax.set_xlabel(remaining[0])
    ax.set_ylabel(remaining[1])

    _save(fig, output_path, "3D grid slice plot")
    return fig


def color_projection(rgb: np.ndarray, alpha: np.ndarray, axis: int) -> np.ndarray:
    """
    Project the color field along an axis, taking the first populated voxel.

    Returns:
        RGB image of shape (N, N, 3); unpopulated rays are black
    """
    populated = alpha > 0
    first = np.argmax(populated, axis=axis)
    hit = np.any(populated, axis=axis)

    first_expanded = np.expand_dims(first, axis=axis)
    projected = np.take_along_axis(rgb, first_expanded[..., None], axis=axis)
    projected = np.squeeze(projected, axis=axis)
    projected[~hit] = 0.0
    return np.clip(projected, 0.0, 1.0)


def plot_color_projections(
    rgb: np.ndarray, alpha: np.ndarray, title: str, output_path: str
) -> plt.Figure:
    """Plot first-hit color projections along X, Y and Z side by side."""
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    for axis, ax in enumerate(axes):
        remaining = [name for i, name in enumerate(AXIS_NAMES) if i != axis]
        image = color_projection(rgb, alpha, axis)
        ax.imshow(np.transpose(image, (1, 0, 2)), origin="lower", interpolation="nearest")
        ax.set_title(f"Along {AXIS_NAMES[axis]}")
        ax.set_xlabel(remaining[0])
        ax.set_ylabel(remaining[1])
    fig.suptitle(title)

    _save(fig, output_path, "color projection plot")
    return fig


def plot_weight_histogram(alpha: np.ndarray, title: str, output_path: str) -> plt.Figure:
    """Histogram of per-voxel weights over populated voxels."""
    weights = alpha[alpha > 0]

    fig, ax = plt.subplots(figsize=(10, 6))
    if weights.size == 0:
        logger.warning("No populated voxels for weight histogram")
        ax.text(0.5, 0.5, "No populated voxels", ha="center", va="center")
    else:
        max_weight = int(np.max(weights))
        bins = np.arange(0.5, max_weight + 1.5, 1.0)
        ax.hist(weights, bins=bins, edgecolor="black")
        ax.set_xlabel("Observations per voxel")
        ax.set_ylabel("Voxel count")
        ax.grid(True, alpha=0.3)
    ax.set_title(title)

    _save(fig, output_path, "weight histogram")
    return fig


def setup_logging_for_plots():
    """Set up logging configuration for plotting scripts."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
