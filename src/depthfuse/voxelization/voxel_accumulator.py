"""
VoxelAccumulator implementation for per-frame voxel blending.

Blends mapped observations that land on the same voxel into a running mean
color and an observation count.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np

from ..exceptions import DataValidationError
from ..mapping.coordinate_mapper import ObservationBatch
from .frame_grid import FrameGrid

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]


@dataclass(frozen=True)
class GridCell:
    """Accumulated state of one voxel."""

    color: Optional[Color] = None
    weight: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.weight == 0


def combine(existing: GridCell, color: Color, weight: float = 1.0) -> GridCell:
    """
    Fold one observation into a cell.

    The result color is the weight-averaged mean of the existing color and
    the incoming one, so folding any permutation of a set of observations
    yields the same cell up to floating point rounding.
    """
    if existing.weight == 0:
        return GridCell(color=tuple(float(c) for c in color), weight=float(weight))

    total_weight = existing.weight + weight
    blended = tuple(
        (e * existing.weight + c * weight) / total_weight
        for e, c in zip(existing.color, color)
    )
    return GridCell(color=blended, weight=total_weight)


def reduce_observations(colors: Iterable[Color]) -> GridCell:
    """Fold observations of unit weight into an empty cell."""
    cell = GridCell()
    for color in colors:
        cell = combine(cell, color)
    return cell


def canonical_order(coordinates: np.ndarray, colors: np.ndarray, grid_size: int) -> np.ndarray:
    """
    Permutation that sorts observations by voxel, then by color.

    Reducing in this order makes the result independent of the order in which
    views or pixels were presented.
    """
    linear = _linear_index(coordinates, grid_size)
    return np.lexsort((colors[:, 2], colors[:, 1], colors[:, 0], linear))


def _linear_index(coordinates: np.ndarray, grid_size: int) -> np.ndarray:
    return (coordinates[:, 0] * grid_size + coordinates[:, 1]) * grid_size + coordinates[:, 2]


class VoxelAccumulator:
    """
    Collects one frame's observations and reduces them into a FrameGrid.

    Supports two reduction backends:
    - "sequential": folds observations one at a time with combine()
    - "scatter": sums colors per voxel and normalizes once at the end
    Both reduce in canonical order, so repeated runs are bit-for-bit stable.
    """

    def __init__(self, grid_size: int, backend: str = "scatter"):
        """
        Initialize VoxelAccumulator.

        Args:
            grid_size: Edge length N of the cubic grid
            backend: "sequential" or "scatter"
        """
        if grid_size < 2:
            raise ValueError("grid_size must be at least 2")
        if backend not in ("sequential", "scatter"):
            raise ValueError(f"Unknown backend: {backend}")

        self.grid_size = grid_size
        self.backend = backend

        # Statistics
        self.n_total_observations = 0
        self.n_out_of_range = 0
        self.n_unique_voxels = 0
        self._source_observation_counts = defaultdict(int)

        self._coordinate_chunks = []
        self._color_chunks = []

        logger.debug(f"VoxelAccumulator initialized with {backend} backend")

    def add_observations(self, batch: ObservationBatch, source: str = "unknown") -> int:
        """
        Add a batch of observations, dropping coordinates outside the grid.

        Args:
            batch: Mapped observations, possibly with out-of-range coordinates
            source: Label used for statistics, typically the view suffix

        Returns:
            Number of observations accepted
        """
        coordinates = np.asarray(batch.coordinates)
        colors = np.asarray(batch.colors, dtype=np.float64)
        if coordinates.ndim != 2 or coordinates.shape[1] != 3:
            raise DataValidationError(f"Coordinates must have shape (M, 3), got {coordinates.shape}")
        if colors.shape != coordinates.shape:
            raise DataValidationError("Array length mismatch in input data")

        n_input = len(coordinates)
        if n_input == 0:
            return 0

        in_range = np.all((coordinates >= 0) & (coordinates < self.grid_size), axis=1)
        n_valid = int(np.count_nonzero(in_range))
        self.n_out_of_range += n_input - n_valid

        if n_valid:
            self._coordinate_chunks.append(coordinates[in_range].astype(np.int64))
            self._color_chunks.append(colors[in_range])

        self.n_total_observations += n_valid
        self._source_observation_counts[source] += n_valid

        logger.debug(f"Accepted {n_valid}/{n_input} observations from {source}")
        return n_valid

    def _collect(self) -> Tuple[np.ndarray, np.ndarray]:
        if not self._coordinate_chunks:
            return np.empty((0, 3), dtype=np.int64), np.empty((0, 3), dtype=np.float64)
        coordinates = np.concatenate(self._coordinate_chunks, axis=0)
        colors = np.concatenate(self._color_chunks, axis=0)
        order = canonical_order(coordinates, colors, self.grid_size)
        return coordinates[order], colors[order]

    def _reduce_sequential(self, coordinates: np.ndarray, colors: np.ndarray):
        cells: Dict[Tuple[int, int, int], GridCell] = {}
        for coord, color in zip(map(tuple, coordinates.tolist()), colors.tolist()):
            cells[coord] = combine(cells.get(coord, GridCell()), color)

        keys = np.array(list(cells.keys()), dtype=np.int64).reshape(-1, 3)
        mean_colors = np.array([cell.color for cell in cells.values()], dtype=np.float64).reshape(-1, 3)
        weights = np.array([cell.weight for cell in cells.values()], dtype=np.float64)
        return keys, mean_colors, weights

    def _reduce_scatter(self, coordinates: np.ndarray, colors: np.ndarray):
        linear = _linear_index(coordinates, self.grid_size)
        # Input is sorted by voxel, so each voxel is one contiguous run
        unique_linear, starts, counts = np.unique(linear, return_index=True, return_counts=True)
        color_sums = np.add.reduceat(colors, starts, axis=0)
        weights = counts.astype(np.float64)
        mean_colors = color_sums / weights[:, None]

        keys = np.stack(np.unravel_index(unique_linear, (self.grid_size,) * 3), axis=-1)
        return keys.astype(np.int64), mean_colors, weights

    def finalize(self) -> FrameGrid:
        """Reduce all accepted observations into a new FrameGrid."""
        coordinates, colors = self._collect()

        if len(coordinates) == 0:
            grid = FrameGrid.empty(self.grid_size)
        else:
            if self.backend == "sequential":
                keys, mean_colors, weights = self._reduce_sequential(coordinates, colors)
            else:
                keys, mean_colors, weights = self._reduce_scatter(coordinates, colors)
            grid = FrameGrid.from_sparse(self.grid_size, keys, mean_colors, weights)

        self.n_unique_voxels = grid.n_populated
        logger.debug(
            f"VoxelAccumulator finalized: {self.n_total_observations} observations "
            f"in {self.n_unique_voxels} voxels ({self.n_out_of_range} out of range)"
        )
        return grid

    def get_accumulation_statistics(self) -> Dict[str, Any]:
        """Get statistics about accumulated data."""
        if self._coordinate_chunks:
            coordinates = np.concatenate(self._coordinate_chunks, axis=0)
            _, counts = np.unique(_linear_index(coordinates, self.grid_size), return_counts=True)
            obs_stats = {
                "mean": float(np.mean(counts)),
                "std": float(np.std(counts)),
                "min": int(np.min(counts)),
                "max": int(np.max(counts)),
            }
            unique_voxels = len(counts)
        else:
            obs_stats = {"mean": 0, "std": 0, "min": 0, "max": 0}
            unique_voxels = 0

        return {
            "total_observations": self.n_total_observations,
            "out_of_range_observations": self.n_out_of_range,
            "unique_voxels": unique_voxels,
            "observations_per_voxel_stats": obs_stats,
            "source_distribution": dict(self._source_observation_counts),
            "backend": self.backend,
        }
