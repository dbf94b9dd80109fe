"""
FrameGrid implementation for per-frame volumetric state.

Holds the fused RGB field and alpha/weight field of one frame over the
cubic domain [0, N)^3. A FrameGrid is a value owned by the frame that built
it; nothing is shared between frames.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class FrameGrid:
    """
    Dense RGB and weight fields for one fused frame.

    Cells are addressed as ``[x, y, z]``. A cell with weight 0 was never
    written and its color is meaningless (stored as 0).
    """

    def __init__(self, grid_size: int, rgb: np.ndarray, alpha: np.ndarray):
        expected = (grid_size, grid_size, grid_size)
        if rgb.shape != expected + (3,):
            raise ValueError(f"RGB field must have shape {expected + (3,)}, got {rgb.shape}")
        if alpha.shape != expected:
            raise ValueError(f"Alpha field must have shape {expected}, got {alpha.shape}")

        self.grid_size = grid_size
        self.rgb = rgb
        self.alpha = alpha

    @classmethod
    def empty(cls, grid_size: int) -> "FrameGrid":
        """Create a grid with every cell unwritten."""
        return cls(
            grid_size,
            np.zeros((grid_size,) * 3 + (3,), dtype=np.float32),
            np.zeros((grid_size,) * 3, dtype=np.float32),
        )

    @classmethod
    def from_sparse(
        cls,
        grid_size: int,
        coordinates: np.ndarray,
        colors: np.ndarray,
        weights: np.ndarray,
    ) -> "FrameGrid":
        """
        Build a grid from reduced per-voxel values.

        Args:
            grid_size: Edge length N
            coordinates: Unique in-range voxel coordinates, shape (K, 3)
            colors: Mean color per voxel, shape (K, 3)
            weights: Accumulated weight per voxel, shape (K,)
        """
        grid = cls.empty(grid_size)
        if len(coordinates) == 0:
            return grid

        coordinates = np.asarray(coordinates, dtype=np.int64)
        if np.any(coordinates < 0) or np.any(coordinates >= grid_size):
            raise ValueError("Coordinates outside the grid cannot be stored")

        x, y, z = coordinates[:, 0], coordinates[:, 1], coordinates[:, 2]
        grid.rgb[x, y, z] = colors
        grid.alpha[x, y, z] = weights
        return grid

    @property
    def n_populated(self) -> int:
        return int(np.count_nonzero(self.alpha))

    def populated_coordinates(self) -> np.ndarray:
        """Coordinates of all cells with non-zero weight, shape (K, 3)."""
        return np.argwhere(self.alpha > 0)

    def get_cell(self, x: int, y: int, z: int) -> Tuple[Optional[Tuple[float, float, float]], float]:
        """Return (color, weight) for one cell; color is None for empty cells."""
        if not all(0 <= c < self.grid_size for c in (x, y, z)):
            raise IndexError(f"Voxel ({x}, {y}, {z}) outside grid of size {self.grid_size}")

        weight = float(self.alpha[x, y, z])
        if weight == 0:
            return None, 0.0
        r, g, b = (float(c) for c in self.rgb[x, y, z])
        return (r, g, b), weight

    def as_rgba(self) -> np.ndarray:
        """Interleave the two fields into an (N, N, N, 4) array."""
        return np.concatenate([self.rgb, self.alpha[..., None]], axis=-1)

    def get_grid_statistics(self) -> Dict[str, Any]:
        """Summary of occupancy and weights."""
        weights = self.alpha[self.alpha > 0]
        if weights.size:
            weight_stats = {
                "mean": float(np.mean(weights)),
                "min": float(np.min(weights)),
                "max": float(np.max(weights)),
            }
        else:
            weight_stats = {"mean": 0.0, "min": 0.0, "max": 0.0}

        return {
            "grid_size": self.grid_size,
            "total_voxels": self.grid_size ** 3,
            "populated_voxels": int(weights.size),
            "total_weight": float(np.sum(weights)),
            "weight_stats": weight_stats,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, FrameGrid):
            return NotImplemented
        return (
            self.grid_size == other.grid_size
            and np.array_equal(self.rgb, other.rgb)
            and np.array_equal(self.alpha, other.alpha)
        )

    def __repr__(self) -> str:
        return f"FrameGrid(grid_size={self.grid_size}, populated={self.n_populated})"
