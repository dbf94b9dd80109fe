"""
CoordinateMapper implementation for per-view pixel mapping.

Turns decoded RGBA view images into voxel observations. Alpha encodes depth
(``depth = 1 - alpha``); pixels too close to either end of the depth range
are background or grazing samples and produce nothing.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..exceptions import DataValidationError
from .views import View, apply_axis_rule

logger = logging.getLogger(__name__)

DEFAULT_DEPTH_THRESHOLD = 0.05


@dataclass
class ObservationBatch:
    """Mapped observations from one view image."""

    coordinates: np.ndarray  # Shape (M, 3) int64, may fall outside the grid
    colors: np.ndarray       # Shape (M, 3) float64 in [0, 1]

    def __post_init__(self):
        if self.coordinates.shape[0] != self.colors.shape[0]:
            raise DataValidationError("Array length mismatch in observation batch")

    def __len__(self) -> int:
        return int(self.coordinates.shape[0])

    @classmethod
    def empty(cls) -> "ObservationBatch":
        return cls(
            coordinates=np.empty((0, 3), dtype=np.int64),
            colors=np.empty((0, 3), dtype=np.float64),
        )

    @classmethod
    def concatenate(cls, batches) -> "ObservationBatch":
        batches = [batch for batch in batches if len(batch) > 0]
        if not batches:
            return cls.empty()
        return cls(
            coordinates=np.concatenate([b.coordinates for b in batches], axis=0),
            colors=np.concatenate([b.colors for b in batches], axis=0),
        )


def depth_to_primary(depth, grid_size: int):
    """Quantize depth in [0, 1] to a grid index, rounding half to even."""
    return np.rint(np.asarray(depth, dtype=np.float64) * (grid_size - 1)).astype(np.int64)


def map_pixel(
    view: View,
    u: int,
    v: int,
    rgba: Tuple[float, float, float, float],
    grid_size: int,
    depth_threshold: float = DEFAULT_DEPTH_THRESHOLD,
) -> Optional[Tuple[Tuple[int, int, int], Tuple[float, float, float]]]:
    """
    Map a single pixel sample to a voxel coordinate and color.

    Args:
        view: View the pixel belongs to
        u: Pixel index along the image's fast axis (column)
        v: Pixel index along the image's slow axis (row)
        rgba: Decoded channels in [0, 1]
        grid_size: Edge length N of the grid
        depth_threshold: Fractional margin T at both ends of the depth range

    Returns:
        ((x, y, z), (r, g, b)) or None when the pixel is rejected
    """
    r, g, b, a = (float(c) for c in rgba)
    depth = 1.0 - a
    if depth < depth_threshold or depth > 1.0 - depth_threshold:
        return None

    primary = int(round(depth * (grid_size - 1)))
    coord = apply_axis_rule(
        view, np.array([primary]), np.array([u]), np.array([v]), grid_size
    )[0]
    return (int(coord[0]), int(coord[1]), int(coord[2])), (r, g, b)


class CoordinateMapper:
    """
    Vectorised pixel-to-voxel mapping for whole view images.

    Equivalent to calling map_pixel on every pixel of the image, in row-major
    order, and discarding rejected pixels.
    """

    def __init__(
        self,
        grid_size: int,
        depth_threshold: float = DEFAULT_DEPTH_THRESHOLD,
        padding: int = 0,
    ):
        if grid_size < 2:
            raise ValueError("grid_size must be at least 2")
        if not 0.0 <= depth_threshold < 0.5:
            raise ValueError("depth_threshold must lie in [0, 0.5)")
        if padding < 0:
            raise ValueError("padding cannot be negative")

        self.grid_size = grid_size
        self.depth_threshold = depth_threshold
        self.padding = padding

    def map_view_image(self, view: View, image: np.ndarray) -> ObservationBatch:
        """
        Map every qualifying pixel of one decoded view image.

        Args:
            view: View the image was captured from
            image: Decoded RGBA image, shape (H, W, 4), values in [0, 1]

        Returns:
            ObservationBatch with unfiltered (possibly out-of-range) coordinates
        """
        image = np.asarray(image)
        if image.ndim != 3 or image.shape[2] != 4:
            raise DataValidationError(
                f"Expected RGBA image of shape (H, W, 4), got {image.shape}"
            )

        height, width = image.shape[:2]
        vv, uu = np.meshgrid(np.arange(height), np.arange(width), indexing="ij")

        alpha = image[..., 3].astype(np.float64)
        depth = 1.0 - alpha
        keep = (depth >= self.depth_threshold) & (depth <= 1.0 - self.depth_threshold)

        if self.padding:
            p = self.padding
            keep &= (uu >= p) & (uu < width - p) & (vv >= p) & (vv < height - p)

        n_keep = int(np.count_nonzero(keep))
        logger.debug(
            f"View {view.suffix}: {n_keep}/{height * width} pixels pass depth threshold"
        )
        if n_keep == 0:
            return ObservationBatch.empty()

        primary = depth_to_primary(depth[keep], self.grid_size)
        coordinates = apply_axis_rule(
            view, primary, uu[keep], vv[keep], self.grid_size
        )
        colors = image[..., :3][keep].astype(np.float64)

        return ObservationBatch(coordinates=coordinates, colors=colors)
