"""
Voxelization module for per-frame fusion.

This module provides:
- GridCell / combine: the pure per-voxel blending rule
- VoxelAccumulator: reduce a frame's observations with a chosen backend
- FrameGrid: the fused RGB and alpha/weight fields of one frame
"""

from .frame_grid import FrameGrid
from .voxel_accumulator import (
    GridCell,
    VoxelAccumulator,
    combine,
    reduce_observations,
)

__all__ = [
    "FrameGrid",
    "GridCell",
    "VoxelAccumulator",
    "combine",
    "reduce_observations",
]
