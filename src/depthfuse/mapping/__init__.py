"""
Mapping module: per-view pixel to voxel coordinate mapping.

This module provides:
- View: the six cardinal views and their axis rules
- map_pixel: scalar mapping of one pixel sample
- CoordinateMapper: vectorised mapping of a whole view image
- ObservationBatch: mapped coordinates and colors for one view
"""

from .views import View, VIEW_ORDER, VIEW_AXIS_RULES, AxisRule
from .coordinate_mapper import (
    CoordinateMapper,
    ObservationBatch,
    map_pixel,
    DEFAULT_DEPTH_THRESHOLD,
)

__all__ = [
    "View",
    "VIEW_ORDER",
    "VIEW_AXIS_RULES",
    "AxisRule",
    "CoordinateMapper",
    "ObservationBatch",
    "map_pixel",
    "DEFAULT_DEPTH_THRESHOLD",
]
