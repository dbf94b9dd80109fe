"""
depthfuse: fuse six orthographic depth-color views into volumetric frames.

Each frame's views are mapped pixel by pixel into a cubic voxel grid and
blended into an RGB field plus an alpha/weight field.
"""

__version__ = "0.1.0"
