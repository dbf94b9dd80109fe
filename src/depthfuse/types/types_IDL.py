"""
Python implementation of the pipeline's configuration and outcome types.

This module implements Pydantic models for type safety and validation
throughout the fusion pipeline.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class FusionConfig(BaseModel):
    """Configuration consumed by the FrameSequencer."""

    start_frame: int = Field(
        ge=0,
        description="First frame index to fuse (inclusive)"
    )
    end_frame: int = Field(
        ge=0,
        description="Last frame index to fuse (inclusive)"
    )
    base_dir: str = Field(
        description="Directory holding the per-view images, e.g. '0001nx.png'"
    )
    texture_size: int = Field(
        128,
        description="Edge length N of the cubic output grid"
    )
    output_dir: str = Field(
        description="Directory that receives one volume file per frame"
    )
    output_prefix: str = Field(
        "output_",
        description="Prefix for output volume filenames, followed by the 4-digit frame index"
    )
    verbose: bool = Field(
        False,
        description="If true, per-frame view counts are logged at INFO level"
    )
    image_extension: str = Field(
        ".png",
        description="File extension of the view images, including the dot"
    )
    depth_threshold: float = Field(
        0.05,
        description="Pixels with depth below T or above 1 - T are treated as background"
    )
    padding: int = Field(
        0,
        description="Number of border pixels skipped on every image edge"
    )
    accumulator_backend: str = Field(
        "scatter",
        description="Must be one of 'sequential' (fold per observation) or 'scatter' (sum then normalize)"
    )
    output_format: str = Field(
        "npz",
        description="Must be one of 'npz' or 'hdf5'"
    )
    max_workers: int = Field(
        1,
        description="Number of threads used to map the views of one frame; 1 maps sequentially"
    )

    @field_validator("texture_size")
    @classmethod
    def _check_texture_size(cls, value: int) -> int:
        if value < 2:
            raise ValueError("texture_size must be at least 2")
        return value

    @field_validator("depth_threshold")
    @classmethod
    def _check_depth_threshold(cls, value: float) -> float:
        if not 0.0 <= value < 0.5:
            raise ValueError("depth_threshold must lie in [0, 0.5)")
        return value

    @field_validator("padding")
    @classmethod
    def _check_padding(cls, value: int) -> int:
        if value < 0:
            raise ValueError("padding cannot be negative")
        return value

    @field_validator("accumulator_backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        if value not in ("sequential", "scatter"):
            raise ValueError(f"Unknown accumulator backend: {value}")
        return value

    @field_validator("output_format")
    @classmethod
    def _check_output_format(cls, value: str) -> str:
        if value not in ("npz", "hdf5"):
            raise ValueError(f"Unsupported output format: {value}")
        return value

    @field_validator("max_workers")
    @classmethod
    def _check_max_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_workers must be at least 1")
        return value

    @model_validator(mode="after")
    def _check_frame_range(self) -> "FusionConfig":
        if self.end_frame < self.start_frame:
            raise ValueError("end_frame must not be smaller than start_frame")
        return self


class ViewLoadOutcome(BaseModel):
    """Outcome of loading and mapping one view image of one frame."""

    view: str = Field(
        description="View suffix, one of 'nx', 'ny', 'nz', 'px', 'py', 'pz'"
    )
    status: str = Field(
        description="Must be one of 'SUCCESS', 'MISSING', 'DECODE_FAILURE'"
    )
    image_path: Optional[str] = Field(
        None,
        description="Path of the image that was requested"
    )
    message: Optional[str] = Field(
        None,
        description="Human-readable message about the outcome"
    )
    n_observations: int = Field(
        0,
        description="Number of pixels that passed the depth threshold"
    )


class FrameProcessingOutcome(BaseModel):
    """Outcome for fusing a single frame."""

    frame_index: int = Field(
        description="Index of the fused frame"
    )
    status: str = Field(
        description="Must be one of 'SUCCESS', 'SUCCESS_PARTIAL', 'EMPTY'"
    )
    view_outcomes: List[ViewLoadOutcome] = Field(
        default_factory=list,
        description="Per-view outcomes in fixed view order"
    )
    n_observations: int = Field(
        0,
        description="Total observations presented to the accumulator"
    )
    n_out_of_range: int = Field(
        0,
        description="Observations excluded because they fell outside the grid"
    )
    n_populated_voxels: int = Field(
        0,
        description="Number of voxels with non-zero weight"
    )
    output_path: Optional[str] = Field(
        None,
        description="Path of the written volume file, if a sink produced one"
    )

    @property
    def n_missing_views(self) -> int:
        return sum(1 for outcome in self.view_outcomes if outcome.status != "SUCCESS")
