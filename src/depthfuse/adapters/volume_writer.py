"""Adapter for persisting fused frames as NPZ or HDF5 volumes."""

import logging
from pathlib import Path
from typing import Union

import h5py
import numpy as np

from depthfuse.exceptions import ConfigurationError, FileSystemError
from depthfuse.voxelization.frame_grid import FrameGrid

logger = logging.getLogger(__name__)

_EXTENSIONS = {"npz": ".npz", "hdf5": ".h5"}


class VolumeWriter:
    """
    Sink that writes each fused frame to its own file.

    Files hold two co-registered fields named "RGB" (N, N, N, 3) and
    "Alpha" (N, N, N), indexed [x, y, z].
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        output_prefix: str = "output_",
        format: str = "npz",
    ):
        if format not in _EXTENSIONS:
            raise ConfigurationError(f"Unsupported format: {format}")

        self.output_dir = Path(output_dir)
        self.output_prefix = output_prefix
        self.format = format

    def output_path_for(self, frame_index: int) -> Path:
        return self.output_dir / f"{self.output_prefix}{frame_index:04d}{_EXTENSIONS[self.format]}"

    def write_frame(self, frame_index: int, grid: FrameGrid) -> Path:
        """
        Save one frame's fields.

        Args:
            frame_index: Index of the frame, used in the filename
            grid: Fused grid to persist

        Returns:
            Path of the written file
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Cannot create output directory {self.output_dir}: {e}") from e

        output_path = self.output_path_for(frame_index)

        if self.format == "npz":
            np.savez_compressed(
                output_path,
                RGB=grid.rgb,
                Alpha=grid.alpha,
                frame_index=np.int64(frame_index),
            )
        else:
            with h5py.File(output_path, "w") as h5_file:
                h5_file.attrs["frame_index"] = frame_index
                h5_file.attrs["grid_size"] = grid.grid_size
                h5_file.create_dataset(
                    "RGB", data=grid.rgb, chunks=True, compression="gzip", shuffle=True
                )
                h5_file.create_dataset(
                    "Alpha", data=grid.alpha, chunks=True, compression="gzip", shuffle=True
                )

        logger.info(f"Saved frame {frame_index} to {output_path}")
        return output_path

    def __call__(self, frame_index: int, grid: FrameGrid) -> Path:
        return self.write_frame(frame_index, grid)


def load_volume(path: Union[str, Path]) -> FrameGrid:
    """Read a file produced by VolumeWriter back into a FrameGrid."""
    path = Path(path)
    if not path.is_file():
        raise FileSystemError(f"Volume file does not exist: {path}")

    if path.suffix == ".npz":
        with np.load(path) as data:
            rgb = data["RGB"]
            alpha = data["Alpha"]
    elif path.suffix in (".h5", ".hdf5"):
        with h5py.File(path, "r") as h5_file:
            rgb = h5_file["RGB"][:]
            alpha = h5_file["Alpha"][:]
    else:
        raise ConfigurationError(f"Unsupported volume file: {path}")

    return FrameGrid(alpha.shape[0], rgb, alpha)
