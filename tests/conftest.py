"""Shared pytest fixtures and configuration for the test suite."""

import numpy as np
import pytest
from PIL import Image

from depthfuse.mapping.views import View
from depthfuse.types.types_IDL import FusionConfig
from depthfuse.utils.frame_files import view_image_path

# Distinct pure colors per view for the uniform-plane scenario.
# alpha=127 decodes to depth ~0.502, i.e. primary index 2 on a 4^3 grid.
VIEW_TINTS = {
    View.NX: (255, 0, 0),
    View.NY: (0, 255, 0),
    View.NZ: (0, 0, 255),
    View.PX: (255, 255, 0),
    View.PY: (0, 255, 255),
    View.PZ: (255, 0, 255),
}


def make_rgba(size: int, rgb, alpha: int) -> np.ndarray:
    """Uniform RGBA uint8 image."""
    image = np.empty((size, size, 4), dtype=np.uint8)
    image[..., :3] = rgb
    image[..., 3] = alpha
    return image


def write_view(base_dir, frame_index: int, view: View, pixels: np.ndarray, extension=".png"):
    path = view_image_path(base_dir, frame_index, view, extension)
    Image.fromarray(pixels).save(path)
    return path


@pytest.fixture
def write_frame_views(tmp_path):
    """Write six uniform views for a frame; returns the input directory."""
    input_dir = tmp_path / "views"

    def _write(frame_index=1, size=4, alpha=127, views=tuple(View)):
        input_dir.mkdir(exist_ok=True)
        for view in views:
            write_view(input_dir, frame_index, view, make_rgba(size, VIEW_TINTS[view], alpha))
        return input_dir

    return _write


@pytest.fixture
def fusion_config_factory(tmp_path):
    def _make(base_dir, **overrides):
        values = dict(
            start_frame=1,
            end_frame=1,
            base_dir=str(base_dir),
            texture_size=4,
            output_dir=str(tmp_path / "volumes"),
        )
        values.update(overrides)
        return FusionConfig(**values)

    return _make
