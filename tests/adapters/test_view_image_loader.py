"""
Tests for ViewImageLoader.
"""

import numpy as np
import pytest
from PIL import Image

from depthfuse.adapters.view_image_loader import ViewImageLoader
from depthfuse.exceptions import DecodeFailureError, MissingViewFileError, ViewLoadError


class TestViewImageLoader:
    """Test ViewImageLoader functionality."""

    @pytest.fixture
    def loader(self):
        return ViewImageLoader()

    def test_load_rgba_png(self, loader, tmp_path):
        pixels = np.zeros((3, 5, 4), dtype=np.uint8)
        pixels[0, 4] = (255, 0, 51, 255)
        path = tmp_path / "0001nx.png"
        Image.fromarray(pixels).save(path)

        image = loader.load(path)

        assert image.shape == (3, 5, 4)
        assert image.dtype == np.float32
        # Row is the slow (v) axis, column the fast (u) axis
        np.testing.assert_allclose(image[0, 4], [1.0, 0.0, 0.2, 1.0], atol=1e-6)
        assert image.max() <= 1.0

    def test_rgb_image_becomes_opaque(self, loader, tmp_path):
        path = tmp_path / "0001px.png"
        Image.fromarray(np.full((4, 4, 3), 128, dtype=np.uint8)).save(path)

        image = loader.load(path)

        assert image.shape == (4, 4, 4)
        np.testing.assert_array_equal(image[..., 3], 1.0)

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(MissingViewFileError, match="does not exist") as excinfo:
            loader.load(tmp_path / "0001py.png")
        assert excinfo.value.path == tmp_path / "0001py.png"

    def test_undecodable_file(self, loader, tmp_path):
        path = tmp_path / "0001pz.png"
        path.write_bytes(b"not an image")

        with pytest.raises(DecodeFailureError, match="Failed to decode"):
            loader.load(path)

    def test_failures_share_base_class(self):
        assert issubclass(MissingViewFileError, ViewLoadError)
        assert issubclass(DecodeFailureError, ViewLoadError)
