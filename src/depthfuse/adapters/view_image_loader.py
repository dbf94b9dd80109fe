"""Adapter for decoding view images with Pillow."""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from depthfuse.exceptions import DecodeFailureError, MissingViewFileError

logger = logging.getLogger(__name__)


class ViewImageLoader:
    """
    Adapter for loading one view image as normalized RGBA.

    Images without an alpha channel are converted to RGBA, which makes every
    pixel fully opaque (depth 0) and therefore rejected downstream.
    """

    def load(self, image_path: Union[str, Path]) -> np.ndarray:
        """
        Load and decode an image file.

        Args:
            image_path: Path to the image file

        Returns:
            Float32 array of shape (H, W, 4) with values in [0, 1]; rows are
            the slow (v) axis and columns the fast (u) axis

        Raises:
            MissingViewFileError: When the file does not exist
            DecodeFailureError: When the file cannot be decoded
        """
        image_path = Path(image_path)

        if not image_path.is_file():
            raise MissingViewFileError(f"View image does not exist: {image_path}", path=image_path)

        try:
            with Image.open(image_path) as img:
                img.load()
                if img.mode != "RGBA":
                    logger.debug(f"Converting {image_path.name} from {img.mode} to RGBA")
                    img = img.convert("RGBA")
                pixels = np.asarray(img, dtype=np.uint8)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise DecodeFailureError(
                f"Failed to decode view image {image_path}: {e}", path=image_path
            ) from e

        if pixels.shape[0] != pixels.shape[1]:
            logger.warning(
                f"View image {image_path.name} is not square: {pixels.shape[1]}x{pixels.shape[0]}"
            )

        return pixels.astype(np.float32) / 255.0
