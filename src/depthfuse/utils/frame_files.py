"""
Filename conventions for per-view input images.

Images are named ``<frame:04d><suffix><extension>``, e.g. ``0007py.png``;
frame indices past 9999 simply use more digits.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Set, Union

from depthfuse.exceptions import InvalidInputRootError
from depthfuse.mapping.views import View

logger = logging.getLogger(__name__)

_VIEW_FILE_PATTERN = re.compile(r"^(\d{4,})(nx|ny|nz|px|py|pz)$", re.IGNORECASE)


def view_filename(frame_index: int, view: View, image_extension: str = ".png") -> str:
    """Construct the filename of one view image."""
    if frame_index < 0:
        raise ValueError(f"Frame index cannot be negative: {frame_index}")
    return f"{frame_index:04d}{view.suffix}{image_extension}"


def view_image_path(
    base_dir: Union[str, Path], frame_index: int, view: View, image_extension: str = ".png"
) -> Path:
    return Path(base_dir) / view_filename(frame_index, view, image_extension)


def discover_frames(
    base_dir: Union[str, Path], image_extension: str = ".png"
) -> Dict[int, Set[View]]:
    """
    Scan a directory for view images.

    Args:
        base_dir: Directory holding the images
        image_extension: Only files with this extension are considered

    Returns:
        Mapping of frame index to the set of views present for it
    """
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        raise InvalidInputRootError(f"Input directory does not exist: {base_dir}")

    frames: Dict[int, Set[View]] = {}
    for path in sorted(base_dir.iterdir()):
        if not path.is_file() or path.suffix.lower() != image_extension.lower():
            continue
        match = _VIEW_FILE_PATTERN.match(path.stem)
        if match is None:
            logger.debug(f"Ignoring file with unrecognized name: {path.name}")
            continue
        frame_index = int(match.group(1))
        frames.setdefault(frame_index, set()).add(View.from_suffix(match.group(2)))

    logger.debug(f"Discovered {len(frames)} frames in {base_dir}")
    return frames


def frame_range(frames: Dict[int, Set[View]]) -> List[int]:
    """Sorted frame indices from a discover_frames() result."""
    return sorted(frames)
