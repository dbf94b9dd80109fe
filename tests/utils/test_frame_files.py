"""
Tests for view filename construction and frame discovery.
"""

import pytest

from depthfuse.exceptions import InvalidInputRootError
from depthfuse.mapping.views import View
from depthfuse.utils.frame_files import (
    discover_frames,
    frame_range,
    view_filename,
    view_image_path,
)


def test_view_filename_is_zero_padded():
    assert view_filename(7, View.NY) == "0007ny.png"
    assert view_filename(1234, View.PZ, ".tga") == "1234pz.tga"


def test_view_filename_rejects_negative_frame():
    with pytest.raises(ValueError, match="cannot be negative"):
        view_filename(-1, View.NX)


def test_view_image_path(tmp_path):
    assert view_image_path(tmp_path, 2, View.PX) == tmp_path / "0002px.png"


def test_discover_frames(tmp_path):
    for name in ["0001nx.png", "0001PY.png", "0003pz.png", "0002nx.jpg", "notes.txt", "thumb.png"]:
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "0004nx.png").mkdir()

    frames = discover_frames(tmp_path)

    assert frames == {1: {View.NX, View.PY}, 3: {View.PZ}}
    assert frame_range(frames) == [1, 3]


def test_discover_frames_past_four_digits(tmp_path):
    (tmp_path / view_filename(12345, View.NX)).write_bytes(b"")
    (tmp_path / "0012nx.png").write_bytes(b"")

    frames = discover_frames(tmp_path)

    assert frames == {12: {View.NX}, 12345: {View.NX}}
    assert frame_range(frames) == [12, 12345]


def test_discover_frames_missing_directory(tmp_path):
    with pytest.raises(InvalidInputRootError):
        discover_frames(tmp_path / "absent")
