"""
Tests for the pydantic configuration and outcome models.
"""

import pytest
from pydantic import ValidationError

from depthfuse.types.types_IDL import FrameProcessingOutcome, FusionConfig, ViewLoadOutcome


def make_config(**overrides):
    values = dict(start_frame=1, end_frame=25, base_dir="in", output_dir="out")
    values.update(overrides)
    return FusionConfig(**values)


class TestFusionConfig:
    def test_defaults(self):
        config = make_config()

        assert config.texture_size == 128
        assert config.output_prefix == "output_"
        assert config.depth_threshold == 0.05
        assert config.padding == 0
        assert config.accumulator_backend == "scatter"
        assert config.output_format == "npz"
        assert config.verbose is False

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"texture_size": 1}, "texture_size"),
            ({"depth_threshold": 0.5}, "depth_threshold"),
            ({"padding": -2}, "padding"),
            ({"accumulator_backend": "gpu"}, "Unknown accumulator backend"),
            ({"output_format": "vdb"}, "Unsupported output format"),
            ({"max_workers": 0}, "max_workers"),
            ({"start_frame": 5, "end_frame": 4}, "end_frame"),
            ({"start_frame": -1, "end_frame": 1}, "start_frame"),
            ({"start_frame": 0, "end_frame": -3}, "end_frame"),
        ],
    )
    def test_validation(self, overrides, message):
        with pytest.raises(ValidationError, match=message):
            make_config(**overrides)

    def test_single_frame_range(self):
        config = make_config(start_frame=3, end_frame=3)
        assert config.end_frame == 3


def test_missing_view_count():
    outcome = FrameProcessingOutcome(
        frame_index=1,
        status="SUCCESS_PARTIAL",
        view_outcomes=[
            ViewLoadOutcome(view="nx", status="SUCCESS"),
            ViewLoadOutcome(view="ny", status="MISSING"),
            ViewLoadOutcome(view="nz", status="DECODE_FAILURE"),
        ],
    )
    assert outcome.n_missing_views == 2
