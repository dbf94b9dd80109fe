"""
Orchestration module for depthfuse.

Provides the per-frame loop that loads views, maps pixels, blends voxels and
emits each fused frame.
"""

from .frame_sequencer import FrameSequencer, FrameState

__all__ = ["FrameSequencer", "FrameState"]
