"""
FrameSequencer implementation for managing the per-frame fusion workflow.

For each frame index in the configured range:
- load the six view images (missing or broken views are skipped)
- map every pixel of every loaded view to a voxel observation
- blend observations into a fresh FrameGrid
- hand the grid to the sink and release it
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import numpy as np

from ..types.types_IDL import FusionConfig, FrameProcessingOutcome, ViewLoadOutcome
from ..adapters.view_image_loader import ViewImageLoader
from ..adapters.volume_writer import VolumeWriter
from ..mapping.coordinate_mapper import CoordinateMapper, ObservationBatch
from ..mapping.views import VIEW_ORDER, View
from ..voxelization.frame_grid import FrameGrid
from ..voxelization.voxel_accumulator import VoxelAccumulator
from ..utils.frame_files import view_image_path
from ..exceptions import (
    DecodeFailureError,
    InvalidInputRootError,
    MissingViewFileError,
)

logger = logging.getLogger(__name__)

FrameSink = Callable[[int, FrameGrid], Optional[Path]]


class FrameState(Enum):
    IDLE = "idle"
    LOADING_VIEWS = "loading_views"
    MAPPING = "mapping"
    ACCUMULATING = "accumulating"
    EMITTING = "emitting"
    ABORTED = "aborted"


class FrameSequencer:
    """
    Orchestrates fusion of a range of frames.

    No state is carried from one frame to the next: every frame gets its own
    VoxelAccumulator and FrameGrid, and the grid is released after emission.
    """

    SUMMARY_LOG_NAME = "fusion_summary.log"

    def __init__(
        self,
        config: FusionConfig,
        loader: Optional[ViewImageLoader] = None,
        sink: Optional[FrameSink] = None,
    ):
        """
        Initialize the sequencer.

        Args:
            config: Fusion configuration
            loader: Image decoder; defaults to ViewImageLoader
            sink: Callable receiving (frame_index, grid) and optionally
                returning the written path; defaults to a VolumeWriter
        """
        self.config = config
        self.loader = loader or ViewImageLoader()
        self.sink = sink or VolumeWriter(
            config.output_dir, config.output_prefix, format=config.output_format
        )
        self.mapper = CoordinateMapper(
            config.texture_size,
            depth_threshold=config.depth_threshold,
            padding=config.padding,
        )
        self.state = FrameState.IDLE
        self._report_level = logging.INFO if config.verbose else logging.DEBUG

    def run(self) -> List[FrameProcessingOutcome]:
        """
        Fuse every frame from start_frame to end_frame inclusive.

        Returns:
            One FrameProcessingOutcome per frame

        Raises:
            InvalidInputRootError: If the base directory does not exist; no
                frame is processed and nothing is written
        """
        self._validate_inputs()

        output_path = Path(self.config.output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        summary_log_path = output_path / self.SUMMARY_LOG_NAME
        self._initialize_summary_log(summary_log_path)

        n_frames = self.config.end_frame - self.config.start_frame + 1
        logger.info(
            f"Fusing {n_frames} frames ({self.config.start_frame}-{self.config.end_frame}) "
            f"from {self.config.base_dir} at N={self.config.texture_size}"
        )

        outcomes = []
        for frame_index in range(self.config.start_frame, self.config.end_frame + 1):
            grid, outcome = self.process_frame(frame_index)

            self.state = FrameState.EMITTING
            written = self.sink(frame_index, grid)
            if written is not None:
                outcome.output_path = str(written)
            del grid
            self.state = FrameState.IDLE

            outcomes.append(outcome)
            self._update_summary_log(summary_log_path, outcome)

        self._finalize_summary_log(summary_log_path, outcomes)
        logger.info(f"Fusion complete: {len(outcomes)} frames processed")
        return outcomes

    def _validate_inputs(self):
        base_dir = Path(self.config.base_dir)
        if not base_dir.is_dir():
            self.state = FrameState.ABORTED
            logger.error(f"Input directory does not exist: {base_dir}")
            raise InvalidInputRootError(f"Input directory does not exist: {base_dir}")

    def process_frame(self, frame_index: int) -> Tuple[FrameGrid, FrameProcessingOutcome]:
        """
        Fuse one frame without emitting it.

        Args:
            frame_index: Frame to fuse

        Returns:
            The fused FrameGrid and its outcome
        """
        self.state = FrameState.LOADING_VIEWS
        loaded, view_outcomes = self._load_views(frame_index)

        self.state = FrameState.MAPPING
        batches = self._map_views(loaded)

        self.state = FrameState.ACCUMULATING
        accumulator = VoxelAccumulator(
            self.config.texture_size, backend=self.config.accumulator_backend
        )
        outcomes_by_view = {outcome.view: outcome for outcome in view_outcomes}
        n_observations = 0
        for view, batch in batches:
            outcomes_by_view[view.suffix].n_observations = len(batch)
            n_observations += len(batch)
            accumulator.add_observations(batch, source=view.suffix)
        grid = accumulator.finalize()

        n_loaded = len(loaded)
        if grid.n_populated == 0:
            status = "EMPTY"
        elif n_loaded < len(VIEW_ORDER):
            status = "SUCCESS_PARTIAL"
        else:
            status = "SUCCESS"

        outcome = FrameProcessingOutcome(
            frame_index=frame_index,
            status=status,
            view_outcomes=view_outcomes,
            n_observations=n_observations,
            n_out_of_range=accumulator.n_out_of_range,
            n_populated_voxels=grid.n_populated,
        )

        logger.log(
            self._report_level,
            f"Frame {frame_index:04d}: {n_loaded}/{len(VIEW_ORDER)} views loaded, "
            f"{outcome.n_missing_views} missing, {grid.n_populated} voxels populated",
        )
        return grid, outcome

    def _load_views(self, frame_index: int):
        """Load all views of a frame, recording failures instead of raising."""
        loaded: List[Tuple[View, np.ndarray]] = []
        view_outcomes: List[ViewLoadOutcome] = []

        for view in VIEW_ORDER:
            path = view_image_path(
                self.config.base_dir, frame_index, view, self.config.image_extension
            )
            try:
                image = self.loader.load(path)
            except MissingViewFileError as e:
                logger.log(self._report_level, f"Skipping view {view.suffix} of frame {frame_index}: {e}")
                view_outcomes.append(
                    ViewLoadOutcome(view=view.suffix, status="MISSING", image_path=str(path), message=str(e))
                )
                continue
            except DecodeFailureError as e:
                logger.warning(f"Skipping view {view.suffix} of frame {frame_index}: {e}")
                view_outcomes.append(
                    ViewLoadOutcome(view=view.suffix, status="DECODE_FAILURE", image_path=str(path), message=str(e))
                )
                continue

            loaded.append((view, image))
            view_outcomes.append(ViewLoadOutcome(view=view.suffix, status="SUCCESS", image_path=str(path)))

        return loaded, view_outcomes

    def _map_views(self, loaded: List[Tuple[View, np.ndarray]]) -> List[Tuple[View, ObservationBatch]]:
        """Map loaded views, in parallel when max_workers > 1."""
        if self.config.max_workers > 1 and len(loaded) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                batches = list(
                    executor.map(lambda item: self.mapper.map_view_image(*item), loaded)
                )
        else:
            batches = [self.mapper.map_view_image(view, image) for view, image in loaded]

        return [(view, batch) for (view, _), batch in zip(loaded, batches)]

    def _initialize_summary_log(self, log_path: Path):
        with open(log_path, 'w') as f:
            f.write("depthfuse Fusion Summary\n")
            f.write("=" * 80 + "\n\n")

    def _update_summary_log(self, log_path: Path, outcome: FrameProcessingOutcome):
        entry = (
            f"{outcome.frame_index:04d}: {outcome.status} "
            f"(views missing: {outcome.n_missing_views}, voxels: {outcome.n_populated_voxels})\n"
        )
        with open(log_path, 'a') as f:
            f.write(entry)

    def _finalize_summary_log(self, log_path: Path, outcomes: List[FrameProcessingOutcome]):
        with open(log_path, 'a') as f:
            f.write("\n" + "=" * 80 + "\n")
            f.write("Processing Complete\n")
            f.write(f"Total frames: {len(outcomes)}\n")
            f.write(f"Frames with missing views: {sum(1 for o in outcomes if o.n_missing_views)}\n")
