"""
Tests for VoxelAccumulator and the combine() blending rule.
"""

import itertools

import numpy as np
import pytest

from depthfuse.exceptions import DataValidationError
from depthfuse.mapping.coordinate_mapper import ObservationBatch
from depthfuse.voxelization.voxel_accumulator import (
    GridCell,
    VoxelAccumulator,
    combine,
    reduce_observations,
)


class TestCombine:
    """Test the pure per-voxel blending rule."""

    def test_identity_on_single_observation(self):
        cell = combine(GridCell(), (0.1, 0.2, 0.3))

        assert cell.color == pytest.approx((0.1, 0.2, 0.3))
        assert cell.weight == 1

    def test_running_mean(self):
        cell = reduce_observations([(1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)])

        assert cell.weight == 3
        assert cell.color == pytest.approx((1 / 3, 1 / 3, 1 / 3))

    def test_empty_cell(self):
        cell = reduce_observations([])
        assert cell.is_empty
        assert cell.color is None

    def test_order_independence(self):
        rng = np.random.default_rng(11)
        colors = [tuple(c) for c in rng.random((5, 3))]
        reference = reduce_observations(colors)

        for permutation in itertools.permutations(colors):
            cell = reduce_observations(permutation)
            assert cell.weight == reference.weight
            assert cell.color == pytest.approx(reference.color, abs=1e-6)

    def test_weight_equals_count_and_color_equals_mean(self):
        rng = np.random.default_rng(5)
        colors = rng.random((17, 3))

        cell = reduce_observations(map(tuple, colors))

        assert cell.weight == 17
        assert cell.color == pytest.approx(tuple(colors.mean(axis=0)), abs=1e-9)


class TestVoxelAccumulator:
    """Test VoxelAccumulator functionality."""

    @pytest.fixture
    def sample_batch(self):
        """Observations with duplicates and out-of-range coordinates."""
        rng = np.random.default_rng(42)
        coordinates = rng.integers(-1, 5, size=(200, 3))
        colors = rng.random((200, 3))
        return ObservationBatch(coordinates=coordinates, colors=colors)

    def test_initialization(self):
        accumulator = VoxelAccumulator(4, backend="sequential")

        assert accumulator.backend == "sequential"
        assert accumulator.n_total_observations == 0
        assert accumulator.n_out_of_range == 0

    def test_invalid_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            VoxelAccumulator(4, backend="invalid")

    def test_out_of_range_excluded(self, sample_batch):
        accumulator = VoxelAccumulator(4)

        n_accepted = accumulator.add_observations(sample_batch, source="nx")

        in_range = np.all((sample_batch.coordinates >= 0) & (sample_batch.coordinates < 4), axis=1)
        assert n_accepted == int(in_range.sum())
        assert accumulator.n_out_of_range == len(sample_batch) - n_accepted

        grid = accumulator.finalize()
        populated = {tuple(c) for c in grid.populated_coordinates()}
        expected = {tuple(c) for c in sample_batch.coordinates[in_range]}
        assert populated == expected

    def test_array_mismatch(self):
        accumulator = VoxelAccumulator(4)
        batch = ObservationBatch(np.zeros((2, 3), dtype=np.int64), np.zeros((2, 3)))
        batch.colors = np.zeros((3, 3))

        with pytest.raises(DataValidationError, match="Array length mismatch"):
            accumulator.add_observations(batch)

    def test_empty_observations(self):
        accumulator = VoxelAccumulator(4)

        assert accumulator.add_observations(ObservationBatch.empty()) == 0
        grid = accumulator.finalize()
        assert grid.n_populated == 0

    @pytest.mark.parametrize("backend", ["sequential", "scatter"])
    def test_weights_count_observations(self, backend, sample_batch):
        accumulator = VoxelAccumulator(4, backend=backend)
        accumulator.add_observations(sample_batch)
        grid = accumulator.finalize()

        for coord in grid.populated_coordinates():
            mask = np.all(sample_batch.coordinates == coord, axis=1)
            color, weight = grid.get_cell(*coord)
            assert weight == mask.sum()
            np.testing.assert_allclose(color, sample_batch.colors[mask].mean(axis=0), atol=1e-6)

    def test_backends_agree(self, sample_batch):
        grids = []
        for backend in ("sequential", "scatter"):
            accumulator = VoxelAccumulator(4, backend=backend)
            accumulator.add_observations(sample_batch)
            grids.append(accumulator.finalize())

        np.testing.assert_array_equal(grids[0].alpha, grids[1].alpha)
        np.testing.assert_allclose(grids[0].rgb, grids[1].rgb, atol=1e-6)

    @pytest.mark.parametrize("backend", ["sequential", "scatter"])
    def test_bit_for_bit_order_independence(self, backend, sample_batch):
        rng = np.random.default_rng(0)
        reference = VoxelAccumulator(4, backend=backend)
        reference.add_observations(sample_batch)
        reference_grid = reference.finalize()

        for _ in range(5):
            order = rng.permutation(len(sample_batch))
            split = rng.integers(1, len(sample_batch) - 1)
            shuffled = VoxelAccumulator(4, backend=backend)
            # Present in two chunks, as two views would be
            shuffled.add_observations(
                ObservationBatch(sample_batch.coordinates[order[:split]], sample_batch.colors[order[:split]])
            )
            shuffled.add_observations(
                ObservationBatch(sample_batch.coordinates[order[split:]], sample_batch.colors[order[split:]])
            )
            assert shuffled.finalize() == reference_grid

    def test_accumulation_statistics(self, sample_batch):
        accumulator = VoxelAccumulator(4)
        n_accepted = accumulator.add_observations(sample_batch, source="px")

        stats = accumulator.get_accumulation_statistics()

        required_keys = [
            "total_observations",
            "out_of_range_observations",
            "unique_voxels",
            "observations_per_voxel_stats",
            "source_distribution",
            "backend",
        ]
        for key in required_keys:
            assert key in stats

        assert stats["total_observations"] == n_accepted
        assert stats["source_distribution"] == {"px": n_accepted}
        assert stats["backend"] == "scatter"
        assert stats["unique_voxels"] == accumulator.finalize().n_populated
