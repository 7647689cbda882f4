"""Unit tests for shape validation, shape buffers and scene-level scanning.

Tests cover:
- ShapeSet conversion from tuples and arrays
- Skipped shapes reported as GeometryIssues
- Whole-call validation errors
- ShapeBuffers loading and growth
- Closest-hit selection across many segments and circles
"""

import math

import numpy as np
import pytest


class TestShapeSet:
    """Tests for ShapeSet.from_sequences."""

    def test_from_tuples(self):
        from src.caster.scene.shapes import ShapeSet

        shapes = ShapeSet.from_sequences(
            segments=[(0.0, 0.0, 1.0, 1.0), (2.0, 2.0, 3.0, 3.0)],
            circles=[(5.0, 5.0, 1.0)],
        )
        assert shapes.segment_count == 2
        assert shapes.circle_count == 1
        assert shapes.segments.dtype == np.float32
        assert shapes.circles.dtype == np.float32
        assert shapes.issues == []

    def test_from_arrays(self):
        from src.caster.scene.shapes import ShapeSet

        segments = np.array([[0.0, 0.0, 1.0, 0.0]])
        circles = np.array([[1.0, 1.0, 0.5], [2.0, 2.0, 0.5]])
        shapes = ShapeSet.from_sequences(segments, circles)
        assert shapes.segment_count == 1
        assert shapes.circle_count == 2

    def test_empty_and_none(self):
        from src.caster.scene.shapes import ShapeSet

        shapes = ShapeSet.from_sequences([], None)
        assert shapes.segment_count == 0
        assert shapes.circle_count == 0
        assert shapes.segments.shape == (0, 4)
        assert shapes.circles.shape == (0, 3)

    def test_wrong_segment_columns_raises(self):
        from src.caster.errors import InvalidInputError
        from src.caster.scene.shapes import ShapeSet

        with pytest.raises(InvalidInputError, match="segments"):
            ShapeSet.from_sequences([(0.0, 0.0, 1.0)], None)

    def test_wrong_circle_columns_raises(self):
        from src.caster.errors import InvalidInputError
        from src.caster.scene.shapes import ShapeSet

        with pytest.raises(InvalidInputError, match="circles"):
            ShapeSet.from_sequences(None, [(0.0, 0.0, 1.0, 2.0)])

    def test_non_numeric_raises(self):
        from src.caster.errors import InvalidInputError
        from src.caster.scene.shapes import ShapeSet

        with pytest.raises(InvalidInputError):
            ShapeSet.from_sequences([("a", 0.0, 1.0, 1.0)], None)

    def test_negative_radius_raises(self):
        from src.caster.errors import InvalidInputError
        from src.caster.scene.shapes import ShapeSet

        with pytest.raises(InvalidInputError, match="negative radius"):
            ShapeSet.from_sequences(None, [(0.0, 0.0, 1.0), (1.0, 1.0, -0.5)])

    def test_invalid_input_is_value_error(self):
        from src.caster.scene.shapes import ShapeSet

        with pytest.raises(ValueError):
            ShapeSet.from_sequences(None, [(0.0, 0.0, -1.0)])

    def test_non_finite_segment_is_skipped(self):
        from src.caster.scene.shapes import IssueKind, ShapeSet

        shapes = ShapeSet.from_sequences(
            segments=[(0.0, 0.0, 1.0, 1.0), (math.nan, 0.0, 1.0, 1.0), (0.0, math.inf, 1.0, 1.0)],
        )
        assert shapes.segment_count == 1
        assert [issue.index for issue in shapes.issues] == [1, 2]
        assert all(issue.kind == IssueKind.NON_FINITE for issue in shapes.issues)
        assert all(issue.shape == "segment" for issue in shapes.issues)

    def test_zero_length_segment_is_skipped(self):
        from src.caster.scene.shapes import IssueKind, ShapeSet

        shapes = ShapeSet.from_sequences(segments=[(1.0, 1.0, 1.0, 1.0), (0.0, 0.0, 1.0, 0.0)])
        assert shapes.segment_count == 1
        assert len(shapes.issues) == 1
        assert shapes.issues[0].kind == IssueKind.DEGENERATE_SEGMENT
        assert shapes.issues[0].index == 0

    def test_non_finite_circle_is_skipped(self):
        from src.caster.scene.shapes import IssueKind, ShapeSet

        shapes = ShapeSet.from_sequences(circles=[(0.0, 0.0, math.nan), (1.0, 1.0, 1.0)])
        assert shapes.circle_count == 1
        assert shapes.issues[0].kind == IssueKind.NON_FINITE
        assert shapes.issues[0].shape == "circle"
        assert shapes.issues[0].index == 0

    def test_skipped_shapes_are_logged(self, caplog):
        from src.caster.scene.shapes import ShapeSet

        with caplog.at_level("WARNING", logger="src.caster.scene.shapes"):
            ShapeSet.from_sequences(segments=[(1.0, 1.0, 1.0, 1.0)])
        assert "coincident endpoints" in caplog.text


class TestShapeBuffers:
    """Tests for ShapeBuffers."""

    def test_load_returns_counts(self):
        from src.caster.scene.shapes import ShapeBuffers, ShapeSet

        buffers = ShapeBuffers(4, 4)
        shapes = ShapeSet.from_sequences([(0.0, 0.0, 1.0, 1.0)], [(1.0, 2.0, 3.0)])
        assert buffers.load(shapes) == (1, 1)

        starts = buffers.segment_starts.to_numpy()
        ends = buffers.segment_ends.to_numpy()
        radii = buffers.circle_radii.to_numpy()
        assert starts[0].tolist() == [0.0, 0.0]
        assert ends[0].tolist() == [1.0, 1.0]
        assert radii[0] == 3.0

    def test_load_clears_previous_shapes(self):
        from src.caster.scene.shapes import ShapeBuffers, ShapeSet

        buffers = ShapeBuffers(4, 4)
        buffers.load(ShapeSet.from_sequences([(0.0, 0.0, 1.0, 1.0)] * 3, [(1.0, 2.0, 3.0)] * 3))
        buffers.load(ShapeSet.from_sequences(None, None))
        assert np.all(buffers.segment_starts.to_numpy() == 0.0)
        assert np.all(buffers.circle_radii.to_numpy() == 0.0)

    def test_buffers_grow(self):
        from src.caster.scene.shapes import ShapeBuffers, ShapeSet

        buffers = ShapeBuffers(2, 2)
        segments = [(float(i), 0.0, float(i), 1.0) for i in range(5)]
        circles = [(float(i), 0.0, 1.0) for i in range(3)]
        assert buffers.load(ShapeSet.from_sequences(segments, circles)) == (5, 3)
        assert buffers.segment_capacity == 8
        assert buffers.circle_capacity == 4
        assert buffers.segment_starts.to_numpy()[4].tolist() == [4.0, 0.0]


class TestSceneScanning:
    """Tests for closest-hit scanning over whole shape sets."""

    def test_closest_segment_regardless_of_order(self, caster):
        """Two segments at distance 3 and 7: the nearer wins in any order."""
        near = (3.0, -1.0, 3.0, 1.0)
        far = (7.0, -1.0, 7.0, 1.0)
        for segments in ([near, far], [far, near]):
            hit = caster.intersect_segments(0.0, 0.0, 10.0, 0.0, segments)
            assert hit is not None
            assert abs(hit.len - 3.0) < 1e-5

    def test_closest_circle_regardless_of_order(self, caster):
        near = (5.0, 0.0, 1.0)
        far = (12.0, 0.0, 1.0)
        for circles in ([near, far], [far, near]):
            hit = caster.intersect_circles(0.0, 0.0, 20.0, 0.0, circles, 0.01)
            assert hit is not None
            assert abs(hit.len - 4.0) <= 0.01

    def test_circle_in_front_of_segment(self, caster):
        hit = caster.intersect(
            0.0, 0.0, 20.0, 0.0,
            segments=[(5.0, -5.0, 5.0, 5.0)],
            circles=[(3.0, 0.0, 1.0)],
            circle_accuracy=0.01,
        )
        assert hit is not None
        assert abs(hit.len - 2.0) <= 0.01

    def test_segment_in_front_of_circle(self, caster):
        hit = caster.intersect(
            0.0, 0.0, 20.0, 0.0,
            segments=[(5.0, -5.0, 5.0, 5.0)],
            circles=[(10.0, 0.0, 2.0)],
            circle_accuracy=0.01,
        )
        assert hit is not None
        assert abs(hit.len - 5.0) < 1e-5
        assert abs(hit.x - 5.0) < 1e-5

    def test_many_segments(self):
        """A wall of segments larger than the initial buffers."""
        from src.caster import Caster, CasterConfig

        small = Caster(CasterConfig(initial_segment_capacity=2, initial_circle_capacity=2))
        segments = [(float(d), -1.0, float(d), 1.0) for d in range(50, 2, -1)]
        hit = small.intersect_segments(0.0, 0.0, 100.0, 0.0, segments)
        assert hit is not None
        assert abs(hit.len - 3.0) < 1e-5

    def test_skipped_shape_does_not_hide_others(self, caster):
        hit = caster.intersect(
            0.0, 0.0, 20.0, 0.0,
            segments=[(math.nan, -1.0, 2.0, 1.0), (6.0, -1.0, 6.0, 1.0)],
            circles=[(math.inf, 0.0, 1.0)],
            circle_accuracy=0.01,
        )
        assert hit is not None
        assert abs(hit.len - 6.0) < 1e-5

    def test_no_shapes(self, caster):
        assert caster.intersect(0.0, 0.0, 20.0, 0.0, [], [], 0.01) is None
