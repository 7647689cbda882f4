"""Shape collections: validation on the host and storage for kernels.

A :class:`ShapeSet` turns the caller's segment and circle sequences into
contiguous float32 arrays. Shapes that cannot be evaluated (non-finite
coordinates, zero-length segments) are dropped and reported as
:class:`GeometryIssue` records; arguments that are wrong for the whole call
(bad array shapes, negative radii) raise :class:`InvalidInputError`.

:class:`ShapeBuffers` owns the Taichi fields the kernels read. Buffers grow by
doubling and are rewritten in full on every load, so no shape survives from
one call to the next.

Example:
    >>> shapes = ShapeSet.from_sequences(
    ...     segments=[(5.0, -5.0, 5.0, 5.0)],
    ...     circles=[(10.0, 0.0, 2.0)],
    ... )
    >>> shapes.segment_count, shapes.circle_count
    (1, 1)
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.caster.errors import InvalidInputError

logger = logging.getLogger(__name__)

SEGMENT_COLUMNS = 4
CIRCLE_COLUMNS = 3


class IssueKind(IntEnum):
    """Reasons a shape was skipped."""

    NON_FINITE = 0
    DEGENERATE_SEGMENT = 1


@dataclass(frozen=True)
class GeometryIssue:
    """A shape that was skipped instead of evaluated.

    Attributes:
        kind: Why the shape was skipped.
        shape: "segment" or "circle".
        index: Position of the shape in the caller's input sequence.
        message: Human readable description.
    """

    kind: IssueKind
    shape: str
    index: int
    message: str


def _as_array(shapes: Any, columns: int, name: str) -> npt.NDArray[np.float64]:
    """Convert a sequence of tuples (or an array) to an (N, columns) array."""
    if shapes is None:
        return np.zeros((0, columns), dtype=np.float64)
    try:
        array = np.asarray(shapes, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be numeric {columns}-tuples: {e}") from e
    if array.size == 0:
        return np.zeros((0, columns), dtype=np.float64)
    if array.ndim != 2 or array.shape[1] != columns:
        raise InvalidInputError(
            f"{name} must have shape (N, {columns}), got {array.shape}"
        )
    return array


@dataclass
class ShapeSet:
    """Validated segments and circles ready to be uploaded to a kernel.

    Attributes:
        segments: float32 array of shape (N, 4) holding (x1, y1, x2, y2).
        circles: float32 array of shape (M, 3) holding (cx, cy, r).
        issues: Shapes dropped during validation.
    """

    segments: npt.NDArray[np.float32]
    circles: npt.NDArray[np.float32]
    issues: list[GeometryIssue] = field(default_factory=list)

    @property
    def segment_count(self) -> int:
        """Number of segments that will be evaluated."""
        return int(self.segments.shape[0])

    @property
    def circle_count(self) -> int:
        """Number of circles that will be evaluated."""
        return int(self.circles.shape[0])

    @classmethod
    def from_sequences(
        cls,
        segments: Sequence[Sequence[float]] | npt.ArrayLike | None = None,
        circles: Sequence[Sequence[float]] | npt.ArrayLike | None = None,
    ) -> "ShapeSet":
        """Validate caller geometry.

        Args:
            segments: (x1, y1, x2, y2) tuples or an (N, 4) array.
            circles: (cx, cy, r) tuples or an (M, 3) array.

        Returns:
            A ShapeSet holding every usable shape.

        Raises:
            InvalidInputError: If an input has the wrong shape or a circle
                has a negative radius.
        """
        segment_array = _as_array(segments, SEGMENT_COLUMNS, "segments")
        circle_array = _as_array(circles, CIRCLE_COLUMNS, "circles")
        issues: list[GeometryIssue] = []

        # NaN radii are reported below as non-finite, not rejected here
        negative = np.flatnonzero(circle_array[:, 2] < 0.0)
        if negative.size > 0:
            idx = int(negative[0])
            raise InvalidInputError(
                f"Circle {idx} has negative radius {circle_array[idx, 2]}"
            )

        keep_segments = np.ones(segment_array.shape[0], dtype=bool)
        for idx in np.flatnonzero(~np.isfinite(segment_array).all(axis=1)):
            keep_segments[idx] = False
            issues.append(
                GeometryIssue(
                    kind=IssueKind.NON_FINITE,
                    shape="segment",
                    index=int(idx),
                    message=f"Segment {idx} has non-finite coordinates {segment_array[idx].tolist()}",
                )
            )

        zero_length = (segment_array[:, 0] == segment_array[:, 2]) & (
            segment_array[:, 1] == segment_array[:, 3]
        )
        for idx in np.flatnonzero(zero_length & keep_segments):
            keep_segments[idx] = False
            issues.append(
                GeometryIssue(
                    kind=IssueKind.DEGENERATE_SEGMENT,
                    shape="segment",
                    index=int(idx),
                    message=f"Segment {idx} has coincident endpoints",
                )
            )

        keep_circles = np.isfinite(circle_array).all(axis=1)
        for idx in np.flatnonzero(~keep_circles):
            issues.append(
                GeometryIssue(
                    kind=IssueKind.NON_FINITE,
                    shape="circle",
                    index=int(idx),
                    message=f"Circle {idx} has non-finite values {circle_array[idx].tolist()}",
                )
            )

        for issue in issues:
            logger.warning("Skipping shape: %s", issue.message)

        return cls(
            segments=segment_array[keep_segments].astype(np.float32),
            circles=circle_array[keep_circles].astype(np.float32),
            issues=issues,
        )


def _grown_capacity(current: int, needed: int) -> int:
    """Smallest power-of-two multiple of current that holds needed items."""
    capacity = current
    while capacity < needed:
        capacity *= 2
    return capacity


class ShapeBuffers:
    """Taichi fields holding one call's shapes in Structure of Arrays layout.

    Attributes:
        segment_starts: vec2 field of segment first endpoints.
        segment_ends: vec2 field of segment second endpoints.
        circle_centers: vec2 field of circle centers.
        circle_radii: float field of circle radii.
    """

    def __init__(self, segment_capacity: int, circle_capacity: int) -> None:
        self._segment_capacity = 0
        self._circle_capacity = 0
        self._allocate_segments(segment_capacity)
        self._allocate_circles(circle_capacity)

    @property
    def segment_capacity(self) -> int:
        """Number of segments the buffers can hold without growing."""
        return self._segment_capacity

    @property
    def circle_capacity(self) -> int:
        """Number of circles the buffers can hold without growing."""
        return self._circle_capacity

    def _allocate_segments(self, capacity: int) -> None:
        self.segment_starts = ti.Vector.field(2, dtype=ti.f32, shape=capacity)
        self.segment_ends = ti.Vector.field(2, dtype=ti.f32, shape=capacity)
        self._segment_capacity = capacity

    def _allocate_circles(self, capacity: int) -> None:
        self.circle_centers = ti.Vector.field(2, dtype=ti.f32, shape=capacity)
        self.circle_radii = ti.field(dtype=ti.f32, shape=capacity)
        self._circle_capacity = capacity

    def load(self, shapes: ShapeSet) -> tuple[int, int]:
        """Copy a ShapeSet into the fields, growing them if needed.

        Args:
            shapes: The validated shapes to upload.

        Returns:
            Tuple of (segment_count, circle_count) to pass to kernels.
        """
        n_segments = shapes.segment_count
        n_circles = shapes.circle_count

        if n_segments > self._segment_capacity:
            capacity = _grown_capacity(self._segment_capacity, n_segments)
            logger.debug("Growing segment buffers %d -> %d", self._segment_capacity, capacity)
            self._allocate_segments(capacity)
        if n_circles > self._circle_capacity:
            capacity = _grown_capacity(self._circle_capacity, n_circles)
            logger.debug("Growing circle buffers %d -> %d", self._circle_capacity, capacity)
            self._allocate_circles(capacity)

        # from_numpy needs the full field shape; rows past the count are unused
        starts = np.zeros((self._segment_capacity, 2), dtype=np.float32)
        ends = np.zeros((self._segment_capacity, 2), dtype=np.float32)
        starts[:n_segments] = shapes.segments[:, 0:2]
        ends[:n_segments] = shapes.segments[:, 2:4]
        self.segment_starts.from_numpy(starts)
        self.segment_ends.from_numpy(ends)

        centers = np.zeros((self._circle_capacity, 2), dtype=np.float32)
        radii = np.zeros(self._circle_capacity, dtype=np.float32)
        centers[:n_circles] = shapes.circles[:, 0:2]
        radii[:n_circles] = shapes.circles[:, 2]
        self.circle_centers.from_numpy(centers)
        self.circle_radii.from_numpy(radii)

        return n_segments, n_circles
