"""Ray fan generation and the public intersection entry points.

Every entry point funnels into one Taichi kernel, ``_cast_rays``, which
evaluates a batch of ray angles against one call's shapes. The kernel's
outermost loop runs over ray indices and is parallelised by the Taichi
runtime; each ray writes its own output slot, so results come back in
sampling order whatever order the rays were evaluated in.

A :class:`Caster` is the caller-owned context for these calls: it holds the
configuration and the shape buffers. Module-level functions
(:func:`cast_fan`, :func:`intersect`, ...) share one lazily created default
Caster. A Caster must not be used from several Python threads at once.

Example:
    >>> from src.caster import Caster, CasterConfig
    >>> caster = Caster(CasterConfig(threads=4))
    >>> rays = caster.cast_fan(
    ...     view_angle=0.0, fov=1.0, ray_count=64,
    ...     origin_x=0.0, origin_y=0.0, max_length=20.0,
    ...     segments=[(5.0, -5.0, 5.0, 5.0)],
    ...     circles=[(10.0, 0.0, 2.0)],
    ...     circle_accuracy=0.01,
    ... )
    >>> hit = rays[32].intersection
"""

import logging
import math
import operator
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.caster.core.config import CasterConfig
from src.caster.core.ray import make_ray, vec2
from src.caster.core.runtime import init
from src.caster.errors import InvalidInputError
from src.caster.scene.intersection import intersect_shapes
from src.caster.scene.shapes import GeometryIssue, ShapeBuffers, ShapeSet

logger = logging.getLogger(__name__)

SegmentLike = Sequence[float]
CircleLike = Sequence[float]


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class Intersection:
    """Point where a ray strikes a shape.

    Attributes:
        x: Hit x coordinate.
        y: Hit y coordinate.
        len: Distance from the ray origin to the hit point.
    """

    x: float
    y: float
    len: float


@dataclass(frozen=True)
class Ray:
    """One ray of a fan with its closest intersection.

    Attributes:
        x: Origin x coordinate.
        y: Origin y coordinate.
        angle: Heading in radians.
        max_length: Maximum ray length used for the query.
        intersection: The closest hit, or None if the ray hit nothing in range.
    """

    x: float
    y: float
    angle: float
    max_length: float
    intersection: Intersection | None = None


@dataclass
class FanResult:
    """A cast fan together with the shapes that had to be skipped.

    Attributes:
        rays: Rays in sampling order.
        issues: Shapes that were dropped during validation.
    """

    rays: list[Ray]
    issues: list[GeometryIssue] = field(default_factory=list)


def choose_closest(
    first: Intersection | None, second: Intersection | None
) -> Intersection | None:
    """Keep whichever of two optional intersections is nearer.

    None loses against a hit; on equal distances the first argument wins.
    """
    if first is None:
        return second
    if second is None:
        return first
    return second if second.len < first.len else first


# =============================================================================
# Kernel
# =============================================================================


@ti.kernel
def _cast_rays(
    angles: ti.types.ndarray(dtype=ti.f32, ndim=1),
    origin_x: ti.f32,
    origin_y: ti.f32,
    max_length: ti.f32,
    segment_starts: ti.template(),
    segment_ends: ti.template(),
    num_segments: ti.i32,
    circle_centers: ti.template(),
    circle_radii: ti.template(),
    num_circles: ti.i32,
    accuracy: ti.f32,
    initial_len: ti.f32,
    max_iterations: ti.i32,
    parallel_tolerance: ti.f32,
    bounds_tolerance: ti.f32,
    out_hit: ti.types.ndarray(dtype=ti.i32, ndim=1),
    out_hit_data: ti.types.ndarray(dtype=ti.f32, ndim=2),
):
    """Intersect every angle in angles with the loaded shapes.

    Writes out_hit[i] (1 if ray i hit) and out_hit_data[i] = (x, y, len).
    """
    for i in range(angles.shape[0]):
        ray = make_ray(vec2(origin_x, origin_y), angles[i], max_length)
        rec = intersect_shapes(
            ray,
            segment_starts,
            segment_ends,
            num_segments,
            circle_centers,
            circle_radii,
            num_circles,
            accuracy,
            initial_len,
            max_iterations,
            parallel_tolerance,
            bounds_tolerance,
        )
        out_hit[i] = rec.hit
        out_hit_data[i, 0] = rec.point.x
        out_hit_data[i, 1] = rec.point.y
        out_hit_data[i, 2] = rec.len


# =============================================================================
# Argument Validation
# =============================================================================


def _check_finite(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise InvalidInputError(f"{name} = {value} is not finite")


def _check_max_length(max_length: float) -> None:
    _check_finite(max_length=max_length)
    if max_length < 0.0:
        raise InvalidInputError(f"max_length = {max_length} is negative")


def _check_accuracy(accuracy: float) -> None:
    _check_finite(accuracy=accuracy)
    if accuracy <= 0.0:
        raise InvalidInputError(f"accuracy = {accuracy} must be positive")


def fan_angles(
    view_angle: float, fov: float, ray_count: int, *, symmetric: bool = False
) -> npt.NDArray[np.float64]:
    """Sample ray_count angles across a field of view.

    By default the half-open interval [view_angle - fov/2, view_angle + fov/2)
    is sampled: the first angle is exactly the left edge and the last one is
    fov/ray_count short of the right edge. With symmetric=True both edges
    are included (a single ray then points at view_angle).

    Args:
        view_angle: Center of the field of view in radians.
        fov: Width of the field of view in radians.
        ray_count: Number of rays (at least 1).
        symmetric: Sample the closed interval instead of the half-open one.

    Returns:
        float64 array of ray_count angles in sampling order.

    Raises:
        InvalidInputError: If ray_count is not an integer of at least 1, or an
            angle is not finite.
    """
    _check_finite(view_angle=view_angle, fov=fov)
    try:
        ray_count = operator.index(ray_count)
    except TypeError as e:
        raise InvalidInputError(f"ray_count = {ray_count!r} must be an integer") from e
    if ray_count < 1:
        raise InvalidInputError(f"ray_count = {ray_count} must be at least 1")

    angle_offset = view_angle - fov / 2.0
    if symmetric:
        if ray_count == 1:
            return np.array([view_angle], dtype=np.float64)
        return np.arange(ray_count) / (ray_count - 1) * fov + angle_offset
    return np.arange(ray_count) / ray_count * fov + angle_offset


# =============================================================================
# Caster
# =============================================================================


class Caster:
    """Caller-owned context for ray casting calls.

    Holds a CasterConfig and the shape buffers used by the kernel. Creating
    a Caster initialises the Taichi runtime if that has not happened yet.

    Attributes:
        config: The configuration in use.
    """

    def __init__(self, config: CasterConfig | None = None) -> None:
        """Initialise the caster.

        Args:
            config: Settings to use. Defaults to CasterConfig().

        Raises:
            InvalidInputError: If the configuration is invalid.
        """
        self.config = config if config is not None else CasterConfig()
        self.config.validate()
        init(threads=self.config.threads, arch=self.config.arch)
        self._buffers = ShapeBuffers(
            self.config.initial_segment_capacity,
            self.config.initial_circle_capacity,
        )

    def _iteration_cap(self, max_length: float, accuracy: float, initial_len: float) -> int:
        """Marching steps needed to cover the remaining range, capped by config.

        Each step advances by more than accuracy, so remaining / accuracy + 2
        steps are always enough to either converge or leave the range.
        """
        remaining = max(max_length - initial_len, 0.0)
        needed = math.ceil(remaining / accuracy) + 2
        return int(min(self.config.max_circle_iterations, needed))

    def _run(
        self,
        angles: npt.NDArray[np.float64],
        origin_x: float,
        origin_y: float,
        max_length: float,
        shapes: ShapeSet,
        accuracy: float,
        initial_len: float = 0.0,
    ) -> list[Intersection | None]:
        """Launch the kernel for a batch of angles and unpack the results."""
        num_segments, num_circles = self._buffers.load(shapes)
        max_iterations = self._iteration_cap(max_length, accuracy, initial_len)

        ray_count = len(angles)
        out_hit = np.zeros(ray_count, dtype=np.int32)
        out_hit_data = np.zeros((ray_count, 3), dtype=np.float32)

        logger.debug(
            "Casting %d rays against %d segments and %d circles (max_iterations=%d)",
            ray_count,
            num_segments,
            num_circles,
            max_iterations,
        )

        _cast_rays(
            np.ascontiguousarray(angles, dtype=np.float32),
            origin_x,
            origin_y,
            max_length,
            self._buffers.segment_starts,
            self._buffers.segment_ends,
            num_segments,
            self._buffers.circle_centers,
            self._buffers.circle_radii,
            num_circles,
            accuracy,
            initial_len,
            max_iterations,
            self.config.parallel_tolerance,
            self.config.bounds_tolerance,
            out_hit,
            out_hit_data,
        )

        results: list[Intersection | None] = []
        for hit, (x, y, dist) in zip(out_hit, out_hit_data):
            if hit == 1 and np.isfinite(x) and np.isfinite(y) and np.isfinite(dist):
                results.append(Intersection(x=float(x), y=float(y), len=float(dist)))
            else:
                results.append(None)
        return results

    def cast_fan_report(
        self,
        view_angle: float,
        fov: float,
        ray_count: int,
        origin_x: float,
        origin_y: float,
        max_length: float,
        segments: Sequence[SegmentLike] | npt.ArrayLike | None,
        circles: Sequence[CircleLike] | npt.ArrayLike | None,
        circle_accuracy: float,
        *,
        symmetric: bool = False,
    ) -> FanResult:
        """Cast a fan of rays and report skipped shapes alongside the rays.

        See cast_fan() for the arguments.

        Returns:
            FanResult with the rays in sampling order and any GeometryIssues.
        """
        _check_finite(origin_x=origin_x, origin_y=origin_y)
        _check_max_length(max_length)
        _check_accuracy(circle_accuracy)
        angles = fan_angles(view_angle, fov, ray_count, symmetric=symmetric)
        shapes = ShapeSet.from_sequences(segments, circles)

        hits = self._run(angles, origin_x, origin_y, max_length, shapes, circle_accuracy)

        rays = [
            Ray(
                x=float(origin_x),
                y=float(origin_y),
                angle=float(angle),
                max_length=float(max_length),
                intersection=hit,
            )
            for angle, hit in zip(angles, hits)
        ]
        return FanResult(rays=rays, issues=list(shapes.issues))

    def cast_fan(
        self,
        view_angle: float,
        fov: float,
        ray_count: int,
        origin_x: float,
        origin_y: float,
        max_length: float,
        segments: Sequence[SegmentLike] | npt.ArrayLike | None,
        circles: Sequence[CircleLike] | npt.ArrayLike | None,
        circle_accuracy: float,
        *,
        symmetric: bool = False,
    ) -> list[Ray]:
        """Cast a fan of rays across a field of view.

        Args:
            view_angle: Center of the field of view in radians.
            fov: Width of the field of view in radians.
            ray_count: Number of rays (at least 1).
            origin_x: Shared ray origin x.
            origin_y: Shared ray origin y.
            max_length: Maximum ray length (non-negative).
            segments: (x1, y1, x2, y2) tuples or an (N, 4) array.
            circles: (cx, cy, r) tuples or an (M, 3) array.
            circle_accuracy: Surface tolerance for circle hits (positive).
            symmetric: Include the right edge of the field of view.

        Returns:
            ray_count rays in sampling order.

        Raises:
            InvalidInputError: If any argument is rejected at the boundary.
        """
        return self.cast_fan_report(
            view_angle,
            fov,
            ray_count,
            origin_x,
            origin_y,
            max_length,
            segments,
            circles,
            circle_accuracy,
            symmetric=symmetric,
        ).rays

    def _single(
        self,
        origin_x: float,
        origin_y: float,
        max_length: float,
        angle: float,
        shapes: ShapeSet,
        accuracy: float,
        initial_len: float = 0.0,
    ) -> Intersection | None:
        _check_finite(origin_x=origin_x, origin_y=origin_y, angle=angle)
        _check_max_length(max_length)
        angles = np.array([angle], dtype=np.float64)
        return self._run(angles, origin_x, origin_y, max_length, shapes, accuracy, initial_len)[0]

    def intersect(
        self,
        origin_x: float,
        origin_y: float,
        max_length: float,
        angle: float,
        segments: Sequence[SegmentLike] | npt.ArrayLike | None,
        circles: Sequence[CircleLike] | npt.ArrayLike | None,
        circle_accuracy: float,
    ) -> Intersection | None:
        """Closest hit of a single ray against segments and circles."""
        _check_accuracy(circle_accuracy)
        shapes = ShapeSet.from_sequences(segments, circles)
        return self._single(origin_x, origin_y, max_length, angle, shapes, circle_accuracy)

    def intersect_segments(
        self,
        origin_x: float,
        origin_y: float,
        max_length: float,
        angle: float,
        segments: Sequence[SegmentLike] | npt.ArrayLike | None,
    ) -> Intersection | None:
        """Closest hit of a single ray against segments only."""
        shapes = ShapeSet.from_sequences(segments, None)
        # accuracy is unused without circles but must be positive for the cap
        return self._single(origin_x, origin_y, max_length, angle, shapes, 1.0)

    def intersect_segment(
        self,
        origin_x: float,
        origin_y: float,
        max_length: float,
        angle: float,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
    ) -> Intersection | None:
        """Hit of a single ray against one segment."""
        return self.intersect_segments(
            origin_x, origin_y, max_length, angle, [(x1, y1, x2, y2)]
        )

    def intersect_circles(
        self,
        origin_x: float,
        origin_y: float,
        max_length: float,
        angle: float,
        circles: Sequence[CircleLike] | npt.ArrayLike | None,
        accuracy: float,
    ) -> Intersection | None:
        """Closest hit of a single ray against circles only."""
        _check_accuracy(accuracy)
        shapes = ShapeSet.from_sequences(None, circles)
        return self._single(origin_x, origin_y, max_length, angle, shapes, accuracy)

    def intersect_circle(
        self,
        origin_x: float,
        origin_y: float,
        max_length: float,
        angle: float,
        cx: float,
        cy: float,
        r: float,
        accuracy: float,
        initial_len: float = 0.0,
    ) -> Intersection | None:
        """Hit of a single ray against one circle.

        Args:
            initial_len: Non-negative length already travelled before the
                origin. It is included in the returned len and counts against
                max_length.
        """
        _check_accuracy(accuracy)
        _check_finite(initial_len=initial_len)
        if initial_len < 0.0:
            raise InvalidInputError(f"initial_len = {initial_len} is negative")
        shapes = ShapeSet.from_sequences(None, [(cx, cy, r)])
        return self._single(
            origin_x, origin_y, max_length, angle, shapes, accuracy, initial_len
        )


# =============================================================================
# Module-level API (default Caster)
# =============================================================================

# Lazy default caster - created on first use so init() can run first
_default_caster: Caster | None = None


def get_default_caster() -> Caster:
    """Get or create the Caster used by the module-level functions."""
    global _default_caster
    if _default_caster is None:
        _default_caster = Caster()
    return _default_caster


def cast_fan(*args: Any, **kwargs: Any) -> list[Ray]:
    """Cast a fan of rays with the default Caster. See Caster.cast_fan()."""
    return get_default_caster().cast_fan(*args, **kwargs)


def intersect(*args: Any, **kwargs: Any) -> Intersection | None:
    """Single-ray query against both shape kinds. See Caster.intersect()."""
    return get_default_caster().intersect(*args, **kwargs)


def intersect_segments(*args: Any, **kwargs: Any) -> Intersection | None:
    """Single-ray query against segments. See Caster.intersect_segments()."""
    return get_default_caster().intersect_segments(*args, **kwargs)


def intersect_segment(*args: Any, **kwargs: Any) -> Intersection | None:
    """Single-ray query against one segment. See Caster.intersect_segment()."""
    return get_default_caster().intersect_segment(*args, **kwargs)


def intersect_circles(*args: Any, **kwargs: Any) -> Intersection | None:
    """Single-ray query against circles. See Caster.intersect_circles()."""
    return get_default_caster().intersect_circles(*args, **kwargs)


def intersect_circle(*args: Any, **kwargs: Any) -> Intersection | None:
    """Single-ray query against one circle. See Caster.intersect_circle()."""
    return get_default_caster().intersect_circle(*args, **kwargs)
