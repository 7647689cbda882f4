"""Line segment primitive with ray-segment intersection.

Both the ray and the segment are lines without slopes: the ray is
origin + t * direction and the segment is start + u * edge. Equating the two
gives a 2x2 linear system whose determinant is cross(direction, edge), the
same determinant as the general line form a * x + b * y = c of both lines.
Its only singular case is a pair of parallel lines. There is no division by a
direction component, so vertical rays and vertical segments need no special
handling and never produce non-finite values.

The crossing is accepted on the segment parameter u rather than on an
axis-aligned bounding box, and the reported point is rebuilt from the segment
itself. Solving relative to the ray origin keeps f32 rounding small on large
world coordinates.

Parallel lines, including a ray running along a segment it overlaps and
zero-length segments, report no intersection.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.caster.geometry.segment import LineSegment, hit_segment
    >>> # Use hit_segment within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.caster.core.ray import (
    HitRecord,
    Ray,
    make_hit_record,
    make_miss_record,
    ray_direction,
    vec2,
)


@ti.dataclass
class LineSegment:
    """A line segment between two endpoints.

    Attributes:
        start: The first endpoint (vec2).
        end: The second endpoint (vec2).
    """

    start: vec2
    end: vec2


@ti.func
def make_segment(x1: ti.f32, y1: ti.f32, x2: ti.f32, y2: ti.f32) -> LineSegment:
    """Create a segment from endpoint coordinates."""
    return LineSegment(start=vec2(x1, y1), end=vec2(x2, y2))


@ti.func
def _cross(a: vec2, b: vec2) -> ti.f32:
    """z component of the 3D cross product of two planar vectors."""
    return a.x * b.y - a.y * b.x


@ti.func
def _magnitude(p: vec2) -> ti.f32:
    """Largest absolute coordinate of p."""
    return ti.max(ti.abs(p.x), ti.abs(p.y))


@ti.func
def hit_segment(
    ray: Ray,
    segment: LineSegment,
    parallel_tolerance: ti.f32,
    bounds_tolerance: ti.f32,
) -> HitRecord:
    """Test for ray-segment intersection.

    Steps:
    1. Reject parallel lines (|det| <= parallel_tolerance * |segment|)
    2. Solve for the ray distance t and the segment parameter u
    3. Reject u outside [0, 1] (widened by the scaled bounds slack)
    4. Reject points behind the ray origin (t < 0 beyond the slack)
    5. Reject points further than ray.max_length

    The slack is bounds_tolerance times the largest coordinate magnitude
    of the operands (at least 1), so f32 rounding on large world
    coordinates does not let rays slip past segment ends or through walls.
    The reported point is start + u * edge with u clamped to [0, 1], so it
    always lies on the segment.

    Args:
        ray: The ray to test.
        segment: The segment to test against.
        parallel_tolerance: Relative threshold on the system determinant.
        bounds_tolerance: Slack per unit of coordinate magnitude.

    Returns:
        A HitRecord with the crossing point and its distance from the ray
        origin, or a miss record.
    """
    direction = ray_direction(ray)
    edge = segment.end - segment.start
    to_start = segment.start - ray.origin

    # det of the general-form system for both lines
    det = _cross(direction, edge)

    result = make_miss_record()

    if ti.abs(det) > parallel_tolerance * tm.length(edge):
        t = _cross(to_start, edge) / det
        u = _cross(to_start, direction) / det

        scale = ti.max(
            1.0,
            ti.max(_magnitude(segment.start), ti.max(_magnitude(segment.end), _magnitude(ray.origin))),
        )
        slack = bounds_tolerance * scale
        u_slack = slack / tm.length(edge)

        if u >= -u_slack and u <= 1.0 + u_slack and t >= -slack:
            crossing = segment.start + tm.clamp(u, 0.0, 1.0) * edge
            dist = tm.length(crossing - ray.origin)

            if dist <= ray.max_length:
                result = make_hit_record(crossing, dist)

    return result
