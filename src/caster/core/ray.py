"""Ray data structure, hit record and 2D vector utilities.

This module provides the kernel-side Ray and HitRecord dataclasses together
with the small vector helpers the intersection routines are built from. All
functions are Taichi functions and run inside kernels.

A HitRecord doubles as an optional value: ``hit == 0`` means "no
intersection" and the remaining fields are then meaningless.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     ray = make_ray(vec2(0.0, 0.0), 0.0, 10.0)
    ...     return ray_at(ray, 5.0).x
    >>> probe()
    5.0
"""

import taichi as ti
import taichi.math as tm

# Type alias for 2D vectors using Taichi's math module
vec2 = tm.vec2


@ti.dataclass
class Ray:
    """A ray with an origin, a heading angle and a maximum length.

    Attributes:
        origin: The starting point of the ray (vec2).
        angle: Heading in radians, measured counter-clockwise from +x.
        max_length: Hits further than this from the origin are ignored.
    """

    origin: vec2
    angle: ti.f32
    max_length: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-shape intersection.

    Attributes:
        hit: Whether the ray intersected the shape (1 if hit, 0 if miss).
        point: The 2D point where the ray intersected the shape.
            Only valid if hit == 1.
        len: Distance from the ray origin to point. Only valid if hit == 1.
    """

    hit: ti.i32
    point: vec2
    len: ti.f32


@ti.func
def make_ray(origin: vec2, angle: ti.f32, max_length: ti.f32) -> Ray:
    """Create a ray from origin, angle and maximum length."""
    return Ray(origin=origin, angle=angle, max_length=max_length)


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(hit=0, point=vec2(0.0, 0.0), len=0.0)


@ti.func
def make_hit_record(point: vec2, distance: ti.f32) -> HitRecord:
    """Create a HitRecord for a hit at point, distance away from the origin."""
    return HitRecord(hit=1, point=point, len=distance)


@ti.func
def ray_direction(ray: Ray) -> vec2:
    """Unit vector pointing along the ray."""
    return vec2(ti.cos(ray.angle), ti.sin(ray.angle))


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec2:
    """Compute the point at distance t along the ray.

    Args:
        ray: The ray to evaluate.
        t: Distance from the origin. Positive values are in front of it.

    Returns:
        The point ray.origin + t * direction.
    """
    return ray.origin + t * ray_direction(ray)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec2) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def distance(a: vec2, b: vec2) -> ti.f32:
    """Compute the Euclidean distance between two points."""
    return tm.length(a - b)


@ti.func
def dot(a: vec2, b: vec2) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def direction_cos(a: vec2, b: vec2) -> ti.f32:
    """Cosine of the angle between two vectors.

    Used as the "is this point in front of the ray" test. When either vector
    has zero length the angle is undefined; 1.0 is returned so that a hit
    sitting exactly on the ray origin counts as in front.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        dot(a, b) / (|a| * |b|), or 1.0 for a zero-length input.
    """
    norms = tm.length(a) * tm.length(b)
    result = 1.0
    if norms > 0.0:
        result = tm.dot(a, b) / norms
    return result


# =============================================================================
# Nearest Selection
# =============================================================================


@ti.func
def choose_closest(first: HitRecord, second: HitRecord) -> HitRecord:
    """Keep whichever of two hit records is nearer the ray origin.

    Misses lose against hits. When both are hits at the same distance the
    first argument wins, which keeps folds over shape lists deterministic.

    Args:
        first: The current best record.
        second: The candidate record.

    Returns:
        The nearer of the two, or a miss if both are misses.
    """
    result = first
    if second.hit == 1 and (first.hit == 0 or second.len < first.len):
        result = second
    return result
