"""Scene-level ray intersection over every shape of one call.

The scanners test a ray against each shape stored in a
:class:`~src.caster.scene.shapes.ShapeBuffers` instance and keep the closest
hit with :func:`~src.caster.core.ray.choose_closest`. There is no acceleration
structure: every ray is tested against every shape. Because the merge keeps
the smaller distance and resolves ties towards the record already held, the
result does not depend on the order of the shapes.

Shape fields are passed as ``ti.template()`` arguments so each
ShapeBuffers instance gets its own compiled kernel.

Example:
    >>> # Inside a Taichi kernel
    >>> rec = intersect_shapes(
    ...     ray,
    ...     buffers.segment_starts, buffers.segment_ends, num_segments,
    ...     buffers.circle_centers, buffers.circle_radii, num_circles,
    ...     accuracy, 0.0, max_iterations, parallel_tolerance, bounds_tolerance,
    ... )
"""

import taichi as ti

from src.caster.core.ray import HitRecord, Ray, choose_closest, make_miss_record
from src.caster.geometry.circle import Circle, hit_circle
from src.caster.geometry.segment import LineSegment, hit_segment


@ti.func
def intersect_segments(
    ray: Ray,
    segment_starts: ti.template(),
    segment_ends: ti.template(),
    num_segments: ti.i32,
    parallel_tolerance: ti.f32,
    bounds_tolerance: ti.f32,
) -> HitRecord:
    """Closest hit of a ray against the first num_segments segments.

    Args:
        ray: The ray to test.
        segment_starts: vec2 field of first endpoints.
        segment_ends: vec2 field of second endpoints.
        num_segments: Number of valid entries in the fields.
        parallel_tolerance: Forwarded to hit_segment.
        bounds_tolerance: Forwarded to hit_segment.

    Returns:
        The nearest segment hit, or a miss record.
    """
    closest = make_miss_record()
    for i in range(num_segments):
        segment = LineSegment(start=segment_starts[i], end=segment_ends[i])
        rec = hit_segment(ray, segment, parallel_tolerance, bounds_tolerance)
        closest = choose_closest(closest, rec)
    return closest


@ti.func
def intersect_circles(
    ray: Ray,
    circle_centers: ti.template(),
    circle_radii: ti.template(),
    num_circles: ti.i32,
    accuracy: ti.f32,
    initial_len: ti.f32,
    max_iterations: ti.i32,
) -> HitRecord:
    """Closest hit of a ray against the first num_circles circles.

    Every circle is marched from the ray origin with the same initial_len.

    Args:
        ray: The ray to test.
        circle_centers: vec2 field of centers.
        circle_radii: float field of radii.
        num_circles: Number of valid entries in the fields.
        accuracy: Surface tolerance forwarded to hit_circle.
        initial_len: Starting travelled length forwarded to hit_circle.
        max_iterations: Marching cap forwarded to hit_circle.

    Returns:
        The nearest circle hit, or a miss record.
    """
    closest = make_miss_record()
    for i in range(num_circles):
        circle = Circle(center=circle_centers[i], radius=circle_radii[i])
        rec = hit_circle(ray, circle, accuracy, initial_len, max_iterations)
        closest = choose_closest(closest, rec)
    return closest


@ti.func
def intersect_shapes(
    ray: Ray,
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
) -> HitRecord:
    """Closest hit of a ray against all segments and circles.

    Returns:
        The nearer of the best segment hit and the best circle hit. On a
        tie the segment hit is kept.
    """
    segment_hit = intersect_segments(
        ray, segment_starts, segment_ends, num_segments, parallel_tolerance, bounds_tolerance
    )
    circle_hit = intersect_circles(
        ray, circle_centers, circle_radii, num_circles, accuracy, initial_len, max_iterations
    )
    return choose_closest(segment_hit, circle_hit)
