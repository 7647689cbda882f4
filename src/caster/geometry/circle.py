"""Circle primitive with ray-circle intersection by conservative advancement.

Instead of solving the ray-circle quadratic, the ray is marched forward in
steps equal to the current distance to the circle's surface. A step of that
size can never cross the surface, so the march approaches the first crossing
from the near side and stops once it is within ``accuracy`` of the surface.
The reported hit is the marched point, not the exact surface point.

The same rule works when the ray starts inside the circle: the distance to
the surface is then ``radius - distance_to_center`` and stepping that far in
any direction stays inside.

Termination: every accepted step is longer than ``accuracy``, so the
travelled length passes ``max_length`` after at most
``max_length / accuracy + 1`` steps. Rays that graze a circle converge very
slowly, so callers also pass an explicit ``max_iterations`` cap; running out
of iterations is a miss.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.caster.geometry.circle import Circle, hit_circle
    >>> # Use hit_circle within a Taichi kernel
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
class Circle:
    """A circle defined by center point and radius.

    Attributes:
        center: The center point of the circle (vec2).
        radius: The radius of the circle (non-negative float).
    """

    center: vec2
    radius: ti.f32


@ti.func
def make_circle(cx: ti.f32, cy: ti.f32, radius: ti.f32) -> Circle:
    """Create a circle from center coordinates and radius."""
    return Circle(center=vec2(cx, cy), radius=radius)


@ti.func
def distance_to_surface(p: vec2, circle: Circle) -> ti.f32:
    """Unsigned distance from p to the circle's boundary."""
    return ti.abs(tm.length(p - circle.center) - circle.radius)


@ti.func
def hit_circle(
    ray: Ray,
    circle: Circle,
    accuracy: ti.f32,
    initial_len: ti.f32,
    max_iterations: ti.i32,
) -> HitRecord:
    """Test for ray-circle intersection by conservative advancement.

    Args:
        ray: The ray to test.
        circle: The circle to test against.
        accuracy: A point closer than this to the surface counts as a hit.
        initial_len: Length already travelled before ray.origin. It is added
            to the reported distance and counts against ray.max_length.
        max_iterations: Maximum number of marching steps.

    Returns:
        A HitRecord at the marched point with the travelled length, or a
        miss record if the ray leaves its range or runs out of iterations.
    """
    direction = ray_direction(ray)
    point = ray.origin
    travelled = initial_len

    did_hit = 0
    done = 0
    for _ in range(max_iterations):
        if done == 0:
            if travelled > ray.max_length:
                done = 1
            else:
                step = distance_to_surface(point, circle)
                if step <= accuracy:
                    did_hit = 1
                    done = 1
                else:
                    point = point + step * direction
                    travelled += step

    result = make_miss_record()
    if did_hit == 1:
        result = make_hit_record(point, travelled)
    return result
