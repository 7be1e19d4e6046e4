"""Sphere primitive with ray-sphere intersection.

The intersection substitutes the ray into the implicit sphere equation

    |origin + t * direction - center|^2 = radius^2

which expands to a*t^2 + 2*half_b*t + c = 0 with

    oc     = origin - center
    a      = dot(direction, direction)
    half_b = dot(oc, direction)
    c      = dot(oc, oc) - radius^2

The smaller root is tried first, then the larger one; the first root inside
the closed interval [t_min, t_max] wins.

The outward normal is (p - center) / radius. A sphere with a negative
radius therefore has inward-pointing normals, which is how a hollow glass
shell is built from an outer sphere and a smaller inverted sphere sharing
its center.

Example:
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.geometry.hit import HitRecord, make_hit_record, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values flip the normals.
    """

    center: vec3
    radius: ti.f32


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.
        t_min: Smallest accepted t (excludes self-intersection).
        t_max: Largest accepted t.

    Returns:
        A HitRecord for the nearest root in [t_min, t_max], or a miss record.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearest root first
        root = (-half_b - sqrt_d) / a
        valid = t_min <= root <= t_max
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = t_min <= root <= t_max

        if valid:
            point = ray_origin + root * ray_direction
            outward_normal = tm.normalize((point - sphere.center) / sphere.radius)
            result = make_hit_record(ray_direction, point, outward_normal, root)

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a kernel."""
    return Sphere(center=center, radius=radius)
