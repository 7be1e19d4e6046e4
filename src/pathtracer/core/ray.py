"""Ray data structure and vector utilities for kernel code.

This module provides the Ray dataclass and the vector helpers used by the
geometry, material and integrator kernels. All functions are Taichi
functions and run inside kernels on 32-bit floats.

Rays carry unit-length directions. ``make_ray`` checks this with an
``assert`` that Taichi evaluates when initialized with ``debug=True``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.ray import make_ray, ray_at, vec3
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0).z
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Tolerance used when checking that ray directions are unit length
UNIT_LENGTH_TOLERANCE = 1e-3

# Vectors with every component below this magnitude count as degenerate
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The unit direction of the ray (vec3).
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from an origin and a unit direction.

    Callers normalize the direction first. Passing a non-unit direction is
    a contract violation that trips an assertion in debug mode.

    Args:
        origin: The starting point of the ray.
        direction: The direction of the ray, unit length.

    Returns:
        A new Ray instance.
    """
    assert ti.abs(tm.length(direction) - 1.0) < UNIT_LENGTH_TOLERANCE, "ray direction must be unit length"
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector, dot(v, v)."""
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The result is undefined for a zero-length vector; callers guard with
    ``near_zero`` or a length check first.
    """
    return v / length(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of v is near zero, 0 otherwise."""
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a unit normal.

    Computes ``v - 2 * dot(v, n) * n``. Reflecting twice about the same
    normal returns the original vector.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        The reflected direction.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, refraction_ratio: ti.f32) -> vec3:
    """Refract a unit incident vector through a surface using Snell's law.

    The refracted direction is split into the part perpendicular to the
    normal and the part parallel to it:

        r_perp = ratio * (uv + cos_theta * n)
        r_par  = -sqrt(|1 - |r_perp|^2|) * n

    Callers check for total internal reflection before refracting.

    Args:
        incident: The unit incoming direction.
        normal: The unit normal, facing against the incoming direction.
        refraction_ratio: n_incident / n_transmitted.

    Returns:
        The refracted direction (not normalized).
    """
    cos_theta = tm.clamp(-tm.dot(incident, normal), -1.0, 1.0)
    r_out_perp = refraction_ratio * (incident + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, refraction_ratio: ti.f32) -> ti.f32:
    """Approximate Fresnel reflectance with Schlick's polynomial.

    r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    At normal incidence (cosine = 1) this is exactly r0.
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)
