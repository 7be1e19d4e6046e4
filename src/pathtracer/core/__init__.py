"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    vector: Host-side Vec3, Point3 and Color types for scene building
    ray: Ray data structure and vector helpers used inside kernels
    sampling: Per-task random streams and geometric samplers
    integrator: Bounded-depth path tracing and per-pixel render kernels
    render: Render settings, progress reporting and 8-bit conversion
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .sampling import (
    init_rng_state,
    next_normal,
    next_uniform,
    uniform_in_unit_disk,
    uniform_in_unit_sphere,
    uniform_on_unit_sphere,
)
from .vector import Color, Point3, Vec3, random_color

# Note: integrator and render are NOT imported here because they declare
# Taichi fields and depend on the scene and camera packages. Import them
# directly from pathtracer.core.integrator or pathtracer.core.render.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "init_rng_state",
    "next_uniform",
    "next_normal",
    "uniform_on_unit_sphere",
    "uniform_in_unit_sphere",
    "uniform_in_unit_disk",
    "Vec3",
    "Point3",
    "Color",
    "random_color",
]
