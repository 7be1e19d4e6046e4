"""Diffuse (Lambertian) material implementation.

A diffuse surface scatters the incoming ray around the surface normal. The
outgoing direction is the hit normal plus a point drawn uniformly on the
unit sphere, renormalized, which distributes directions with density
proportional to cos(theta) about the normal.

The attenuation is the albedo and the material always scatters.

Example:
    >>> from pathtracer.materials.diffuse import scatter_diffuse
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, state = scatter_diffuse(albedo, normal, state)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.sampling import uniform_on_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3

# Sums shorter than this fall back to the normal itself
DEGENERATE_DIRECTION_LENGTH = 1e-7


@ti.func
def scatter_diffuse(albedo: vec3, normal: vec3, state: ti.u32):
    """Sample a scattered direction for a diffuse surface.

    When the unit-sphere sample nearly cancels the normal the sum is too
    short to normalize, and the normal itself is used.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal at the hit point.
        state: The caller's random generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, state) where:
        - scattered_direction: The sampled unit direction.
        - attenuation: The albedo.
        - state: The advanced generator state.
    """
    sample, state = uniform_on_unit_sphere(state)
    scattered_direction = normal + sample

    if tm.length(scattered_direction) < DEGENERATE_DIRECTION_LENGTH:
        scattered_direction = normal

    return tm.normalize(scattered_direction), albedo, state


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of diffuse materials in the scene
MAX_DIFFUSE_MATERIALS = 1024

# Storage for diffuse material properties
diffuse_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DIFFUSE_MATERIALS)
num_diffuse_materials = ti.field(dtype=ti.i32, shape=())


def clear_diffuse_materials() -> None:
    """Clear all diffuse materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_diffuse_materials[None] = 0


def add_diffuse_material(albedo: tuple[float, float, float]) -> int:
    """Add a diffuse material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B).
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_diffuse_materials[None]
    if idx >= MAX_DIFFUSE_MATERIALS:
        raise RuntimeError(f"Maximum number of diffuse materials ({MAX_DIFFUSE_MATERIALS}) exceeded")

    diffuse_albedos[idx] = [float(c) for c in albedo]
    num_diffuse_materials[None] = idx + 1
    return idx


def get_diffuse_material_count() -> int:
    """Get the number of diffuse materials in the registry."""
    return int(num_diffuse_materials[None])


@ti.func
def get_diffuse_albedo(material_idx: ti.i32) -> vec3:
    return diffuse_albedos[material_idx]
