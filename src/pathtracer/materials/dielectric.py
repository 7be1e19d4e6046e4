"""Dielectric (glass/water) material implementation.

Dielectrics both reflect and refract and never absorb, so the attenuation
is always white.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when ratio * sin(theta) > 1
    - Schlick's approximation for Fresnel reflectance

When refraction is possible, one uniform draw is compared against the
Schlick reflectance to pick reflection or refraction. Averaged over many
samples this reproduces the Fresnel gradient toward grazing angles.

Example:
    >>> from pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, state = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import reflect, refract, schlick_reflectance
from pathtracer.core.sampling import next_uniform

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Return 1/ior entering the material from outside, ior when leaving."""
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def cannot_refract(refraction_ratio: ti.f32, cos_theta: ti.f32) -> ti.i32:
    """Return 1 if Snell's law has no solution (total internal reflection)."""
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return refraction_ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Compute the scattered direction for a dielectric surface.

    The uniform draw only happens when refraction is possible; total
    internal reflection consumes no randomness.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The unit incoming direction.
        normal: The unit normal, facing against the incoming ray.
        front_face: 1 if the ray arrives from outside the material.
        state: The caller's random generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, state) where:
        - scattered_direction: The unit reflected or refracted direction.
        - attenuation: White.
        - state: The advanced generator state.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio_for(ior, front_face)
    cos_theta = tm.clamp(-tm.dot(incident_direction, normal), -1.0, 1.0)

    scattered_direction = reflect(incident_direction, normal)
    if not cannot_refract(ratio, cos_theta):
        choice, state = next_uniform(state)
        if choice >= schlick_reflectance(cos_theta, ratio):
            scattered_direction = refract(incident_direction, normal, ratio)

    return tm.normalize(scattered_direction), attenuation, state


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_iors[material_idx]
