"""Materials module for surface scattering.

Components:
    diffuse: Lambertian reflection around the normal
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like reflection and refraction

Each material module owns a Taichi field table of its parameters. The
scene manager maps unified material IDs onto these tables and dispatches
scattering by material kind.
"""

from .dielectric import (
    add_dielectric_material,
    cannot_refract,
    clear_dielectric_materials,
    get_dielectric_ior,
    get_dielectric_material_count,
    refraction_ratio_for,
    scatter_dielectric,
)
from .diffuse import (
    add_diffuse_material,
    clear_diffuse_materials,
    get_diffuse_albedo,
    get_diffuse_material_count,
    scatter_diffuse,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
)

__all__ = [
    # Diffuse
    "scatter_diffuse",
    "add_diffuse_material",
    "clear_diffuse_materials",
    "get_diffuse_albedo",
    "get_diffuse_material_count",
    # Metal
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_albedo",
    "get_metal_fuzz",
    "get_metal_material_count",
    # Dielectric
    "scatter_dielectric",
    "refraction_ratio_for",
    "cannot_refract",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_ior",
    "get_dielectric_material_count",
]
