"""Unified scene manager coordinating spheres and materials.

The material model is a closed set of kinds (diffuse, metal, dielectric,
opaque). Each kind keeps its parameters in its own field table; the
manager assigns every material a unified ``material_id`` and records which
kind it is and where its parameters live:

    material_types[material_id]        -> MaterialType
    material_type_indices[material_id] -> index into the kind's table

Spheres store only the material id, so any number of spheres can share one
material without copying it.

Example:
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> glass = scene.add_dielectric_material(ior=1.5)
    >>> scene.add_sphere((0, 1, 0), 1.0, glass)
    >>> scene.add_sphere((0, 1, 0), -0.9, glass)  # hollow shell
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from pathtracer.core.vector import Color, Point3, as_color, as_point3
from pathtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_ior,
    scatter_dielectric,
)
from pathtracer.materials.diffuse import (
    add_diffuse_material,
    clear_diffuse_materials,
    get_diffuse_albedo,
    scatter_diffuse,
)
from pathtracer.materials.metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    scatter_metal,
)
from pathtracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Closed set of material kinds, used for dispatch in the integrator."""

    DIFFUSE = 0
    METAL = 1
    DIELECTRIC = 2
    OPAQUE = 3


# Maximum number of materials across all kinds
MAX_MATERIALS = 4096

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the kind-local index for material_id i
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material kind for a material ID, or -1 if it is unknown."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the index into the kind-specific table, or -1 if unknown."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the scatter function of a material's kind.

    Opaque materials and unknown ids absorb the ray.

    Args:
        material_id: The unified material ID of the hit surface.
        incident_direction: The unit incoming ray direction.
        normal: The unit surface normal, facing against the incoming ray.
        front_face: 1 if the ray hit the outside of the surface.
        state: The caller's random generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
        When did_scatter is 0 the attenuation and direction are zero.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    scattered_direction = vec3(0.0, 0.0, 0.0)

    if mat_type == int(MaterialType.DIFFUSE):
        albedo = get_diffuse_albedo(type_index)
        scattered_direction, attenuation, state = scatter_diffuse(albedo, normal, state)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter, state = scatter_metal(
            albedo, fuzz, incident_direction, normal, state
        )
        if did_scatter == 0:
            attenuation = vec3(0.0, 0.0, 0.0)

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation, state = scatter_dielectric(
            ior, incident_direction, normal, front_face, state
        )
        did_scatter = 1

    return did_scatter, attenuation, scattered_direction, state


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The kind of material.
        type_index: The index within the kind-specific table.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    sphere_index: int
    center: Point3
    radius: float
    material_id: int


class SceneManager:
    """Builds the scene: a material table plus an ordered list of spheres.

    A scene is built once before rendering and is read-only while kernels
    run. Creating a SceneManager clears any previously stored scene, since
    the underlying Taichi fields are process-wide.

    Attributes:
        materials: MaterialInfo for every registered material, by id.
        spheres: SphereInfo for every sphere, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_diffuse_material(albedo=(0.5, 0.5, 0.5))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> scene.add_sphere((0, -1000, 0), 1000.0, ground)
        >>> scene.add_sphere((4, 1, 0), 1.0, gold)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_diffuse_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self, material_type: MaterialType, type_index: int, params: dict[str, Any]
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_diffuse_material(self, albedo: Color | tuple[float, float, float]) -> int:
        """Add a diffuse material and return its material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        albedo = as_color(albedo)
        type_index = add_diffuse_material(tuple(albedo))
        return self._register_material(MaterialType.DIFFUSE, type_index, {"albedo": tuple(albedo)})

    def add_metal_material(
        self,
        albedo: Color | tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal material and return its material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or fuzz is outside [0, 1].
        """
        albedo = as_color(albedo)
        type_index = add_metal_material(tuple(albedo), fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Add a dielectric material and return its material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If IOR is not positive.
        """
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def add_opaque_material(self) -> int:
        """Add an absorb-only material and return its material ID.

        Rays hitting an opaque surface are absorbed and contribute black.
        """
        return self._register_material(MaterialType.OPAQUE, 0, {})

    def get_material_count(self) -> int:
        return len(self.materials)

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get the MaterialInfo for a material ID, or None if unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: Point3 | tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere referencing an existing material.

        Args:
            center: The center of the sphere.
            radius: The radius. Negative radii produce inward-facing normals.
            material_id: A material ID returned by one of the add_*_material
                methods.

        Returns:
            The index of the sphere.

        Raises:
            ValueError: If the material ID is unknown or the radius is zero.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        if self.get_material_info(material_id) is None:
            raise ValueError(
                f"Unknown material_id {material_id}; "
                f"{len(self.materials)} materials are registered"
            )
        if radius == 0.0:
            raise ValueError("Sphere radius must be non-zero")

        center = as_point3(center)
        sphere_index = add_sphere(tuple(center), radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_diffuse_sphere(
        self,
        center: Point3 | tuple[float, float, float],
        radius: float,
        albedo: Color | tuple[float, float, float],
    ) -> int:
        """Add a sphere with a new diffuse material."""
        return self.add_sphere(center, radius, self.add_diffuse_material(albedo))

    def add_metal_sphere(
        self,
        center: Point3 | tuple[float, float, float],
        radius: float,
        albedo: Color | tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a sphere with a new metal material."""
        return self.add_sphere(center, radius, self.add_metal_material(albedo, fuzz))

    def add_dielectric_sphere(
        self,
        center: Point3 | tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> int:
        """Add a sphere with a new dielectric material."""
        return self.add_sphere(center, radius, self.add_dielectric_material(ior))

    def get_sphere_count(self) -> int:
        """Get the number of spheres stored in the Taichi fields."""
        return get_sphere_count()

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Describe the scene as plain data.

        Returns:
            A dict with "materials" and "spheres" lists, suitable for JSON.
        """
        return {
            "materials": [
                {"type": info.material_type.name.lower(), **info.params}
                for info in self.materials
            ],
            "spheres": [
                {
                    "center": tuple(info.center),
                    "radius": info.radius,
                    "material_id": info.material_id,
                }
                for info in self.spheres
            ],
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the scene with one described by ``to_dict`` output.

        Raises:
            ValueError: If a material type is not recognized.
        """
        self.clear()

        for material in data.get("materials", []):
            kind = material.get("type")
            if kind == "diffuse":
                self.add_diffuse_material(material["albedo"])
            elif kind == "metal":
                self.add_metal_material(material["albedo"], material.get("fuzz", 0.0))
            elif kind == "dielectric":
                self.add_dielectric_material(material.get("ior", 1.5))
            elif kind == "opaque":
                self.add_opaque_material()
            else:
                raise ValueError(f"Unknown material type: {kind!r}")

        for sphere in data.get("spheres", []):
            self.add_sphere(sphere["center"], sphere["radius"], sphere["material_id"])

        logger.debug(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS

    def __repr__(self) -> str:
        return f"SceneManager(materials={len(self.materials)}, spheres={len(self.spheres)})"
