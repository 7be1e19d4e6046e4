"""Scene module for scene storage and ray-scene queries.

Components:
    intersection: Sphere storage and closest-hit search
    manager: Unified scene manager coordinating spheres and materials
    random_scene: Random sphere field used as the demo scene

Scene data is stored in Taichi fields in Structure-of-Arrays layout and is
read-only while kernels run.
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    scatter,
)
from .random_scene import create_random_scene, default_camera

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "scatter",
    # Random scene
    "create_random_scene",
    "default_camera",
]
