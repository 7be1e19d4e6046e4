"""Closest-hit queries against the list of scene spheres.

Spheres are stored in Taichi fields (structure-of-arrays) and tested with a
linear scan. The scan keeps a shrinking search interval: once a hit at
distance t is found, later spheres are only tested against [t_min, t], so
the closest surface always wins and farther spheres are rejected early.

When two spheres are hit at exactly the same t, the one added first wins.

Example:
    >>> from pathtracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # intersect_scene is called from kernels
"""

import taichi as ti
import taichi.math as tm

from pathtracer.geometry.hit import HitRecord
from pathtracer.geometry.sphere import Sphere, hit_sphere

# Device vector type
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """A sphere hit together with the material of the sphere.

    Attributes:
        hit: 1 if some sphere was hit, else 0.
        t: Ray parameter of the hit.
        point: origin + t * direction.
        normal: Unit surface normal, oriented against the incoming ray.
        front_face: 1 if the ray arrived from outside the sphere.
        material_id: The material ID of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 2048

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Append a sphere to the sphere list.

    Args:
        center: Sphere center in world space.
        radius: The radius of the sphere. Negative radii flip the normals.
        material_id: Unified material ID from the scene manager.

    Returns:
        The new sphere's index.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    index = num_spheres[None]
    if index >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[index] = [float(c) for c in center]
    sphere_radii[index] = radius
    sphere_material_ids[index] = material_id
    num_spheres[None] = index + 1
    return index


def get_sphere_count() -> int:
    """Number of spheres currently stored."""
    return int(num_spheres[None])


@ti.func
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _scene_miss() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the closest sphere hit by a ray.

    Args:
        ray_origin: Ray origin.
        ray_direction: The unit direction of the ray.
        t_min: Lower end of the accepted interval.
        t_max: Upper end of the accepted interval.

    Returns:
        A SceneHitRecord for the smallest t in [t_min, t_max], or a miss
        record if no sphere was hit.
    """
    closest_t = t_max
    result = _scene_miss()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        # Strict comparison keeps the earlier sphere on an exact tie
        if rec.hit == 1 and (result.hit == 0 or rec.t < closest_t):
            closest_t = rec.t
            result = _to_scene_hit_record(rec, sphere_material_ids[i])

    return result
