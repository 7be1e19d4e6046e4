"""Hit record produced by a successful ray-surface intersection.

A hit record packages the contact point, the parametric distance along the
ray, and a unit normal that always faces against the incoming ray:

    dot(ray_direction, hit.normal) <= 0

``front_face`` records whether the geometric outward normal already
satisfied this before it was flipped, i.e. whether the ray arrived from
outside the surface.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray met the surface.
        normal: Unit surface normal, oriented against the incoming ray.
        front_face: 1 if the ray hit the outside of the surface, 0 otherwise.

    All fields other than ``hit`` are only meaningful when hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def make_hit_record(ray_direction: vec3, point: vec3, outward_normal: vec3, t: ti.f32) -> HitRecord:
    """Build a hit record, orienting the normal against the ray.

    Args:
        ray_direction: Direction of the incoming ray.
        point: The contact point.
        outward_normal: The unit geometric normal pointing out of the surface.
        t: The parametric distance of the contact point.

    Returns:
        A HitRecord with hit == 1.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return HitRecord(hit=1, t=t, point=point, normal=normal, front_face=front_face)


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )
