"""Geometry module for ray-primitive intersection.

Components:
    hit: Hit record built with the normal oriented against the ray
    sphere: Sphere primitive (negative radius gives a hollow shell)
"""

from .hit import HitRecord, make_hit_record, make_miss_record
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "make_hit_record",
    "make_miss_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
]
