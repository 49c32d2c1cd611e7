"""Geometry module for the sphere primitive.

All intersection routines are implemented as Taichi functions (@ti.func).
A query returns a HitRecord whose normal always faces against the ray.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
]
