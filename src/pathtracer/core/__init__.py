"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    runtime: Taichi initialisation with an explicit random seed
    vector: 3-vector algebra and random sampling helpers
    ray: Ray data structure
    interval: Closed/open real intervals used to bound ray parameters
    color: Gamma encoding and 8-bit quantisation
    integrator: Ray color estimation and the scanline render loop

All per-ray math runs inside Taichi functions.
"""

from .color import byte3, linear_to_gamma, to_byte, to_byte_color
from .interval import (
    EMPTY,
    INFINITY,
    UNIVERSE,
    Interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
)
from .ray import Ray, make_ray, ray_at
from .runtime import init_taichi
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    random_double,
    random_in_unit_disk,
    random_on_hemisphere,
    random_unit_vector,
    real,
    reflect,
    refract,
    schlick_reflectance,
    unit_vector,
    vec3,
)

# Note: integrator is NOT imported here; it declares Taichi fields and pulls in
# the scene and camera modules. Import it directly from pathtracer.core.integrator.

__all__ = [
    "init_taichi",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "real",
    "length",
    "length_squared",
    "normalize",
    "unit_vector",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_double",
    "random_unit_vector",
    "random_on_hemisphere",
    "random_in_unit_disk",
    "Interval",
    "make_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "EMPTY",
    "UNIVERSE",
    "INFINITY",
    "byte3",
    "linear_to_gamma",
    "to_byte",
    "to_byte_color",
]
