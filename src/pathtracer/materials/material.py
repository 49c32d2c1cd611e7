"""Common scatter result shared by every material model.

A material's scatter function receives the incoming ray and the hit record
and reports whether the ray continues, how much of each color channel
survives, and the continuation ray, which always starts at the hit point.
"""

import taichi as ti

from pathtracer.core.vector import vec3


@ti.dataclass
class ScatterRecord:
    """Outcome of scattering a ray at a surface.

    Attributes:
        scattered: 1 if the ray continues, 0 if it is absorbed.
        attenuation: Per-channel fraction of light kept by the bounce.
        origin: Origin of the continuation ray (the hit point).
        direction: Direction of the continuation ray (not normalised).
    """

    scattered: ti.i32
    attenuation: vec3
    origin: vec3
    direction: vec3


@ti.func
def make_absorbed_record() -> ScatterRecord:
    """Scatter record for a ray the surface absorbed."""
    return ScatterRecord(
        scattered=0,
        attenuation=vec3(0.0, 0.0, 0.0),
        origin=vec3(0.0, 0.0, 0.0),
        direction=vec3(0.0, 0.0, 0.0),
    )
