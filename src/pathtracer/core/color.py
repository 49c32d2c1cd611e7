"""Gamma correction and 8-bit quantisation of linear colors.

The renderer accumulates linear radiance. Before output each channel is
gamma encoded with a square root (gamma 2, close to the sRGB curve), clamped
to [0, 0.999] and scaled to an integer in [0, 255].

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.color import to_byte_color
    >>> from pathtracer.core.vector import vec3
    >>> @ti.kernel
    ... def encode() -> ti.types.vector(3, ti.i32):
    ...     return to_byte_color(vec3(0.25, 1.0, 0.0))  # (128, 255, 0)
"""

import taichi as ti

from pathtracer.core.interval import Interval, interval_clamp
from pathtracer.core.vector import real, vec3

# Integer RGB triple in [0, 255]
byte3 = ti.types.vector(3, ti.i32)

# Channel range after gamma encoding; keeps 256 * x below 256
INTENSITY_MIN = 0.000
INTENSITY_MAX = 0.999


@ti.func
def linear_to_gamma(linear_component: real) -> real:
    """Gamma 2 encode one channel. Non-positive values map to 0."""
    result = 0.0
    if linear_component > 0.0:
        result = ti.sqrt(linear_component)
    return result


@ti.func
def to_byte(linear_component: real) -> ti.i32:
    """Gamma encode, clamp and quantise one channel to [0, 255]."""
    intensity = Interval(lo=INTENSITY_MIN, hi=INTENSITY_MAX)
    encoded = interval_clamp(intensity, linear_to_gamma(linear_component))
    return ti.cast(256.0 * encoded, ti.i32)


@ti.func
def to_byte_color(pixel_color: vec3) -> byte3:
    """Quantise a linear color to an integer RGB triple."""
    return byte3(to_byte(pixel_color.x), to_byte(pixel_color.y), to_byte(pixel_color.z))


@ti.func
def byte_to_linear(byte_value: ti.i32) -> real:
    """Decode a quantised channel back to linear space.

    Uses the midpoint of the quantisation bucket, so decoding an encoded
    value lands within 1/255 of the original for inputs in [0, 1].
    """
    encoded = (ti.cast(byte_value, real) + 0.5) / 256.0
    return encoded * encoded
