"""Vector algebra and random sampling for Monte Carlo ray tracing.

A single 3-component double precision vector type serves as point, direction
and color. Arithmetic (addition, scalar and component-wise products, division)
is Taichi's native vector arithmetic; this module adds the geometric queries
and the random generators the renderer needs.

All random draws use ``ti.random``, seeded by ``init_taichi``.

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi()
    >>> from pathtracer.core.vector import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import math

import taichi as ti
import taichi.math as tm

# Scalar type used for every real-valued quantity
real = ti.f64

# Type alias for 3D vectors (points, directions and colors)
vec3 = ti.types.vector(3, real)

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8

# Lower bound on the squared length of accepted unit-vector samples
MIN_SAMPLE_LENGTH_SQUARED = 1e-160


def degrees_to_radians(degrees: float) -> float:
    """Convert an angle from degrees to radians."""
    return degrees * math.pi / 180.0


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return v.dot(v)


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The zero vector has no direction; passing one is a caller error and
    yields non-finite components.
    """
    return v / length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Alias of unit_vector() matching taichi.math naming."""
    return unit_vector(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component of a vector is close to zero.

    Used to detect degenerate scatter directions.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a unit normal: v - 2 (v . n) n."""
    return v - 2.0 * dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: real) -> vec3:
    """Refract a unit vector through a surface using Snell's law.

    The incident direction is split into the parts perpendicular and parallel
    to the normal. The caller must already have ruled out total internal
    reflection.

    Args:
        uv: Unit incident direction.
        n: Unit surface normal facing against uv.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction (unit length up to rounding).
    """
    cos_theta = ti.min(dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: real, refraction_ratio: real) -> real:
    """Approximate Fresnel reflectance with Schlick's polynomial.

    Args:
        cosine: Cosine of the angle between the incident ray and the normal.
        refraction_ratio: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 where r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_double() -> real:
    """Uniform random real in [0, 1)."""
    return ti.random(real)


@ti.func
def random_range(lo: real, hi: real) -> real:
    """Uniform random real in [lo, hi)."""
    return lo + (hi - lo) * random_double()


@ti.func
def random_vec() -> vec3:
    """Random vector with components uniform in [0, 1)."""
    return vec3(random_double(), random_double(), random_double())


@ti.func
def random_vec_range(lo: real, hi: real) -> vec3:
    """Random vector with components uniform in [lo, hi)."""
    return vec3(random_range(lo, hi), random_range(lo, hi), random_range(lo, hi))


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Rejection-samples the cube [-1, 1]^3 and keeps points inside the unit
    ball, which gives a direction distribution free of pole clustering.
    Points too close to the origin are rejected as well so the final division
    cannot blow up.
    """
    p = vec3(0.0, 0.0, 0.0)
    lensq = 0.0
    found = 0
    while found == 0:
        p = random_vec_range(-1.0, 1.0)
        lensq = length_squared(p)
        if MIN_SAMPLE_LENGTH_SQUARED < lensq and lensq <= 1.0:
            found = 1
    return p / ti.sqrt(lensq)


@ti.func
def random_on_hemisphere(normal: vec3) -> vec3:
    """Random unit vector in the hemisphere around ``normal``.

    Samples the full sphere and flips the result when it points away from
    the normal.
    """
    on_unit_sphere = random_unit_vector()
    result = on_unit_sphere
    if dot(on_unit_sphere, normal) <= 0.0:
        result = -on_unit_sphere
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Random point (x, y, 0) inside the unit disk, by rejection sampling.

    Used for thin-lens depth of field sampling.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    while found == 0:
        p = vec3(random_range(-1.0, 1.0), random_range(-1.0, 1.0), 0.0)
        if length_squared(p) < 1.0:
            found = 1
    return p
