"""Dielectric (glass/water) material implementation.

This module implements the dielectric BSDF, which models transparent materials
like glass and water with refraction and Fresnel reflectance.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1

Where refraction is possible the material picks reflection with probability
equal to the Schlick reflectance and refraction otherwise, so one sample
follows one branch and the average over samples is correct.

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi()
    >>> from pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # srec = scatter_dielectric(ior, ray_in, rec)
"""

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import (
    dot,
    random_double,
    real,
    reflect,
    refract,
    schlick_reflectance,
    unit_vector,
    vec3,
)
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.material import ScatterRecord


@ti.func
def refraction_ratio(ior: real, front_face: ti.i32) -> real:
    """Ratio of refractive indices seen by the incoming ray.

    Entering the medium (front face) the ratio is 1 / ior, leaving it the
    ratio is ior.
    """
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def cannot_refract(ratio: real, unit_direction: vec3, normal: vec3) -> ti.i32:
    """Check for total internal reflection.

    Args:
        ratio: Ratio of refractive indices (incident / transmitted).
        unit_direction: The normalised incoming direction.
        normal: The surface normal facing against the ray.

    Returns:
        1 if Snell's law has no solution and the ray must reflect.
    """
    cos_theta = ti.min(dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return ratio * sin_theta > 1.0


@ti.func
def dielectric_reflectance(ratio: real, unit_direction: vec3, normal: vec3) -> real:
    """Schlick reflectance for a ray hitting a dielectric boundary."""
    cos_theta = ti.min(dot(-unit_direction, normal), 1.0)
    return schlick_reflectance(cos_theta, ratio)


@ti.func
def scatter_dielectric(ior: real, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter a ray at a dielectric boundary.

    Dielectrics never absorb: the attenuation is white and the ray always
    continues, either reflected or refracted.

    Args:
        ior: Index of refraction of the material.
        ray_in: The incoming ray (any direction length).
        rec: The hit record; rec.normal faces against the ray and
            rec.front_face tells whether the ray is entering the material.

    Returns:
        A ScatterRecord with scattered == 1 and attenuation (1, 1, 1).
    """
    ratio = refraction_ratio(ior, rec.front_face)
    unit_direction = unit_vector(ray_in.direction)

    # Total internal reflection, otherwise reflect with the Fresnel probability
    reflects = cannot_refract(ratio, unit_direction, rec.normal)
    if not reflects:
        reflects = random_double() < dielectric_reflectance(ratio, unit_direction, rec.normal)

    direction = vec3(0.0, 0.0, 0.0)
    if reflects:
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, ratio)

    return ScatterRecord(
        scattered=1,
        attenuation=vec3(1.0, 1.0, 1.0),
        origin=rec.point,
        direction=direction,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=real, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = float(ior)
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> real:
    """Get the IOR for a dielectric material by index."""
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter off a dielectric material looked up by registry index."""
    return scatter_dielectric(get_dielectric_ior(material_idx), ray_in, rec)
