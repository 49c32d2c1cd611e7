"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters toward normal + random_unit_vector(), i.e. to
a random point on the unit sphere tangent to the surface at the hit point.
That distribution is cosine weighted about the normal, so the Monte Carlo
weight of each bounce reduces to the albedo.

When the random unit vector almost exactly cancels the normal the sum is
(nearly) the zero vector; the normal itself is used instead so no zero-length
ray is produced.

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi()
    >>> from pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # srec = scatter_lambertian(albedo, ray_in, rec)
"""

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import near_zero, random_unit_vector, real, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.material import ScatterRecord


@ti.func
def lambertian_direction(normal: vec3) -> vec3:
    """Sample a diffuse scatter direction about a unit normal.

    Args:
        normal: The surface normal at the hit point (unit length).

    Returns:
        normal + random_unit_vector(), or normal when the sum is near zero.
    """
    scatter_direction = normal + random_unit_vector()

    # Catch degenerate scatter direction
    if near_zero(scatter_direction):
        scatter_direction = normal

    return scatter_direction


@ti.func
def scatter_lambertian(albedo: vec3, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter a ray off a Lambertian surface.

    Diffuse surfaces never absorb the ray outright; darkening comes only from
    the albedo.

    Args:
        albedo: The diffuse reflectance color (RGB).
        ray_in: The incoming ray (unused; diffuse scattering ignores it).
        rec: The hit record at the surface.

    Returns:
        A ScatterRecord with scattered == 1 and attenuation == albedo.
    """
    return ScatterRecord(
        scattered=1,
        attenuation=albedo,
        origin=rec.point,
        direction=lambertian_direction(rec.normal),
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=real, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If albedo does not have exactly three components.
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = [float(albedo[0]), float(albedo[1]), float(albedo[2])]
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter off a Lambertian material looked up by registry index."""
    return scatter_lambertian(get_lambertian_albedo(material_idx), ray_in, rec)
