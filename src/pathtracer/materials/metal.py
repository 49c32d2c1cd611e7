"""Metal (specular reflective) material implementation.

This module implements the metal BSDF, which models specular reflection with
optional fuzziness. Perfect metals (fuzz=0) produce mirror-like reflections,
while fuzzier metals perturb the reflected direction by a random unit vector
scaled by the fuzz factor.

The reflection formula is:
    R = I - 2(I . N)N

where I is the incident direction and N is the surface normal.

A perturbed direction can end up below the surface. Such rays are absorbed,
which darkens rough metals at grazing angles.

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi()
    >>> from pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # srec = scatter_metal(albedo, fuzz, ray_in, rec)
"""

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import dot, random_unit_vector, real, reflect, unit_vector, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.material import ScatterRecord


@ti.func
def metal_direction(fuzz: real, incident_direction: vec3, normal: vec3) -> vec3:
    """Reflect about the normal and perturb by the fuzz factor.

    Args:
        fuzz: The surface roughness in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length).

    Returns:
        unit_vector(reflect(incident, normal)) + fuzz * random_unit_vector().
    """
    reflected = unit_vector(reflect(incident_direction, normal))
    return reflected + fuzz * random_unit_vector()


@ti.func
def scatter_metal(albedo: vec3, fuzz: real, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter a ray off a metal surface.

    The ray is absorbed when the fuzzed direction points into the surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The surface roughness in [0, 1].
        ray_in: The incoming ray.
        rec: The hit record at the surface.

    Returns:
        A ScatterRecord whose scattered flag is 1 only if the reflected
        direction leaves the surface. Attenuation is the albedo.
    """
    direction = metal_direction(fuzz, ray_in.direction, rec.normal)

    did_scatter = 0
    if dot(direction, rec.normal) > 0.0:
        did_scatter = 1

    return ScatterRecord(
        scattered=did_scatter,
        attenuation=albedo,
        origin=rec.point,
        direction=direction,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 1024

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=real, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=real, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz factor into [0, 1]."""
    return min(max(float(fuzz), 0.0), 1.0)


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
        fuzz: The surface roughness. Values outside [0, 1] are clamped.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If albedo does not have exactly three components.
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = [float(albedo[0]), float(albedo[1]), float(albedo[2])]
    metal_fuzzes[idx] = clamp_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> real:
    """Get the fuzz factor for a metal material by index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter off a metal material looked up by registry index."""
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, ray_in, rec)
