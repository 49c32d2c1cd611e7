"""Scene-level nearest-hit queries.

Spheres are stored in Taichi fields (structure of arrays). A scene query
walks every sphere and narrows the upper bound of the admissible interval to
the closest hit found so far, so a later sphere can only replace the current
hit by being strictly nearer. The result is the globally nearest hit no
matter the insertion order; only exact ties depend on order, and there the
earlier sphere wins.

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi()
    >>> from pathtracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from pathtracer.core.interval import Interval, make_interval
from pathtracer.core.ray import Ray
from pathtracer.core.vector import real
from pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=real, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=real, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is not cleared but will
    be overwritten when new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere. Negative values are clamped to 0.
        material_id: The unified material ID of the sphere's surface.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [float(center[0]), float(center[1]), float(center[2])]
    sphere_radii[idx] = max(0.0, float(radius))
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(i: ti.i32) -> Sphere:
    """Load sphere i from the scene fields."""
    return Sphere(
        center=sphere_centers[i],
        radius=sphere_radii[i],
        material_id=sphere_material_ids[i],
    )


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> HitRecord:
    """Find the nearest intersection of a ray with the scene.

    Args:
        ray: The ray to test.
        ray_t: Admissible ray parameters (exclusive bounds).

    Returns:
        The HitRecord of the nearest sphere hit inside ray_t, or a miss
        record (hit == 0, material_id == -1).
    """
    closest_so_far = ray_t.hi
    result = make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), make_interval(ray_t.lo, closest_so_far))
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result
