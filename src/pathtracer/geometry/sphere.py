"""Sphere primitive and ray-sphere intersection.

Substituting the ray into the implicit sphere equation gives a quadratic in
t. With oc = center - origin the coefficients are

    a = |D|^2
    h = D . oc           (half of the linear coefficient)
    c = |oc|^2 - r^2

and the discriminant is h^2 - a*c. Working with h instead of b = -2h keeps
the discriminant small and avoids a subtraction of two large numbers.

The nearer root is tried first; a root is accepted only when the query
interval surrounds it (strict bounds), which keeps rays leaving a surface
from hitting it again at t ~ 0.

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi()
    >>> from pathtracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from pathtracer.core.interval import Interval, interval_surrounds
from pathtracer.core.ray import Ray, ray_at
from pathtracer.core.vector import dot, length_squared, real, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (non-negative).
        material_id: Unified material ID of the surface (see scene.manager).
    """

    center: vec3
    radius: real
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal, always facing against the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the ray arrived from outside the surface, 0 if from
            inside. Only valid if hit == 1.
        material_id: Material of the hit surface, -1 on a miss.
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def set_face_normal(ray: Ray, outward_normal: vec3):
    """Orient a unit outward normal against the incoming ray.

    Args:
        ray: The incoming ray.
        outward_normal: Unit normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal). front_face is 1 when the ray approaches
        from outside, in which case normal is the outward normal; otherwise
        normal is its negation.
    """
    front_face = 0
    normal = -outward_normal
    if dot(ray.direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Find the nearest intersection of a ray with a sphere inside ray_t.

    Args:
        ray: The ray to test (direction need not be normalised).
        sphere: The sphere to test against.
        ray_t: Admissible ray parameters; both bounds are exclusive.

    Returns:
        A HitRecord for the nearest admissible root, or a miss record.
    """
    result = make_miss_record()

    oc = sphere.center - ray.origin
    a = length_squared(ray.direction)
    h = dot(ray.direction, oc)
    c = length_squared(oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    if discriminant >= 0.0:
        sqrtd = ti.sqrt(discriminant)

        root = (h - sqrtd) / a
        valid = interval_surrounds(ray_t, root)
        if not valid:
            root = (h + sqrtd) / a
            valid = interval_surrounds(ray_t, root)

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: real, material_id: ti.i32) -> Sphere:
    """Create a sphere, clamping a negative radius to zero."""
    return Sphere(center=center, radius=ti.max(radius, 0.0), material_id=material_id)
