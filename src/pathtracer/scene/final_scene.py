"""Reference "final scene" of many small random spheres.

The scene is a large grey ground sphere covered with a grid of small spheres
of random material, plus three large showcase spheres:
- Center: glass (IOR 1.5)
- Left: brown diffuse
- Right: polished metal

The small spheres are placed at jittered grid positions (a + 0.9 * rand,
0.2, b + 0.9 * rand) for a, b in [-grid, grid). Positions within 0.9 of
(4, 0.2, 0) are skipped so nothing intersects the metal showcase sphere.

Host-side randomness comes from a seeded NumPy generator, so the same seed
always builds the same scene.

Example:
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi()
    >>> from pathtracer.scene.final_scene import create_final_scene, final_scene_camera
    >>>
    >>> scene = create_final_scene(seed=7)
    >>> camera = final_scene_camera()
"""

import logging

import numpy as np

from pathtracer.camera.camera import CameraConfig
from pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Final Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

SMALL_SPHERE_RADIUS = 0.2
SMALL_SPHERE_JITTER = 0.9

# Small spheres closer than this to the exclusion point are skipped
EXCLUSION_POINT = (4.0, 0.2, 0.0)
EXCLUSION_DISTANCE = 0.9

# Material choice thresholds: below DIFFUSE -> Lambertian, below METAL -> metal,
# otherwise glass
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

GLASS_IOR = 1.5

LARGE_SPHERE_RADIUS = 1.0
BROWN_ALBEDO = (0.4, 0.2, 0.1)
POLISHED_METAL_ALBEDO = (0.7, 0.6, 0.5)


def create_final_scene(seed: int = 0, grid: int = 11) -> SceneManager:
    """Build the final scene.

    Args:
        seed: Seed for the host-side random generator that places the small
            spheres and picks their materials.
        grid: Half extent of the small sphere grid. The default 11 gives
            22 x 22 candidate positions.

    Returns:
        A SceneManager holding the scene. Every sphere has its own material.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)

    exclusion = np.array(EXCLUSION_POINT)
    for a in range(-grid, grid):
        for b in range(-grid, grid):
            choose_mat = rng.random()
            center = np.array(
                [
                    a + SMALL_SPHERE_JITTER * rng.random(),
                    SMALL_SPHERE_RADIUS,
                    b + SMALL_SPHERE_JITTER * rng.random(),
                ]
            )

            if np.linalg.norm(center - exclusion) <= EXCLUSION_DISTANCE:
                continue

            center = tuple(center.tolist())
            if choose_mat < DIFFUSE_PROBABILITY:
                # diffuse
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(center, SMALL_SPHERE_RADIUS, tuple(albedo.tolist()))
            elif choose_mat < METAL_PROBABILITY:
                # metal
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = rng.uniform(0.0, 0.5)
                scene.add_metal_sphere(
                    center, SMALL_SPHERE_RADIUS, tuple(albedo.tolist()), float(fuzz)
                )
            else:
                # glass
                scene.add_dielectric_sphere(center, SMALL_SPHERE_RADIUS, GLASS_IOR)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), LARGE_SPHERE_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), LARGE_SPHERE_RADIUS, BROWN_ALBEDO)
    scene.add_metal_sphere((4.0, 1.0, 0.0), LARGE_SPHERE_RADIUS, POLISHED_METAL_ALBEDO, 0.0)

    logger.info(
        f"Final scene: {scene.get_sphere_count()} spheres, "
        f"{scene.get_material_count()} materials (seed={seed})"
    )
    return scene


def final_scene_camera(
    image_width: int = 1200,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
) -> CameraConfig:
    """Camera configuration for the final scene.

    Looks from (13, 2, 3) toward the origin with a 30 degree vertical field
    of view and a slight defocus blur focused 10 units away.
    """
    return CameraConfig(
        aspect_ratio=16.0 / 9.0,
        image_width=image_width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        vfov=30.0,
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=0.6,
        focus_dist=10.0,
    )
