"""Scene module for primitive storage and scene construction.

Components:
    intersection: Sphere storage in Taichi fields and nearest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    final_scene: The reference scene of many random spheres
"""

from .final_scene import create_final_scene, final_scene_camera
from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Final scene
    "create_final_scene",
    "final_scene_camera",
]
