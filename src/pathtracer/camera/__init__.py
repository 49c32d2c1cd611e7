"""Camera module for view and ray generation.

The camera maps pixel (i, j), with (0, 0) at the top-left, to a jittered
primary ray. A positive defocus angle spreads ray origins over a lens disk
for depth of field.
"""

from .camera import (
    CameraConfig,
    defocus_disk_sample,
    get_camera_info,
    get_ray,
    get_ray_with_offset,
    sample_square,
    setup_camera,
)

__all__ = [
    "CameraConfig",
    "setup_camera",
    "get_ray",
    "get_ray_with_offset",
    "sample_square",
    "defocus_disk_sample",
    "get_camera_info",
]
