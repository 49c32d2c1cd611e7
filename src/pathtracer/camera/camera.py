"""Positionable thin-lens camera for primary ray generation.

This module implements the camera that turns pixel coordinates into primary
rays. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios (the image height is derived from the width)
- Jittered sampling inside each pixel square for anti-aliasing
- Defocus blur by sampling ray origins on a lens disk

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the plane of perfect focus, focus_dist in front of the
camera. Pixel (0, 0) is the top-left pixel; the vertical pixel delta points
down the image so rows are produced top to bottom.

Example:
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi()
    >>> from pathtracer.camera.camera import CameraConfig, setup_camera, get_ray
    >>>
    >>> config = CameraConfig(aspect_ratio=16.0 / 9.0, image_width=400)
    >>> setup_camera(config)
    >>>
    >>> # Generate a sampled ray for pixel (i, j) inside a kernel
    >>> # ray = get_ray(i, j)
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.vector import (
    degrees_to_radians,
    random_double,
    random_in_unit_disk,
    real,
    vec3,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass
class CameraConfig:
    """Configuration for the camera and the image it produces.

    Attributes:
        aspect_ratio: Ratio of image width over height.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Count of random samples for each pixel.
        max_depth: Maximum number of ray bounces into the scene.
        vfov: Vertical view angle (field of view) in degrees.
        lookfrom: Point the camera is looking from.
        lookat: Point the camera is looking at.
        vup: Camera-relative "up" direction.
        defocus_angle: Variation angle of rays through each pixel, in degrees.
            Zero or less disables defocus blur.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_dist: float = 10.0

    @property
    def image_height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))

    @property
    def pixel_samples_scale(self) -> float:
        """Color scale factor for a sum of pixel samples."""
        return 1.0 / self.samples_per_pixel

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ValueError: If a size, sample count or distance is not positive,
                or the view direction is undefined. A max_depth of zero or
                less is allowed and renders black.
        """
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")

        view = np.subtract(self.lookfrom, self.lookat, dtype=np.float64)
        if not np.any(view):
            raise ValueError("lookfrom and lookat must be different points")
        if not np.any(np.cross(np.asarray(self.vup, dtype=np.float64), view)):
            raise ValueError("vup must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera center (lookfrom)
_camera_center = ti.Vector.field(3, dtype=real, shape=())

# Location of pixel (0, 0) and offsets to the neighbouring pixels
_pixel00_loc = ti.Vector.field(3, dtype=real, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=real, shape=())  # Right
_pixel_delta_v = ti.Vector.field(3, dtype=real, shape=())  # Down

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=real, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=real, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=real, shape=())  # Backward (opposite view)

# Defocus disk horizontal and vertical radius vectors
_defocus_disk_u = ti.Vector.field(3, dtype=real, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=real, shape=())
_defocus_angle = ti.field(dtype=real, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(config: CameraConfig) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis, the viewport on the focus plane
    and the defocus disk, then stores them in Taichi fields. This must be
    called before any ray is generated.

    Args:
        config: Camera configuration.

    Raises:
        ValueError: If the configuration is invalid.
    """
    config.validate()

    image_width = config.image_width
    image_height = config.image_height

    center = np.array(config.lookfrom, dtype=np.float64)
    lookat = np.array(config.lookat, dtype=np.float64)
    vup = np.array(config.vup, dtype=np.float64)

    # Viewport dimensions on the focus plane
    theta = degrees_to_radians(config.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * config.focus_dist
    viewport_width = viewport_height * (image_width / image_height)

    # Calculate the u, v, w unit basis vectors for the camera coordinate frame
    w = center - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    # Vectors across the horizontal and down the vertical viewport edges
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = (
        center - config.focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
    )
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_theta = degrees_to_radians(config.defocus_angle)
    defocus_radius = config.focus_dist * math.tan(defocus_theta / 2.0)

    _camera_center[None] = center.tolist()
    _pixel00_loc[None] = pixel00_loc.tolist()
    _pixel_delta_u[None] = pixel_delta_u.tolist()
    _pixel_delta_v[None] = pixel_delta_v.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _defocus_disk_u[None] = (u * defocus_radius).tolist()
    _defocus_disk_v[None] = (v * defocus_radius).tolist()
    _defocus_angle[None] = float(config.defocus_angle)

    logger.debug(
        f"Camera set up: {image_width}x{image_height}, vfov={config.vfov}, "
        f"defocus_angle={config.defocus_angle}, focus_dist={config.focus_dist}"
    )


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def sample_square() -> vec3:
    """Random point in the [-0.5, -0.5] to [+0.5, +0.5] unit square."""
    return vec3(random_double() - 0.5, random_double() - 0.5, 0.0)


@ti.func
def defocus_disk_sample() -> vec3:
    """Random point on the camera defocus disk."""
    p = random_in_unit_disk()
    return _camera_center[None] + (p[0] * _defocus_disk_u[None]) + (p[1] * _defocus_disk_v[None])


@ti.func
def pixel_sample_location(i: ti.i32, j: ti.i32, offset: vec3) -> vec3:
    """Point on the viewport for pixel (i, j) shifted by a sub-pixel offset."""
    return (
        _pixel00_loc[None]
        + ((i + offset[0]) * _pixel_delta_u[None])
        + ((j + offset[1]) * _pixel_delta_v[None])
    )


@ti.func
def get_ray_with_offset(i: ti.i32, j: ti.i32, offset: vec3) -> Ray:
    """Generate a ray from the camera center through an offset pixel location.

    This is the deterministic part of get_ray(): no lens sampling, the
    sub-pixel offset is given explicitly. An offset of (0, 0, 0) aims at the
    pixel center.

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).
        offset: Sub-pixel offset; only the x and y components are used.

    Returns:
        A Ray from the camera center. The direction is not normalized.
    """
    origin = _camera_center[None]
    return make_ray(origin, pixel_sample_location(i, j, offset) - origin)


@ti.func
def get_ray(i: ti.i32, j: ti.i32) -> Ray:
    """Generate a sampled camera ray for pixel (i, j).

    The ray originates from the defocus disk (or the camera center when
    defocus is disabled) and is directed at a randomly sampled point around
    the pixel location.

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).

    Returns:
        A Ray whose direction is not normalized.
    """
    offset = sample_square()
    pixel_sample = pixel_sample_location(i, j, offset)

    ray_origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        ray_origin = defocus_disk_sample()

    return make_ray(ray_origin, pixel_sample - ray_origin)


# =============================================================================
# Utility Functions
# =============================================================================


def _as_tuple(vector_field) -> tuple[float, float, float]:
    vec = vector_field[None]
    return (float(vec[0]), float(vec[1]), float(vec[2]))


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with center, u, v, w, pixel00, pixel_delta_u,
        pixel_delta_v, defocus_disk_u and defocus_disk_v.
    """
    return {
        "center": _as_tuple(_camera_center),
        "u": _as_tuple(_camera_u),
        "v": _as_tuple(_camera_v),
        "w": _as_tuple(_camera_w),
        "pixel00": _as_tuple(_pixel00_loc),
        "pixel_delta_u": _as_tuple(_pixel_delta_u),
        "pixel_delta_v": _as_tuple(_pixel_delta_v),
        "defocus_disk_u": _as_tuple(_defocus_disk_u),
        "defocus_disk_v": _as_tuple(_defocus_disk_v),
    }
