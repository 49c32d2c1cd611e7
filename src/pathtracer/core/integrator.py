"""Path tracing integrator and scanline render loop.

This module estimates the color seen along camera rays by bouncing them
through the scene according to the material at each hit, and drives the
render loop that turns those estimates into an image.

The color of a ray is the product of the attenuations of every surface it
scatters off, times the sky color where it finally escapes. A ray that is
absorbed, or that runs out of bounce depth, contributes black.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Hard bounce limit (no Russian roulette)
    - Gradient sky as the only light source
    - Self-intersection avoidance by ignoring hits closer than RAY_T_MIN
    - Serialized rendering so a fixed seed reproduces the same image

Rows are rendered top to bottom, one kernel launch per row, and each pixel
is the average of samples_per_pixel jittered camera rays, gamma encoded and
quantised to bytes.

Example:
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi(seed=42)
    >>> from pathtracer.camera.camera import CameraConfig
    >>> from pathtracer.core.integrator import render
    >>> from pathtracer.scene.manager import SceneManager
    >>>
    >>> scene = SceneManager()
    >>> scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.5, 0.5, 0.5))
    >>> pixels = list(render(scene, CameraConfig(image_width=40)))
"""

import logging
from collections.abc import Callable, Iterator

import numpy as np
import taichi as ti

from pathtracer.camera.camera import CameraConfig, get_ray, setup_camera
from pathtracer.core.color import byte3, to_byte_color
from pathtracer.core.interval import INFINITY, make_interval
from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.vector import real, unit_vector, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.dielectric import scatter_dielectric_by_id
from pathtracer.materials.lambertian import scatter_lambertian_by_id
from pathtracer.materials.material import ScatterRecord, make_absorbed_record
from pathtracer.materials.metal import scatter_metal_by_id
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.manager import (
    MaterialType,
    SceneManager,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Hits closer than this are ignored to avoid shadow acne
RAY_T_MIN = 0.001

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 1152

# Widest row render() can stream; images past MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
# are streamed without being kept in the image buffers
MAX_ROW_WIDTH = 8192

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Averaged linear color per pixel, indexed [row, column] with row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=real, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Quantised bytes per pixel, same layout
_pixel_buffer = ti.Vector.field(3, dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Bytes of the most recently rendered row
_row_buffer = ti.Vector.field(3, dtype=ti.i32, shape=MAX_ROW_WIDTH)

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_HEIGHT x MAX_IMAGE_WIDTH
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _pixel_buffer.fill(0)
    _row_buffer.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Dispatch to the scatter function of the material that was hit.

    Args:
        ray_in: The incoming ray.
        rec: The hit record; rec.material_id selects the material.

    Returns:
        The material's ScatterRecord. Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    srec = make_absorbed_record()

    if mat_type == int(MaterialType.LAMBERTIAN):
        srec = scatter_lambertian_by_id(type_index, ray_in, rec)

    elif mat_type == int(MaterialType.METAL):
        srec = scatter_metal_by_id(type_index, ray_in, rec)

    elif mat_type == int(MaterialType.DIELECTRIC):
        srec = scatter_dielectric_by_id(type_index, ray_in, rec)

    return srec


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def sky_color(ray: Ray) -> vec3:
    """Background color for a ray that escapes the scene.

    Blends white at the horizon to light blue overhead by the height of the
    normalised direction.
    """
    unit_direction = unit_vector(ray.direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * vec3(1.0, 1.0, 1.0) + a * vec3(0.5, 0.7, 1.0)


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the color seen along a ray.

    Follows the ray through at most depth scattering events. The running
    attenuation holds the product of the attenuations picked up so far.

    Args:
        ray: The ray to trace.
        depth: Remaining bounce budget. Zero or less yields black.

    Returns:
        The linear color: black when the ray is absorbed or runs out of
        depth, otherwise the attenuation times the sky color.
    """
    color = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(1.0, 1.0, 1.0)

    origin = ray.origin
    direction = ray.direction
    remaining = depth

    # Taichi functions cannot recurse, so the bounce recursion is a loop
    active = 1
    while active == 1:
        if remaining <= 0:
            active = 0
        else:
            current = make_ray(origin, direction)
            rec = intersect_scene(current, make_interval(RAY_T_MIN, INFINITY))

            if rec.hit == 1:
                srec = scatter_material(current, rec)
                if srec.scattered == 1:
                    attenuation *= srec.attenuation
                    origin = srec.origin
                    direction = srec.direction
                    remaining -= 1
                else:
                    active = 0
            else:
                color = attenuation * sky_color(current)
                active = 0

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_row(
    j: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    pixel_samples_scale: real,
    store_image: ti.i32,
):
    """Render one row of pixels into the row buffer.

    Args:
        j: Row index (0 = top).
        width: Image width in pixels.
        samples_per_pixel: Camera rays averaged per pixel.
        max_depth: Bounce budget for each camera ray.
        pixel_samples_scale: 1 / samples_per_pixel.
        store_image: If 1, also write the row into the image buffers.
    """
    ti.loop_config(serialize=True)
    for i in range(width):
        pixel_color = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            pixel_color += ray_color(get_ray(i, j), max_depth)

        linear = pixel_samples_scale * pixel_color
        encoded = to_byte_color(linear)

        _row_buffer[i] = encoded
        if store_image == 1:
            _color_buffer[j, i] = linear
            _pixel_buffer[j, i] = encoded


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    return ray_color(make_ray(origin, direction), depth)


@ti.kernel
def _encode_color_kernel(color: vec3) -> byte3:
    return to_byte_color(color)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 10,
) -> tuple[float, float, float]:
    """Trace a single ray against the current scene.

    This is a Python-callable function for testing and debugging. For
    rendering, use render_image() or render().

    Args:
        origin: Ray origin.
        direction: Ray direction (any nonzero length).
        depth: Bounce budget.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_ray_kernel(vec3(*origin), vec3(*direction), depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def encode_color(color: tuple[float, float, float]) -> tuple[int, int, int]:
    """Gamma encode and quantise a linear color on the host."""
    encoded = _encode_color_kernel(vec3(*color))
    return (int(encoded[0]), int(encoded[1]), int(encoded[2]))


def render_scanline(j: int, config: CameraConfig) -> None:
    """Render row j of the image.

    The camera and render target must already be set up for config.

    Args:
        j: Row index (0 = top).
        config: The camera configuration being rendered.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, _ = get_image_dimensions()
    _render_row(
        j,
        width,
        config.samples_per_pixel,
        config.max_depth,
        config.pixel_samples_scale,
        1,
    )


def _prepare_render(config: CameraConfig) -> tuple[int, int]:
    """Set up camera and render target for a new image."""
    setup_camera(config)
    width, height = config.image_width, config.image_height
    setup_render_target(width, height)

    logger.info(
        f"Rendering {width}x{height}, {config.samples_per_pixel} samples/pixel, "
        f"max depth {config.max_depth}"
    )
    return width, height


def render_image(
    config: CameraConfig,
    callback: Callable[[int, int], None] | None = None,
) -> None:
    """Render the full image into the render target.

    Rows are rendered top to bottom. Progress is logged per row.

    Args:
        config: Camera and image configuration.
        callback: Optional function called as callback(rows_done, height)
            after each row.

    Raises:
        ValueError: If the configuration is invalid or the image too large.
    """
    _, height = _prepare_render(config)

    for j in range(height):
        logger.debug(f"Scanlines remaining: {height - j}")
        render_scanline(j, config)
        if callback is not None:
            callback(j + 1, height)

    logger.info("Done.")


def render(scene: SceneManager, config: CameraConfig) -> Iterator[tuple[int, int, int]]:
    """Render the scene and stream the pixels.

    Yields one (r, g, b) byte triple per pixel in row-major order, top row
    first and left to right. Each row is rendered just before its pixels
    are yielded, so consumers can write output while rendering continues.

    Images that fit in the render target are also kept there, readable with
    get_image_numpy() and get_pixels_numpy() once the stream is exhausted.
    Larger images (up to MAX_ROW_WIDTH wide, any height) are only streamed
    and leave the render target unset.

    Scene data lives in global Taichi fields, so only the most recently
    built or cleared SceneManager can be rendered.

    Args:
        scene: The scene to render. Its spheres and materials must not be
            modified until the generator is exhausted.
        config: Camera and image configuration.

    Yields:
        Integer RGB triples with components in [0, 255].

    Raises:
        ValueError: If the configuration is invalid or the image is wider
            than MAX_ROW_WIDTH.
        RuntimeError: If the fields no longer hold scene's contents.
    """
    if not scene.is_active():
        raise RuntimeError(
            "Scene is not the active scene; another SceneManager has replaced it"
        )

    config.validate()
    width, height = config.image_width, config.image_height
    if width > MAX_ROW_WIDTH:
        raise ValueError(f"Image width {width} exceeds maximum supported ({MAX_ROW_WIDTH})")

    logger.debug(
        f"Scene: {scene.get_sphere_count()} spheres, {scene.get_material_count()} materials"
    )
    store_image = width <= MAX_IMAGE_WIDTH and height <= MAX_IMAGE_HEIGHT
    if store_image:
        _prepare_render(config)
    else:
        setup_camera(config)
        _render_target_initialized[None] = 0
        logger.info(f"Streaming {width}x{height} without keeping the image")

    for j in range(height):
        logger.debug(f"Scanlines remaining: {height - j}")
        _render_row(
            j,
            width,
            config.samples_per_pixel,
            config.max_depth,
            config.pixel_samples_scale,
            1 if store_image else 0,
        )
        row = _row_buffer.to_numpy()[:width]
        for r, g, b in row:
            yield (int(r), int(g), int(b))

    logger.info("Done.")


def get_image_numpy() -> np.ndarray:
    """Get the averaged linear colors as a NumPy array.

    Returns:
        Array of shape (height, width, 3) with dtype float64, row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return _color_buffer.to_numpy()[:height, :width, :].astype(np.float64)


def get_pixels_numpy() -> np.ndarray:
    """Get the quantised pixels as a NumPy array.

    Returns:
        Array of shape (height, width, 3) with dtype uint8, row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return _pixel_buffer.to_numpy()[:height, :width, :].astype(np.uint8)
