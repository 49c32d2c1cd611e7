"""Preview module for image output.

Example:
    >>> from pathtracer.preview import save_image
    >>> save_image(pixels, "final.png")
"""

from pathtracer.preview.export import (
    compute_rmse,
    pixels_to_array,
    save_image,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    "write_ppm",
    "pixels_to_array",
    "save_ppm",
    "save_png",
    "save_image",
    "compute_rmse",
]
