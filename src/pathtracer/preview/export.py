"""Image export utilities for rendered images.

The renderer produces 8-bit RGB triples in row-major order, top row first.
This module turns that pixel stream (or an already assembled array) into
files.

Supported formats:
    - PPM (plain text "P3", written straight from the pixel stream)
    - PNG (8-bit RGB via Pillow)

Example:
    >>> import sys
    >>> from pathtracer.core.integrator import render
    >>> from pathtracer.preview.export import write_ppm
    >>>
    >>> write_ppm(render(scene, config), config.image_width, config.image_height, sys.stdout)
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

Pixel = tuple[int, int, int]


def write_ppm(
    stream: Iterable[Pixel],
    width: int,
    height: int,
    out: TextIO,
) -> int:
    """Write a pixel stream as a plain-text PPM image.

    The header is "P3", the dimensions and the maximum value 255, each on
    its own line, followed by one "r g b" line per pixel.

    Args:
        stream: RGB byte triples in row-major order.
        width: Image width in pixels.
        height: Image height in pixels.
        out: Text stream to write to.

    Returns:
        The number of pixels written.

    Raises:
        ValueError: If the stream does not hold exactly width * height pixels.
    """
    out.write(f"P3\n{width} {height}\n255\n")

    count = 0
    for r, g, b in stream:
        out.write(f"{r} {g} {b}\n")
        count += 1

    if count != width * height:
        raise ValueError(f"Expected {width * height} pixels, got {count}")
    return count


def pixels_to_array(
    stream: Iterable[Pixel],
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """Collect a pixel stream into an image array.

    Args:
        stream: RGB byte triples in row-major order.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Array of shape (height, width, 3) with dtype uint8.

    Raises:
        ValueError: If the stream does not hold exactly width * height pixels.
    """
    flat = np.array(list(stream), dtype=np.uint8)
    if flat.shape != (width * height, 3):
        raise ValueError(f"Expected {width * height} pixels, got {len(flat)}")
    return flat.reshape(height, width, 3)


def save_ppm(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image array as a plain-text PPM file.

    Args:
        pixels: Image array of shape (H, W, 3).
        filepath: Output file path.
    """
    height, width = pixels.shape[:2]
    stream = (tuple(int(c) for c in px) for px in pixels.reshape(-1, 3))
    with open(filepath, "w") as f:
        write_ppm(stream, width, height, f)


def save_png(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image array as a PNG file.

    Args:
        pixels: Image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    pil_image.save(filepath)


def save_image(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image array, choosing the format from the file extension.

    ".ppm" writes plain-text PPM; every other extension is handed to Pillow.
    """
    if Path(filepath).suffix.lower() == ".ppm":
        save_ppm(pixels, filepath)
    else:
        save_png(pixels, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
