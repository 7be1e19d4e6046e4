"""Image export utilities for rendered images.

Images are 8-bit RGB arrays of shape (height, width, 3), top row first, as
returned by ``Renderer.render()``.

Supported formats:
    - PPM (plain-text P3)
    - PNG (via Pillow)

Example:
    >>> from pathtracer.preview.export import save_image
    >>> image = renderer.render()
    >>> save_image(image, "image.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def _check_image(image: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (height, width, 3), got {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {image.dtype}")
    return image


def format_ppm(image: npt.NDArray[np.uint8]) -> str:
    """Format an 8-bit image as plain-text PPM.

    The output is the header ``P3\\n<width> <height>\\n255\\n`` followed by
    one ``R G B`` line per pixel, row-major from the top row.

    Raises:
        ValueError: If the image is not a (height, width, 3) uint8 array.
    """
    image = _check_image(image)
    height, width, _ = image.shape
    lines = [f"P3\n{width} {height}\n255\n"]
    lines.extend(f"{r} {g} {b}\n" for r, g, b in image.reshape(-1, 3).tolist())
    return "".join(lines)


def save_ppm(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit image as a plain-text PPM file."""
    Path(filepath).write_text(format_ppm(image), encoding="ascii")


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit image as a PNG file using Pillow."""
    image = _check_image(image)
    pil_image = PILImage.fromarray(image)
    pil_image.save(filepath)


def save_image(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit image, choosing the format from the file extension.

    Raises:
        ValueError: If the extension is not .ppm or .png.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".ppm":
        save_ppm(image, filepath)
    elif suffix == ".png":
        save_png(image, filepath)
    else:
        raise ValueError(f"Unsupported image format {suffix!r}; use .ppm or .png")

    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)
