"""Render driver: settings, progress reporting and 8-bit conversion.

The Renderer splits the image into bands of rows and launches one kernel
per band. After every band it folds the kernel's atomic counters into a
RenderProgress object and calls an optional progress callback. A
monitoring thread may read RenderProgress at any time; its fields are
plain integers that are only ever replaced whole.

Example:
    >>> from pathtracer.core.render import Renderer, RenderSettings
    >>> from pathtracer.scene.random_scene import create_random_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(seed=7)
    >>> setup_camera(camera)
    >>> renderer = Renderer(RenderSettings(width=300, height=200, samples_per_pixel=10))
    >>> image = renderer.render()  # (200, 300, 3) uint8
"""

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from pathtracer.camera.thin_lens import is_camera_initialized
from pathtracer.core.integrator import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    get_linear_image,
    primary_ray,
    render_pixel,
    render_rows,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Callback receives (pixels_done, pixels_total)
ProgressCallback = Callable[[int, int], None]

# Largest 8-bit input before quantization, so 256 * x stays below 256
MAX_CHANNEL_VALUE = 0.999


@dataclass
class RenderSettings:
    """Parameters of a single render.

    Attributes:
        width: Image width in pixels, at least 2.
        height: Image height in pixels, at least 2.
        samples_per_pixel: Number of jittered camera rays per pixel.
        max_depth: Maximum number of intersections along a path.
        seed: Render seed in [0, 2**32); equal seeds give equal images.
        rows_per_band: Rows rendered per kernel launch between progress
            updates.
    """

    width: int = 1200
    height: int = 800
    samples_per_pixel: int = 500
    max_depth: int = 50
    seed: int = 0
    rows_per_band: int = 16

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not 2 <= self.width <= MAX_IMAGE_WIDTH:
            raise ValueError(f"width = {self.width} must be in [2, {MAX_IMAGE_WIDTH}]")
        if not 2 <= self.height <= MAX_IMAGE_HEIGHT:
            raise ValueError(f"height = {self.height} must be in [2, {MAX_IMAGE_HEIGHT}]")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be at least 1")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be non-negative")
        if not 0 <= self.seed < 2**32:
            raise ValueError(f"seed = {self.seed} must fit in 32 unsigned bits")
        if self.rows_per_band < 1:
            raise ValueError(f"rows_per_band = {self.rows_per_band} must be at least 1")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass
class RenderProgress:
    """Counters describing how far a render has come.

    Attributes:
        rays_completed: Camera sample rays fully traced.
        pixels_completed: Pixels whose final color is written.
        pixels_total: Pixels in the image.
        bands_completed: Kernel launches finished.
        elapsed_seconds: Wall time spent rendering so far.
    """

    rays_completed: int = 0
    pixels_completed: int = 0
    pixels_total: int = 0
    bands_completed: int = 0
    elapsed_seconds: float = 0.0

    @property
    def fraction(self) -> float:
        if self.pixels_total == 0:
            return 0.0
        return self.pixels_completed / self.pixels_total

    @property
    def done(self) -> bool:
        return self.pixels_total > 0 and self.pixels_completed >= self.pixels_total

    def rays_per_second(self) -> float:
        if self.elapsed_seconds <= 0.0:
            return 0.0
        return self.rays_completed / self.elapsed_seconds


def to_rgb8(linear: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear image to gamma-2 corrected 8-bit RGB.

    Negative channels become zero. Each channel is then square-rooted,
    clamped to [0, 0.999] and quantized as
    ``floor(256 * x)``.

    Args:
        linear: Array of shape (height, width, 3) with linear colors.

    Returns:
        Array of shape (height, width, 3) with dtype uint8.
    """
    linear = np.maximum(np.asarray(linear, dtype=np.float32), 0.0)
    corrected = np.clip(np.sqrt(linear), 0.0, MAX_CHANNEL_VALUE)
    return (256.0 * corrected).astype(np.uint8)


class Renderer:
    """Renders the current scene through the current camera.

    The scene and camera live in Taichi fields; build them with
    SceneManager and setup_camera before calling render().

    Attributes:
        settings: The validated render settings.
        progress: Progress of the current or last render.
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        """Initialize the renderer.

        Raises:
            ValueError: If the settings are invalid.
        """
        self.settings = settings if settings is not None else RenderSettings()
        self.settings.validate()
        self.progress = RenderProgress(pixels_total=self.settings.pixel_count)
        setup_render_target(self.settings.width, self.settings.height)

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height

    def _check_ready(self) -> None:
        if not is_camera_initialized():
            raise RuntimeError("Camera not set up. Call setup_camera() first.")

    def render_bands(self) -> Generator[tuple[int, int], None, None]:
        """Render band by band, yielding progress after each band.

        Yields:
            Tuple of (pixels_done, pixels_total).

        Raises:
            RuntimeError: If the camera has not been set up.
        """
        self._check_ready()
        settings = self.settings
        self.progress = RenderProgress(pixels_total=settings.pixel_count)

        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d",
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            settings.max_depth,
        )

        start = time.perf_counter()
        for row_start in range(0, settings.height, settings.rows_per_band):
            row_end = min(row_start + settings.rows_per_band, settings.height)
            rays, pixels = render_rows(
                row_start,
                row_end,
                settings.width,
                settings.height,
                settings.samples_per_pixel,
                settings.max_depth,
                settings.seed,
            )

            progress = self.progress
            progress.rays_completed += rays
            progress.pixels_completed += pixels
            progress.bands_completed += 1
            progress.elapsed_seconds = time.perf_counter() - start

            logger.debug("Rendered rows %d-%d", row_start, row_end - 1)
            yield (progress.pixels_completed, progress.pixels_total)

        logger.info(
            "Finished %d rays in %.2fs (%.0f rays/s)",
            self.progress.rays_completed,
            self.progress.elapsed_seconds,
            self.progress.rays_per_second(),
        )

    def render(self, callback: ProgressCallback | None = None) -> npt.NDArray[np.uint8]:
        """Render the full image.

        Args:
            callback: Optional function called after each band with
                (pixels_done, pixels_total).

        Returns:
            The 8-bit image, shape (height, width, 3), top row first.

        Raises:
            RuntimeError: If the camera has not been set up.
        """
        for done, total in self.render_bands():
            if callback is not None:
                callback(done, total)
        return to_rgb8(self.linear_image())

    def linear_image(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear colors of the last render."""
        return get_linear_image(self.settings.width, self.settings.height)

    def _check_pixel(self, row: int, col: int) -> None:
        if not (0 <= row < self.settings.height and 0 <= col < self.settings.width):
            raise ValueError(
                f"Pixel ({row}, {col}) is outside the "
                f"{self.settings.width}x{self.settings.height} image"
            )

    def render_pixel(self, row: int, col: int) -> tuple[float, float, float]:
        """Evaluate one pixel's linear color exactly as render() would.

        Raises:
            ValueError: If the pixel is outside the image.
            RuntimeError: If the camera has not been set up.
        """
        self._check_ready()
        self._check_pixel(row, col)
        settings = self.settings
        return render_pixel(
            row,
            col,
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            settings.max_depth,
            settings.seed,
        )

    def primary_ray(
        self, row: int, col: int
    ) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Reconstruct the first camera ray render() traces for a pixel.

        Returns:
            Tuple of (origin, direction).

        Raises:
            ValueError: If the pixel is outside the image.
            RuntimeError: If the camera has not been set up.
        """
        self._check_ready()
        self._check_pixel(row, col)
        settings = self.settings
        return primary_ray(row, col, settings.width, settings.height, settings.seed)
