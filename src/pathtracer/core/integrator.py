"""Path tracing integrator and per-pixel render kernels.

A camera ray is followed through the scene for at most ``max_depth``
intersections. Each bounce multiplies a running throughput by the
attenuation of the material that scattered the ray:

    - miss: the path ends with throughput * background(direction)
    - absorbed: the path ends black
    - depth budget exhausted: the path ends black

The background is a vertical gradient from white at the horizon-down
direction to light blue straight up.

Rendering is organized by rows. ``render_rows`` launches one kernel over a
band of rows; every pixel in the band derives its own random stream from
the render seed and its linear index, so a render is reproducible for a
seed no matter how Taichi schedules the pixels. The kernel counts finished
sample rays and pixels in atomic counters which the host reads after the
band completes.

Example:
    >>> from pathtracer.core.integrator import setup_render_target, render_rows
    >>> setup_render_target(400, 200)
    >>> rays, pixels = render_rows(0, 200, 400, 200, 10, 50, seed=0)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import get_ray
from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.sampling import init_rng_state, next_uniform
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.manager import scatter

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Intersections closer than T_MIN are ignored to avoid self-intersection
T_MIN = 1e-3
T_MAX = tm.inf

# Background gradient endpoints
BACKGROUND_BOTTOM = vec3(1.0, 1.0, 1.0)
BACKGROUND_TOP = vec3(0.5, 0.7, 1.0)


@ti.func
def background(direction: vec3) -> vec3:
    """Sky color seen along a direction that escapes the scene."""
    t = 0.5 * (tm.normalize(direction).y + 1.0)
    return (1.0 - t) * BACKGROUND_BOTTOM + t * BACKGROUND_TOP


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_ray(ray: Ray, max_depth: ti.i32, state: ti.u32):
    """Estimate the color carried back along a ray.

    Args:
        ray: The ray to follow; its direction is unit length.
        max_depth: Maximum number of scene intersections along the path.
        state: The caller's random generator state.

    Returns:
        A tuple of (color, state).
    """
    origin = ray.origin
    direction = ray.direction

    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _depth in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(origin, direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                color = throughput * background(direction)
                active = 0
            else:
                did_scatter, attenuation, scattered_direction, state = scatter(
                    hit_record.material_id,
                    direction,
                    hit_record.normal,
                    hit_record.front_face,
                    state,
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = hit_record.point
                    direction = scattered_direction

    return color, state


@ti.func
def _camera_sample(row: ti.i32, col: ti.i32, width: ti.i32, height: ti.i32, state: ti.u32):
    """Generate a jittered camera ray through a pixel.

    Row 0 is the top of the image. The jitter in each axis is uniform in
    [-0.5, 0.5) of a pixel.

    Returns:
        A tuple of (origin, direction, state).
    """
    dx, state = next_uniform(state)
    dy, state = next_uniform(state)

    s = (ti.cast(col, ti.f32) + dx - 0.5) / ti.cast(width - 1, ti.f32)
    t = (ti.cast(height - 1 - row, ti.f32) + dy - 0.5) / ti.cast(height - 1, ti.f32)

    return get_ray(s, t, state)


@ti.func
def _pixel_state(row: ti.i32, col: ti.i32, width: ti.i32, seed: ti.u32) -> ti.u32:
    return init_rng_state(seed, ti.cast(row * width + col, ti.u32))


@ti.func
def _sample_pixel(
    row: ti.i32,
    col: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
) -> vec3:
    """Average ``samples_per_pixel`` path samples for one pixel."""
    state = _pixel_state(row, col, width, seed)
    total = vec3(0.0, 0.0, 0.0)

    for _sample in range(samples_per_pixel):
        origin, direction, state = _camera_sample(row, col, width, height, state)
        color, state = trace_ray(make_ray(origin, direction), max_depth, state)
        total += color

    return total / ti.cast(samples_per_pixel, ti.f32)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Linear color per pixel, indexed [row, col] with row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Progress counters, reset before each band
_rays_completed = ti.field(dtype=ti.i32, shape=())
_pixels_completed = ti.field(dtype=ti.i32, shape=())

# Scratch fields for primary_ray
_debug_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_debug_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Check the image dimensions and clear the color buffer.

    Raises:
        ValueError: If dimensions exceed the preallocated buffer.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer and progress counters to zero."""
    _color_buffer.fill(0.0)
    _rays_completed[None] = 0
    _pixels_completed[None] = 0


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    for row, col in ti.ndrange((row_start, row_end), width):
        _color_buffer[row, col] = _sample_pixel(
            row, col, width, height, samples_per_pixel, max_depth, seed
        )
        ti.atomic_add(_rays_completed[None], samples_per_pixel)
        ti.atomic_add(_pixels_completed[None], 1)


@ti.kernel
def _render_single_pixel(
    row: ti.i32,
    col: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
) -> vec3:
    return _sample_pixel(row, col, width, height, samples_per_pixel, max_depth, seed)


@ti.kernel
def _first_camera_ray(row: ti.i32, col: ti.i32, width: ti.i32, height: ti.i32, seed: ti.u32):
    state = _pixel_state(row, col, width, seed)
    origin, direction, state = _camera_sample(row, col, width, height, state)
    _debug_origin[None] = origin
    _debug_direction[None] = direction


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(
    row_start: int,
    row_end: int,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
    seed: int,
) -> tuple[int, int]:
    """Render rows [row_start, row_end) into the color buffer.

    Blocks until the band is complete.

    Returns:
        Tuple of (sample rays completed, pixels completed) for the band.
    """
    _rays_completed[None] = 0
    _pixels_completed[None] = 0
    _render_rows(row_start, row_end, width, height, samples_per_pixel, max_depth, seed)
    return int(_rays_completed[None]), int(_pixels_completed[None])


def render_pixel(
    row: int,
    col: int,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
    seed: int,
) -> tuple[float, float, float]:
    """Render one pixel exactly as render_rows would, without storing it.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _render_single_pixel(row, col, width, height, samples_per_pixel, max_depth, seed)
    return (float(color[0]), float(color[1]), float(color[2]))


def primary_ray(
    row: int, col: int, width: int, height: int, seed: int
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Reconstruct the first camera ray traced for a pixel.

    Returns:
        Tuple of (origin, direction).
    """
    _first_camera_ray(row, col, width, height, seed)
    origin = _debug_origin[None]
    direction = _debug_direction[None]
    return (
        (float(origin[0]), float(origin[1]), float(origin[2])),
        (float(direction[0]), float(direction[1]), float(direction[2])),
    )


def get_linear_image(width: int, height: int) -> npt.NDArray[np.float32]:
    """Get the linear color buffer as a (height, width, 3) float32 array."""
    image = _color_buffer.to_numpy()[:height, :width, :]
    return np.ascontiguousarray(image, dtype=np.float32)
