"""Thin-lens camera model with depth of field.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the focal plane, ``focus_distance`` in front of the
camera. Rays start from a random point on a lens disk of radius
``aperture / 2`` and pass through the target viewport point, so only the
focal plane is sharp. An aperture of 0 degenerates to a pinhole.

Example:
    >>> from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>> camera = ThinLensCamera(
    ...     look_from=(13.0, 2.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_distance=10.0,
    ... )
    >>> setup_camera(camera)
    >>> # Inside a kernel: origin, direction, state = get_ray(s, t, state)
"""

import logging
import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.sampling import uniform_in_unit_disk
from pathtracer.core.vector import Point3, Vec3, as_point3, as_vec3

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        look_from: Camera position in world space.
        look_at: Point the camera is looking at.
        vup: Up direction used to orient the camera (typically +y).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter; 0 gives a pinhole camera.
        focus_distance: Distance from the lens to the plane in focus.
    """

    look_from: Point3 | tuple[float, float, float]
    look_at: Point3 | tuple[float, float, float]
    vup: Vec3 | tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_distance: float = 1.0

    def validate(self) -> None:
        """Check the camera parameters.

        Raises:
            ValueError: If any parameter is out of range, or if the view
                direction is zero or parallel to vup.
        """
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.aperture < 0.0:
            raise ValueError(f"aperture = {self.aperture} must be non-negative")
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance = {self.focus_distance} must be positive")

        view = as_point3(self.look_from) - as_point3(self.look_at)
        if view.near_zero():
            raise ValueError("look_from and look_at must be distinct points")
        if as_vec3(self.vup).cross(view).near_zero():
            raise ValueError("vup must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward

# Viewport on the focal plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())

_camera_initialized = ti.field(dtype=ti.i32, shape=())


def setup_camera(camera: ThinLensCamera) -> None:
    """Derive the camera state and store it in Taichi fields.

    Must be called before rendering, from Python (not inside a kernel).

    Raises:
        ValueError: If the camera parameters are invalid.
    """
    camera.validate()

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    look_from = as_point3(camera.look_from)
    look_at = as_point3(camera.look_at)
    vup = as_vec3(camera.vup)

    w = (look_from - look_at).normalize()
    u = vup.cross(w).normalize()
    v = w.cross(u)

    horizontal = u * (camera.focus_distance * viewport_width)
    vertical = v * (camera.focus_distance * viewport_height)
    lower_left = look_from - horizontal / 2.0 - vertical / 2.0 - w * camera.focus_distance

    _camera_origin[None] = look_from.to_list()
    _camera_u[None] = u.to_list()
    _camera_v[None] = v.to_list()
    _camera_w[None] = w.to_list()
    _viewport_horizontal[None] = horizontal.to_list()
    _viewport_vertical[None] = vertical.to_list()
    _lower_left_corner[None] = lower_left.to_list()
    _lens_radius[None] = camera.aperture / 2.0
    _camera_initialized[None] = 1

    logger.debug(
        "Camera at %s looking at %s, vfov=%.1f, aperture=%.3f, focus=%.3f",
        tuple(look_from),
        tuple(look_at),
        camera.vfov,
        camera.aperture,
        camera.focus_distance,
    )


def is_camera_initialized() -> bool:
    return bool(_camera_initialized[None])


def clear_camera() -> None:
    """Mark the camera as not set up."""
    _camera_initialized[None] = 0


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32, state: ti.u32):
    """Generate a camera ray through viewport coordinates (s, t).

    s runs left to right and t bottom to top, both 0 to 1 across the
    viewport. The ray origin is offset across the lens disk; the direction
    is unit length.

    Args:
        s: Horizontal viewport coordinate.
        t: Vertical viewport coordinate.
        state: The caller's random generator state.

    Returns:
        A tuple of (origin, direction, state).
    """
    disk, state = uniform_in_unit_disk(state)
    rd = _lens_radius[None] * disk
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    target = _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    direction = tm.normalize(target - origin)

    return origin, direction, state


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, ...] | float]:
    """Get the derived camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        and lens_radius.
    """

    def _read(field) -> tuple[float, float, float]:
        value = field[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": _read(_camera_origin),
        "u": _read(_camera_u),
        "v": _read(_camera_v),
        "w": _read(_camera_w),
        "horizontal": _read(_viewport_horizontal),
        "vertical": _read(_viewport_vertical),
        "lower_left": _read(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
