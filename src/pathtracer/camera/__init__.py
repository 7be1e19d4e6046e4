"""Camera module for primary ray generation.

Components:
    thin_lens: Thin-lens camera with depth of field

Ray generation uses viewport coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image
"""

from .thin_lens import (
    ThinLensCamera,
    clear_camera,
    get_camera_info,
    get_ray,
    is_camera_initialized,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "clear_camera",
    "get_ray",
    "get_camera_info",
    "is_camera_initialized",
]
