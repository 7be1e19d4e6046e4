"""Preview module for writing rendered images.

Components:
    export: PPM and PNG writers
"""

from pathtracer.preview.export import format_ppm, save_image, save_png, save_ppm

__all__ = [
    "format_ppm",
    "save_ppm",
    "save_png",
    "save_image",
]
