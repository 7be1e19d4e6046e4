"""Random sphere field: a large ground sphere scattered with small spheres.

The scene consists of:
- A grey diffuse ground sphere of radius 1000 centered at (0, -1000, 0)
- Up to 22 x 22 small spheres of radius 0.2 on a jittered grid, each with
  its own material: 80% diffuse, 15% metal, 5% glass
- Three large spheres of radius 1: glass in the middle, brown diffuse on
  the left, polished metal on the right

Small spheres within 0.9 of (4, 0.2, 0) are skipped so they do not sit
inside the large metal sphere.

The default camera looks at the origin from (13, 2, 3) with a narrow field
of view and a small aperture focused at distance 10.

Example:
    >>> from pathtracer.scene.random_scene import create_random_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>> scene, camera = create_random_scene(seed=42)
    >>> setup_camera(camera)
"""

import logging

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.core.vector import Color, Point3, random_color
from pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = Point3(0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = Color(0.5, 0.5, 0.5)

# Small spheres are placed for a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
GRID_JITTER = 0.9
SMALL_RADIUS = 0.2

# Small spheres closer than this to KEEP_OUT_CENTER are skipped
KEEP_OUT_CENTER = Point3(4.0, 0.2, 0.0)
KEEP_OUT_DISTANCE = 0.9

# Material choice thresholds
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.15

GLASS_IOR = 1.5

LARGE_RADIUS = 1.0

# Defaults for rendering this scene
DEFAULT_ASPECT_RATIO = 3.0 / 2.0
DEFAULT_IMAGE_WIDTH = 1200
DEFAULT_IMAGE_HEIGHT = int(DEFAULT_IMAGE_WIDTH / DEFAULT_ASPECT_RATIO)
DEFAULT_SAMPLES_PER_PIXEL = 500
DEFAULT_MAX_DEPTH = 50


def default_camera(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> ThinLensCamera:
    """Create the camera used to view the random scene."""
    return ThinLensCamera(
        look_from=(13.0, 2.0, 3.0),
        look_at=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_distance=10.0,
    )


def _add_small_sphere(scene: SceneManager, rng: np.random.Generator, center: Point3) -> None:
    choose_material = rng.random()

    if choose_material < DIFFUSE_PROBABILITY:
        albedo = random_color(rng) * random_color(rng)
        scene.add_diffuse_sphere(center, SMALL_RADIUS, albedo)
    elif choose_material < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
        albedo = random_color(rng, 0.5, 1.0)
        fuzz = float(rng.uniform(0.0, 0.5))
        scene.add_metal_sphere(center, SMALL_RADIUS, albedo, fuzz)
    else:
        scene.add_dielectric_sphere(center, SMALL_RADIUS, GLASS_IOR)


def create_random_scene(
    seed: int | None = None,
    scene: SceneManager | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build the random sphere field.

    Args:
        seed: Seed for the scene layout; None draws fresh entropy.
        scene: Scene manager to fill. It is cleared first. A new one is
            created when omitted.
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        Tuple of (scene, camera). The camera still needs setup_camera().
    """
    rng = np.random.default_rng(seed)

    if scene is None:
        scene = SceneManager()
    else:
        scene.clear()

    scene.add_diffuse_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            dx, dz = rng.random(2)
            center = Point3(a + GRID_JITTER * float(dx), SMALL_RADIUS, b + GRID_JITTER * float(dz))
            if (center - KEEP_OUT_CENTER).length() > KEEP_OUT_DISTANCE:
                _add_small_sphere(scene, rng, center)

    scene.add_dielectric_sphere(Point3(0.0, 1.0, 0.0), LARGE_RADIUS, GLASS_IOR)
    scene.add_diffuse_sphere(Point3(-4.0, 1.0, 0.0), LARGE_RADIUS, Color(0.4, 0.2, 0.1))
    scene.add_metal_sphere(Point3(4.0, 1.0, 0.0), LARGE_RADIUS, Color(0.7, 0.6, 0.5), 0.0)

    logger.info(
        "Created random scene with %d spheres and %d materials",
        scene.get_sphere_count(),
        scene.get_material_count(),
    )

    return scene, default_camera(aspect_ratio)
