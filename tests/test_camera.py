"""Unit tests for the thin-lens camera.

Tests cover:
- Parameter validation
- Derived basis and viewport (get_camera_info)
- Ray generation through viewport coordinates
- Lens sampling for non-zero apertures
"""

import math

import numpy as np
import pytest
import taichi as ti


def _camera(**overrides):
    from pathtracer.camera.thin_lens import ThinLensCamera

    params = {
        "look_from": (0.0, 0.0, 0.0),
        "look_at": (0.0, 0.0, -1.0),
        "vup": (0.0, 1.0, 0.0),
        "vfov": 90.0,
        "aspect_ratio": 2.0,
        "aperture": 0.0,
        "focus_distance": 1.0,
    }
    params.update(overrides)
    return ThinLensCamera(**params)


class TestCameraValidation:
    """Tests for ThinLensCamera.validate."""

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"vfov": 0.0}, "vfov"),
            ({"vfov": 180.0}, "vfov"),
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"aperture": -0.1}, "aperture"),
            ({"focus_distance": 0.0}, "focus_distance"),
            ({"look_at": (0.0, 0.0, 0.0)}, "distinct"),
            ({"vup": (0.0, 0.0, 1.0)}, "parallel"),
        ],
    )
    def test_invalid_parameters_raise(self, overrides, message):
        from pathtracer.camera.thin_lens import setup_camera

        with pytest.raises(ValueError, match=message):
            setup_camera(_camera(**overrides))

    def test_valid_camera_sets_initialized(self):
        from pathtracer.camera.thin_lens import is_camera_initialized, setup_camera

        assert not is_camera_initialized()
        setup_camera(_camera())
        assert is_camera_initialized()


class TestCameraSetup:
    """Tests for the derived camera state."""

    def test_basis_and_viewport(self):
        from pathtracer.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_camera())
        info = get_camera_info()

        assert np.allclose(info["origin"], [0.0, 0.0, 0.0])
        assert np.allclose(info["u"], [1.0, 0.0, 0.0], atol=1e-6)
        assert np.allclose(info["v"], [0.0, 1.0, 0.0], atol=1e-6)
        assert np.allclose(info["w"], [0.0, 0.0, 1.0], atol=1e-6)
        # vfov 90 gives a viewport 2 high and 4 wide at distance 1
        assert np.allclose(info["horizontal"], [4.0, 0.0, 0.0], atol=1e-5)
        assert np.allclose(info["vertical"], [0.0, 2.0, 0.0], atol=1e-5)
        assert np.allclose(info["lower_left"], [-2.0, -1.0, -1.0], atol=1e-5)
        assert info["lens_radius"] == 0.0

    def test_basis_is_orthonormal(self):
        from pathtracer.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(
            _camera(
                look_from=(13.0, 2.0, 3.0),
                look_at=(0.0, 0.0, 0.0),
                vfov=20.0,
                aspect_ratio=1.5,
                aperture=0.1,
                focus_distance=10.0,
            )
        )
        info = get_camera_info()
        u, v, w = (np.array(info[k]) for k in ("u", "v", "w"))

        for vec in (u, v, w):
            assert abs(np.linalg.norm(vec) - 1.0) < 1e-5
        assert abs(u @ v) < 1e-5
        assert abs(v @ w) < 1e-5
        assert abs(u @ w) < 1e-5
        assert np.allclose(w, np.array([13.0, 2.0, 3.0]) / np.linalg.norm([13.0, 2.0, 3.0]), atol=1e-5)
        assert abs(info["lens_radius"] - 0.05) < 1e-7

        # Viewport scaled to the focal plane
        height = 2.0 * math.tan(math.radians(10.0)) * 10.0
        assert abs(np.linalg.norm(info["vertical"]) - height) < 1e-4
        assert abs(np.linalg.norm(info["horizontal"]) - 1.5 * height) < 1e-4


class TestGetRay:
    """Tests for get_ray."""

    def _trace(self, s_values, t_values, seed=0):
        from pathtracer.camera.thin_lens import get_ray
        from pathtracer.core.sampling import init_rng_state

        n = len(s_values)
        s_field = ti.field(dtype=ti.f32, shape=n)
        t_field = ti.field(dtype=ti.f32, shape=n)
        origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
        s_field.from_numpy(np.asarray(s_values, dtype=np.float32))
        t_field.from_numpy(np.asarray(t_values, dtype=np.float32))

        @ti.kernel
        def test_kernel(sd: ti.u32):
            for i in range(n):
                state = init_rng_state(sd, ti.cast(i, ti.u32))
                origin, direction, state = get_ray(s_field[i], t_field[i], state)
                origins[i] = origin
                directions[i] = direction

        test_kernel(seed)
        return origins.to_numpy(), directions.to_numpy()

    def test_pinhole_center_and_corners(self):
        from pathtracer.camera.thin_lens import setup_camera

        setup_camera(_camera())
        origins, directions = self._trace([0.5, 0.0, 1.0], [0.5, 0.0, 1.0])

        assert np.allclose(origins, 0.0)
        assert np.allclose(directions[0], [0.0, 0.0, -1.0], atol=1e-6)
        lower_left = np.array([-2.0, -1.0, -1.0]) / np.sqrt(6.0)
        upper_right = np.array([2.0, 1.0, -1.0]) / np.sqrt(6.0)
        assert np.allclose(directions[1], lower_left, atol=1e-6)
        assert np.allclose(directions[2], upper_right, atol=1e-6)

    def test_thin_lens_origins_on_lens_and_focused(self):
        """Lens rays start within the aperture and meet on the focal plane."""
        from pathtracer.camera.thin_lens import setup_camera

        setup_camera(_camera(aperture=0.5, focus_distance=4.0))
        n = 512
        origins, directions = self._trace([0.25] * n, [0.75] * n)

        # Lens disk lies in the z = 0 plane with radius 0.25
        assert np.allclose(origins[:, 2], 0.0, atol=1e-6)
        assert np.linalg.norm(origins[:, :2], axis=1).max() <= 0.25 + 1e-6
        assert np.linalg.norm(origins[:, :2], axis=1).std() > 0.01
        assert np.allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-5)

        # Every ray passes through the same point on the plane z = -4
        t = -4.0 / directions[:, 2]
        focal_points = origins + t[:, None] * directions
        assert np.allclose(focal_points, focal_points[0], atol=1e-3)
        assert np.allclose(focal_points[0], [-4.0, 2.0, -4.0], atol=1e-3)
