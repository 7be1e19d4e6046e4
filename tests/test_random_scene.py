"""Unit tests for the random sphere field scene."""

import numpy as np


class TestRandomScene:
    """Tests for create_random_scene."""

    def test_layout(self):
        from pathtracer.scene.manager import MaterialType
        from pathtracer.scene.random_scene import create_random_scene

        scene, _ = create_random_scene(seed=3)

        sphere_count = scene.get_sphere_count()
        # Ground, at most 22 x 22 small spheres, three large spheres
        assert 4 < sphere_count <= 1 + 22 * 22 + 3
        assert scene.get_material_count() == sphere_count

        ground = scene.spheres[0]
        assert tuple(ground.center) == (0.0, -1000.0, 0.0)
        assert ground.radius == 1000.0

        large = scene.spheres[-3:]
        assert [tuple(s.center) for s in large] == [
            (0.0, 1.0, 0.0),
            (-4.0, 1.0, 0.0),
            (4.0, 1.0, 0.0),
        ]
        kinds = [scene.get_material_info(s.material_id).material_type for s in large]
        assert kinds == [MaterialType.DIELECTRIC, MaterialType.DIFFUSE, MaterialType.METAL]

    def test_small_spheres(self):
        from pathtracer.scene.random_scene import create_random_scene

        scene, _ = create_random_scene(seed=3)
        small = scene.spheres[1:-3]

        centers = np.array([tuple(s.center) for s in small])
        assert np.all(centers[:, 1] == 0.2)
        assert centers[:, 0].min() >= -11.0
        assert centers[:, 0].max() < 11.0
        # No small sphere near the large metal sphere
        keep_out = np.linalg.norm(centers - np.array([4.0, 0.2, 0.0]), axis=1)
        assert keep_out.min() > 0.9
        assert all(s.radius == 0.2 for s in small)

        for sphere in small:
            params = scene.get_material_info(sphere.material_id).params
            if "fuzz" in params:
                assert 0.0 <= params["fuzz"] < 0.5
                assert min(params["albedo"]) >= 0.5
            elif "ior" in params:
                assert params["ior"] == 1.5

    def test_same_seed_same_scene(self):
        from pathtracer.scene.random_scene import create_random_scene

        first, _ = create_random_scene(seed=42)
        first_data = first.to_dict()
        second, _ = create_random_scene(seed=42)
        assert second.to_dict() == first_data

        third, _ = create_random_scene(seed=43)
        assert third.to_dict() != first_data

    def test_reuses_scene_manager(self):
        from pathtracer.scene.manager import SceneManager
        from pathtracer.scene.random_scene import create_random_scene

        scene = SceneManager()
        scene.add_opaque_material()
        returned, _ = create_random_scene(seed=1, scene=scene)
        assert returned is scene
        assert scene.get_material_count() == scene.get_sphere_count()

    def test_camera(self):
        from pathtracer.camera.thin_lens import get_camera_info, setup_camera
        from pathtracer.scene.random_scene import create_random_scene

        _, camera = create_random_scene(seed=0, aspect_ratio=2.0)
        assert tuple(camera.look_from) == (13.0, 2.0, 3.0)
        assert tuple(camera.look_at) == (0.0, 0.0, 0.0)
        assert camera.vfov == 20.0
        assert camera.aperture == 0.1
        assert camera.focus_distance == 10.0
        assert camera.aspect_ratio == 2.0

        setup_camera(camera)
        assert abs(get_camera_info()["lens_radius"] - 0.05) < 1e-7
