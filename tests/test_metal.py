"""Unit tests for the metal material.

Tests cover:
- Perfect mirror reflection (fuzz = 0)
- Fuzzy reflection stays within the fuzz cone
- Absorption when fuzz pushes the ray below the surface
- Material registry validation
"""

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 4096


def _scatter_many(fuzz, incident, normal, seed=1):
    from pathtracer.core.sampling import init_rng_state
    from pathtracer.materials.metal import scatter_metal, vec3

    directions = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)
    attenuations = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)
    scattered = ti.field(dtype=ti.i32, shape=N_SAMPLES)

    @ti.kernel
    def test_kernel(f: ti.f32, d: ti.math.vec3, n: ti.math.vec3, s: ti.u32):
        for i in range(N_SAMPLES):
            state = init_rng_state(s, ti.cast(i, ti.u32))
            direction, attenuation, did_scatter, state = scatter_metal(
                vec3(0.9, 0.8, 0.7), f, d, n, state
            )
            directions[i] = direction
            attenuations[i] = attenuation
            scattered[i] = did_scatter

    test_kernel(fuzz, vec3(*incident), vec3(*normal), seed)
    return directions.to_numpy(), attenuations.to_numpy(), scattered.to_numpy()


class TestScatterMetal:
    """Tests for scatter_metal."""

    def test_perfect_mirror(self):
        incident = np.array([1.0, -1.0, 0.0]) / np.sqrt(2.0)
        directions, attenuations, scattered = _scatter_many(0.0, incident, (0.0, 1.0, 0.0))

        assert np.all(scattered == 1)
        expected = np.array([1.0, 1.0, 0.0]) / np.sqrt(2.0)
        assert np.allclose(directions, expected, atol=1e-5)
        assert np.allclose(attenuations, [0.9, 0.8, 0.7], atol=1e-6)

    def test_unnormalized_incident_direction(self):
        directions, _, scattered = _scatter_many(0.0, (3.0, -3.0, 0.0), (0.0, 1.0, 0.0))
        assert np.all(scattered == 1)
        assert np.allclose(directions, np.array([1.0, 1.0, 0.0]) / np.sqrt(2.0), atol=1e-5)

    def test_fuzzy_reflection_within_cone(self):
        """With fuzz f the direction stays within asin(f) of the mirror direction."""
        fuzz = 0.3
        directions, _, scattered = _scatter_many(fuzz, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0))

        assert np.all(scattered == 1)
        assert np.allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-5)
        cos_to_mirror = directions[:, 1]
        assert cos_to_mirror.min() >= np.sqrt(1.0 - fuzz**2) - 1e-5
        # Not a perfect mirror any more
        assert cos_to_mirror.std() > 1e-3

    def test_grazing_fuzzy_reflection_sometimes_absorbed(self):
        incident = np.array([1.0, -0.05, 0.0])
        incident /= np.linalg.norm(incident)
        directions, _, scattered = _scatter_many(1.0, incident, (0.0, 1.0, 0.0))

        absorbed = scattered == 0
        assert 0 < absorbed.sum() < N_SAMPLES
        assert np.allclose(directions[absorbed], 0.0)
        assert directions[~absorbed][:, 1].min() > 0.0


class TestMetalRegistry:
    """Tests for the metal material table."""

    def test_add_and_read_back(self):
        from pathtracer.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        add_metal_material((0.7, 0.6, 0.5))
        idx = add_metal_material((0.9, 0.9, 0.9), fuzz=0.25)
        assert idx == 1
        assert get_metal_material_count() == 2

        albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            albedo[None] = get_metal_albedo(1)
            fuzz[None] = get_metal_fuzz(1)

        test_kernel()
        assert np.allclose(albedo[None].to_numpy(), [0.9, 0.9, 0.9], atol=1e-6)
        assert abs(fuzz[None] - 0.25) < 1e-6

    @pytest.mark.parametrize("fuzz", [-0.1, 1.5])
    def test_fuzz_out_of_range_raises(self, fuzz):
        from pathtracer.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="Fuzz"):
            add_metal_material((0.5, 0.5, 0.5), fuzz=fuzz)

    def test_albedo_out_of_range_raises(self):
        from pathtracer.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="Albedo"):
            add_metal_material((0.5, 1.5, 0.5))
