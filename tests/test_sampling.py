"""Statistical tests for the random streams and geometric samplers.

Each test draws N_SAMPLES values, one per stream, and compares sample
moments against their analytic values.
"""

import numpy as np
import taichi as ti

# Enough draws that moment tolerances sit several standard errors out
N_SAMPLES = 20000


class TestRandomStreams:
    """Tests for init_rng_state / next_uniform / next_normal."""

    def test_uniform_range_and_moments(self):
        from pathtracer.core.sampling import init_rng_state, next_uniform

        values = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def draw(seed: ti.u32):
            for i in range(N_SAMPLES):
                state = init_rng_state(seed, ti.cast(i, ti.u32))
                value, state = next_uniform(state)
                values[i] = value

        draw(1234)
        v = values.to_numpy()
        assert v.min() >= 0.0
        assert v.max() < 1.0
        assert abs(v.mean() - 0.5) < 0.01
        assert abs(v.var() - 1.0 / 12.0) < 0.005

    def test_sequential_uniforms_are_uncorrelated(self):
        from pathtracer.core.sampling import init_rng_state, next_uniform

        first = ti.field(dtype=ti.f32, shape=N_SAMPLES)
        second = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def draw():
            for i in range(N_SAMPLES):
                state = init_rng_state(ti.u32(7), ti.cast(i, ti.u32))
                a, state = next_uniform(state)
                b, state = next_uniform(state)
                first[i] = a
                second[i] = b

        draw()
        correlation = np.corrcoef(first.to_numpy(), second.to_numpy())[0, 1]
        assert abs(correlation) < 0.05

    def test_normal_moments(self):
        from pathtracer.core.sampling import init_rng_state, next_normal

        values = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def draw():
            for i in range(N_SAMPLES):
                state = init_rng_state(ti.u32(99), ti.cast(i, ti.u32))
                value, state = next_normal(state)
                values[i] = value

        draw()
        v = values.to_numpy().astype(np.float64)
        assert np.all(np.isfinite(v))
        assert abs(v.mean()) < 0.05
        assert abs(v.var() - 1.0) < 0.05
        # Roughly 68% of a standard normal lies within one sigma
        assert abs(np.mean(np.abs(v) < 1.0) - 0.6827) < 0.02

    def test_same_seed_and_stream_repeat(self):
        from pathtracer.core.sampling import init_rng_state, next_uniform

        values = ti.field(dtype=ti.f32, shape=4)

        @ti.kernel
        def draw():
            for i in range(4):
                # Streams 0, 0, 1 with seed 5, and stream 0 with seed 6
                stream = ti.u32(0)
                seed = ti.u32(5)
                if i == 2:
                    stream = ti.u32(1)
                if i == 3:
                    seed = ti.u32(6)
                state = init_rng_state(seed, stream)
                value, state = next_uniform(state)
                values[i] = value

        draw()
        v = values.to_numpy()
        assert v[0] == v[1]
        assert v[0] != v[2]
        assert v[0] != v[3]


class TestGeometricSamplers:
    """Tests for the sphere, ball and disk samplers."""

    def test_uniform_on_unit_sphere(self):
        from pathtracer.core.sampling import init_rng_state, uniform_on_unit_sphere

        points = ti.field(dtype=ti.math.vec3, shape=N_SAMPLES)

        @ti.kernel
        def draw():
            for i in range(N_SAMPLES):
                state = init_rng_state(ti.u32(3), ti.cast(i, ti.u32))
                p, state = uniform_on_unit_sphere(state)
                points[i] = p

        draw()
        p = points.to_numpy().astype(np.float64)
        lengths = np.linalg.norm(p, axis=1)
        assert np.allclose(lengths, 1.0, atol=1e-5)
        # Mean of a uniform direction is zero; each squared coordinate is 1/3
        assert np.all(np.abs(p.mean(axis=0)) < 0.02)
        assert np.all(np.abs((p**2).mean(axis=0) - 1.0 / 3.0) < 0.02)

    def test_uniform_in_unit_sphere(self):
        from pathtracer.core.sampling import init_rng_state, uniform_in_unit_sphere

        points = ti.field(dtype=ti.math.vec3, shape=N_SAMPLES)

        @ti.kernel
        def draw():
            for i in range(N_SAMPLES):
                state = init_rng_state(ti.u32(4), ti.cast(i, ti.u32))
                p, state = uniform_in_unit_sphere(state)
                points[i] = p

        draw()
        p = points.to_numpy().astype(np.float64)
        radii = np.linalg.norm(p, axis=1)
        assert radii.max() <= 1.0 + 1e-6
        assert np.all(np.abs(p.mean(axis=0)) < 0.02)
        # For a uniform ball E[r^2] = 3/5 and P(r < 1/2) = 1/8
        assert abs((radii**2).mean() - 0.6) < 0.01
        assert abs(np.mean(radii < 0.5) - 0.125) < 0.01

    def test_uniform_in_unit_disk(self):
        from pathtracer.core.sampling import init_rng_state, uniform_in_unit_disk

        points = ti.field(dtype=ti.math.vec2, shape=N_SAMPLES)

        @ti.kernel
        def draw():
            for i in range(N_SAMPLES):
                state = init_rng_state(ti.u32(8), ti.cast(i, ti.u32))
                p, state = uniform_in_unit_disk(state)
                points[i] = p

        draw()
        p = points.to_numpy().astype(np.float64)
        radii = np.linalg.norm(p, axis=1)
        assert radii.max() <= 1.0 + 1e-6
        assert np.all(np.abs(p.mean(axis=0)) < 0.02)
        # For a uniform disk E[r^2] = 1/2 and P(r < 1/2) = 1/4
        assert abs((radii**2).mean() - 0.5) < 0.01
        assert abs(np.mean(radii < 0.5) - 0.25) < 0.015
