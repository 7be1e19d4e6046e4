"""Explicit random number streams and geometric sampling routines.

Every parallel unit of work owns a 32-bit PCG generator state. The state
is an ordinary ``ti.u32`` value threaded through every function that
consumes randomness:

    value, state = next_uniform(state)

No function in this module touches a global random source, so a render is
reproducible for a given seed regardless of how Taichi schedules pixels.

The geometric samplers avoid rejection loops by normalizing vectors of
independent standard-normal draws:

    uniform_on_unit_sphere: 3 normals, normalized.
    uniform_in_unit_sphere: 5 normals normalized by their 5-norm, first 3
        kept (the Muller-Marsaglia "drop coordinates" construction).
    uniform_in_unit_disk: 4 normals normalized by their 4-norm, first 2 kept.

Example:
    >>> @ti.kernel
    ... def draw(seed: ti.u32) -> ti.f32:
    ...     state = init_rng_state(seed, ti.u32(0))
    ...     p, state = uniform_on_unit_sphere(state)
    ...     return tm.length(p)
"""

import taichi as ti
import taichi.math as tm

# Type aliases
vec2 = tm.vec2
vec3 = tm.vec3

# 2^-24, maps the top 24 bits of a PCG output onto [0, 1)
_UNIT_FLOAT_SCALE = 1.0 / 16777216.0


@ti.func
def _pcg_step(state: ti.u32) -> ti.u32:
    """Advance the LCG underlying the PCG generator."""
    return state * ti.u32(747796405) + ti.u32(1442695041)


@ti.func
def _pcg_output(state: ti.u32) -> ti.u32:
    """Permute an LCG state into a well-mixed 32-bit output word."""
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(277803737)
    return (word >> ti.u32(22)) ^ word


@ti.func
def init_rng_state(seed: ti.u32, stream: ti.u32) -> ti.u32:
    """Derive the generator state for one parallel unit.

    Args:
        seed: The render-wide seed.
        stream: Identifier of the unit of work (for example the pixel index).

    Returns:
        An initial state, decorrelated across streams.
    """
    return _pcg_output(_pcg_step(seed + _pcg_output(_pcg_step(stream))))


@ti.func
def next_uniform(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Returns:
        A tuple (value, new_state).
    """
    state = _pcg_step(state)
    value = ti.cast(_pcg_output(state) >> ti.u32(8), ti.f32) * _UNIT_FLOAT_SCALE
    return value, state


@ti.func
def next_normal(state: ti.u32):
    """Draw a standard-normal float with the Box-Muller transform.

    Returns:
        A tuple (value, new_state).
    """
    u1, state = next_uniform(state)
    u2, state = next_uniform(state)
    # 1 - u1 lies in (0, 1], keeping the logarithm finite
    radius = ti.sqrt(-2.0 * ti.log(1.0 - u1))
    return radius * ti.cos(2.0 * tm.pi * u2), state


@ti.func
def uniform_on_unit_sphere(state: ti.u32):
    """Sample a point uniformly on the surface of the unit sphere.

    Returns:
        A tuple (point, new_state) with ``length(point) == 1``.
    """
    x, state = next_normal(state)
    y, state = next_normal(state)
    z, state = next_normal(state)
    p = vec3(x, y, z)
    return p / tm.length(p), state


@ti.func
def uniform_in_unit_sphere(state: ti.u32):
    """Sample a point uniformly inside the unit ball.

    Returns:
        A tuple (point, new_state) with ``length(point) <= 1``.
    """
    x, state = next_normal(state)
    y, state = next_normal(state)
    z, state = next_normal(state)
    d1, state = next_normal(state)
    d2, state = next_normal(state)
    norm = ti.sqrt(x * x + y * y + z * z + d1 * d1 + d2 * d2)
    return vec3(x, y, z) / norm, state


@ti.func
def uniform_in_unit_disk(state: ti.u32):
    """Sample a point uniformly inside the unit disk.

    Returns:
        A tuple (point, new_state) where point is a vec2 with
        ``length(point) <= 1``.
    """
    x, state = next_normal(state)
    y, state = next_normal(state)
    d1, state = next_normal(state)
    d2, state = next_normal(state)
    norm = ti.sqrt(x * x + y * y + d1 * d1 + d2 * d2)
    return vec2(x, y) / norm, state
