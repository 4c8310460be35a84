"""Explicit per-task random number streams.

Sampling never touches a process-wide generator. Each path (or pixel, or
thread) owns a ``ti.u32`` stream state, seeds it once with ``seed_stream`` and
threads it through the samplers, which return the advanced state alongside
their result. Two tasks seeded with different indices never share state, and
a fixed (index, seed) pair reproduces the same sequence on every run.

The generator is the PCG hash from Jarzynski & Olano, "Hash Functions for GPU
Rendering" (JCGT 2020), iterated on its own output.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.core.rng import seed_stream, next_uniform2
    >>> # Use within a Taichi kernel:
    >>> # state = seed_stream(pixel_index, frame_seed)
    >>> # state, u = next_uniform2(state)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 2D vectors
vec2 = tm.vec2

# 1 / 2^24: maps the top 24 bits of a u32 to [0, 1) exactly in f32
INV_2_POW_24 = 1.0 / 16777216.0


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with the PCG output permutation.

    Args:
        value: Input value.

    Returns:
        A well-mixed 32-bit hash of the input.
    """
    state = value * ti.u32(747796405) + ti.u32(2891336453)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(277803737)
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_stream(index: ti.i32, seed: ti.i32) -> ti.u32:
    """Create the initial state of a stream.

    Args:
        index: Task index (pixel index, path index, loop index...).
        seed: Global seed, e.g. the frame or pass number.

    Returns:
        A stream state decorrelated from every other (index, seed) pair.
    """
    return pcg_hash(ti.cast(index, ti.u32) ^ pcg_hash(ti.cast(seed, ti.u32)))


@ti.func
def next_uniform(state: ti.u32):
    """Draw one uniform float in [0, 1) from a stream.

    Args:
        state: The current stream state.

    Returns:
        A tuple of (new_state, value).
    """
    new_state = pcg_hash(state)
    value = ti.cast(new_state >> ti.u32(8), ti.f32) * INV_2_POW_24
    return new_state, value


@ti.func
def next_uniform2(state: ti.u32):
    """Draw two uniform floats in [0, 1) from a stream.

    Args:
        state: The current stream state.

    Returns:
        A tuple of (new_state, u) where u is a vec2.
    """
    state_1, x1 = next_uniform(state)
    state_2, x2 = next_uniform(state_1)
    return state_2, vec2(x1, x2)
