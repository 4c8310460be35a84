"""Unit tests for the explicit random number streams."""

import numpy as np
import pytest
import taichi as ti

MASK_32 = 0xFFFFFFFF


def _reference_pcg_hash(value: int) -> int:
    state = (value * 747796405 + 2891336453) & MASK_32
    word = (((state >> ((state >> 28) + 4)) ^ state) * 277803737) & MASK_32
    return ((word >> 22) ^ word) & MASK_32


class TestPcgHash:
    """Tests for the PCG hash."""

    def test_matches_reference_values(self):
        """Test that the kernel hash matches a pure Python evaluation."""
        from pathshade.core.rng import pcg_hash

        inputs = np.array([0, 1, 42, 123456789, 0xDEADBEEF, MASK_32], dtype=np.uint32)
        count = inputs.shape[0]
        values = ti.field(dtype=ti.u32, shape=count)
        hashes = ti.field(dtype=ti.u32, shape=count)
        values.from_numpy(inputs)

        @ti.kernel
        def test_kernel():
            for i in range(count):
                hashes[i] = pcg_hash(values[i])

        test_kernel()
        result = hashes.to_numpy()
        for value, hashed in zip(inputs, result):
            assert int(hashed) == _reference_pcg_hash(int(value))


class TestStreams:
    """Tests for seed_stream / next_uniform."""

    def test_uniforms_are_in_unit_interval(self):
        """Test that every draw lies in [0, 1)."""
        from pathshade.core.rng import next_uniform, seed_stream

        n = 100_000
        result = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                state = seed_stream(i, 7)
                state, x = next_uniform(state)
                result[i] = x

        test_kernel()
        values = result.to_numpy()
        assert values.min() >= 0.0
        assert values.max() < 1.0

    def test_uniforms_have_uniform_moments(self):
        """Test the mean and variance of a long stream."""
        from pathshade.core.rng import next_uniform, seed_stream

        n = 100_000
        result = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            state = seed_stream(0, 3)
            for i in range(n):
                new_state, x = next_uniform(state)
                state = new_state
                result[i] = x

        test_kernel()
        values = result.to_numpy().astype(np.float64)
        assert abs(values.mean() - 0.5) < 0.01
        assert abs(values.var() - 1.0 / 12.0) < 0.005

    def test_same_seed_reproduces_sequence(self):
        """Test that a fixed (index, seed) pair is deterministic across launches."""
        from pathshade.core.rng import next_uniform2, seed_stream

        n = 64
        result = ti.Vector.field(2, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel(seed: ti.i32):
            for i in range(n):
                state = seed_stream(i, seed)
                state, u = next_uniform2(state)
                result[i] = u

        test_kernel(11)
        first = result.to_numpy()
        test_kernel(11)
        second = result.to_numpy()

        assert np.array_equal(first, second)

    def test_different_seeds_differ(self):
        """Test that different seeds give different sequences."""
        from pathshade.core.rng import next_uniform, seed_stream

        n = 64
        result = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel(seed: ti.i32):
            for i in range(n):
                state = seed_stream(i, seed)
                state, x = next_uniform(state)
                result[i] = x

        test_kernel(1)
        first = result.to_numpy()
        test_kernel(2)
        second = result.to_numpy()

        assert not np.array_equal(first, second)

    def test_different_indices_differ(self):
        """Test that neighbouring tasks do not share a stream."""
        from pathshade.core.rng import next_uniform, seed_stream

        n = 1000
        result = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                state = seed_stream(i, 0)
                state, x = next_uniform(state)
                result[i] = x

        test_kernel()
        values = result.to_numpy()
        assert len(np.unique(values)) > 990

    def test_next_uniform2_advances_state(self):
        """Test that the two components of a vec2 draw differ."""
        from pathshade.core.rng import next_uniform2, seed_stream

        n = 1000
        result = ti.Vector.field(2, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                state = seed_stream(i, 5)
                state, u = next_uniform2(state)
                result[i] = u

        test_kernel()
        values = result.to_numpy()
        assert np.count_nonzero(values[:, 0] == values[:, 1]) < 5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
