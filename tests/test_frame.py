"""Unit tests for the vector helpers and the local frame builder.

Tests cover:
- Orthonormality and handedness of the frame for axis-aligned, near
  degenerate and generic normals
- Local to world mapping and its inverse
- Host-side validation of direction arguments
"""

import math

import numpy as np
import pytest
import taichi as ti

FRAME_NORMALS = [
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
    (-1.0, 0.0, 0.0),
    (0.0, -1.0, 0.0),
    (0.0, 0.0, -1.0),
    # Near-degenerate: almost aligned with an axis
    (1e-4, 1.0, 1e-4),
    (1.0, 1e-6, -1e-6),
    (1e-7, -1e-7, 1.0),
    # |N.x| == |N.y| tie
    (0.5, 0.5, math.sqrt(0.5)),
    # Generic
    (0.267, -0.535, 0.802),
    (-0.6, 0.64, -0.48),
]


def _unit_normals() -> np.ndarray:
    normals = np.array(FRAME_NORMALS, dtype=np.float64)
    normals /= np.linalg.norm(normals, axis=1, keepdims=True)
    return normals.astype(np.float32)


def _compute_frames(normals: np.ndarray):
    from pathshade.core.frame import build_local_frame

    count = normals.shape[0]
    n_field = ti.Vector.field(3, dtype=ti.f32, shape=count)
    b_field = ti.Vector.field(3, dtype=ti.f32, shape=count)
    c_field = ti.Vector.field(3, dtype=ti.f32, shape=count)
    n_field.from_numpy(normals)

    @ti.kernel
    def test_kernel():
        for i in range(count):
            b, c, _ = build_local_frame(n_field[i])
            b_field[i] = b
            c_field[i] = c

    test_kernel()
    return b_field.to_numpy(), c_field.to_numpy()


class TestLocalFrame:
    """Tests for build_local_frame."""

    def test_frame_vectors_are_unit_length(self):
        """Test that B and C have unit norm for every normal."""
        normals = _unit_normals()
        b, c = _compute_frames(normals)

        assert np.allclose(np.linalg.norm(b, axis=1), 1.0, atol=1e-5)
        assert np.allclose(np.linalg.norm(c, axis=1), 1.0, atol=1e-5)

    def test_frame_vectors_are_orthogonal(self):
        """Test that B, C and N are mutually orthogonal."""
        normals = _unit_normals()
        b, c = _compute_frames(normals)

        assert np.all(np.abs(np.sum(b * c, axis=1)) < 1e-5)
        assert np.all(np.abs(np.sum(b * normals, axis=1)) < 1e-5)
        assert np.all(np.abs(np.sum(c * normals, axis=1)) < 1e-5)

    def test_frame_is_right_handed(self):
        """Test that B x C = N."""
        normals = _unit_normals()
        b, c = _compute_frames(normals)

        assert np.allclose(np.cross(b, c), normals, atol=1e-5)

    def test_frame_has_no_nan_for_axis_normals(self):
        """Test that axis-aligned normals never produce NaN."""
        normals = _unit_normals()[:6]
        b, c = _compute_frames(normals)

        assert np.all(np.isfinite(b))
        assert np.all(np.isfinite(c))

    def test_frame_for_z_up_normal(self):
        """Test the exact frame for N = (0, 0, 1)."""
        normals = np.array([[0.0, 0.0, 1.0]], dtype=np.float32)
        b, c = _compute_frames(normals)

        assert np.allclose(b[0], [1.0, 0.0, 0.0], atol=1e-6)
        assert np.allclose(c[0], [0.0, 1.0, 0.0], atol=1e-6)


class TestToWorld:
    """Tests for the local/world mapping."""

    def test_local_z_maps_to_normal(self):
        """Test that the local z-axis maps to the normal."""
        from pathshade.core.frame import to_world

        normals = _unit_normals()
        count = normals.shape[0]
        n_field = ti.Vector.field(3, dtype=ti.f32, shape=count)
        out = ti.Vector.field(3, dtype=ti.f32, shape=count)
        n_field.from_numpy(normals)

        @ti.kernel
        def test_kernel():
            for i in range(count):
                out[i] = to_world(ti.math.vec3(0.0, 0.0, 1.0), n_field[i])

        test_kernel()
        assert np.allclose(out.to_numpy(), normals, atol=1e-6)

    def test_to_world_preserves_length(self):
        """Test that mapping a unit local direction gives a unit vector."""
        from pathshade.core.frame import to_world

        normals = _unit_normals()
        count = normals.shape[0]
        n_field = ti.Vector.field(3, dtype=ti.f32, shape=count)
        out = ti.Vector.field(3, dtype=ti.f32, shape=count)
        n_field.from_numpy(normals)

        @ti.kernel
        def test_kernel():
            local_dir = ti.math.normalize(ti.math.vec3(0.3, -0.4, 0.5))
            for i in range(count):
                out[i] = to_world(local_dir, n_field[i])

        test_kernel()
        assert np.allclose(np.linalg.norm(out.to_numpy(), axis=1), 1.0, atol=1e-5)

    def test_to_local_inverts_to_world(self):
        """Test that to_local(to_world(v)) == v."""
        from pathshade.core.frame import to_local, to_world

        normals = _unit_normals()
        count = normals.shape[0]
        n_field = ti.Vector.field(3, dtype=ti.f32, shape=count)
        out = ti.Vector.field(3, dtype=ti.f32, shape=count)
        n_field.from_numpy(normals)

        @ti.kernel
        def test_kernel():
            local_dir = ti.math.vec3(0.6, 0.0, 0.8)
            for i in range(count):
                out[i] = to_local(to_world(local_dir, n_field[i]), n_field[i])

        test_kernel()
        expected = np.tile([0.6, 0.0, 0.8], (count, 1))
        assert np.allclose(out.to_numpy(), expected, atol=1e-5)


class TestVectorHelpers:
    """Tests for the vector helper functions."""

    def test_clamp01(self):
        """Test clamping to [0, 1]."""
        from pathshade.core.vector import clamp01

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = clamp01(-0.5)
            result[1] = clamp01(0.25)
            result[2] = clamp01(1.5)

        test_kernel()
        assert result[0] == 0.0
        assert abs(result[1] - 0.25) < 1e-7
        assert result[2] == 1.0

    def test_as_unit_vector_normalizes(self):
        """Test that host-side vectors are normalized."""
        from pathshade.core.vector import as_unit_vector

        assert as_unit_vector((0.0, 0.0, 2.0)) == (0.0, 0.0, 1.0)
        x, y, z = as_unit_vector([3.0, 4.0, 0.0])
        assert abs(x - 0.6) < 1e-12
        assert abs(y - 0.8) < 1e-12
        assert z == 0.0

    def test_as_unit_vector_rejects_zero(self):
        """Test that zero vectors are rejected."""
        from pathshade.core.vector import as_unit_vector

        with pytest.raises(ValueError, match="cannot be normalized"):
            as_unit_vector((0.0, 0.0, 0.0), "normal")

    def test_as_unit_vector_rejects_wrong_arity(self):
        """Test that vectors without three components are rejected."""
        from pathshade.core.vector import as_unit_vector

        with pytest.raises(ValueError, match="3 components"):
            as_unit_vector((1.0, 0.0), "wi")

    def test_as_unit_vector_rejects_nan(self):
        """Test that non-finite vectors are rejected."""
        from pathshade.core.vector import as_unit_vector

        with pytest.raises(ValueError):
            as_unit_vector((float("nan"), 0.0, 1.0))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
