"""Unit tests for reflect, refract and the Fresnel terms.

Tests cover:
- Mirror reflection about a normal
- Snell's law from both sides of the interface
- Total internal reflection (zero refracted vector, kr = 1)
- Dielectric reflectance at normal incidence and its range
- Schlick's approximation at its end points
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestReflect:
    """Tests for reflect."""

    def test_reflect_45_degrees(self):
        """Test reflection of a 45 degree ray off a horizontal surface."""
        from pathshade.materials.fresnel import reflect

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(ti.math.vec3(1.0, -1.0, 0.0))
            result[None] = reflect(incident, ti.math.vec3(0.0, 1.0, 0.0))

        test_kernel()
        s = 1.0 / math.sqrt(2.0)
        assert np.allclose(result[None].to_numpy(), [s, s, 0.0], atol=1e-6)

    def test_reflect_normal_incidence(self):
        """Test that a ray hitting head-on bounces straight back."""
        from pathshade.materials.fresnel import reflect

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(ti.math.vec3(0.0, 0.0, -1.0), ti.math.vec3(0.0, 0.0, 1.0))

        test_kernel()
        assert np.allclose(result[None].to_numpy(), [0.0, 0.0, 1.0], atol=1e-7)


class TestRefract:
    """Tests for refract."""

    def test_refract_from_outside_obeys_snell(self):
        """Test sin(theta_t) = sin(theta_i) / ior entering glass."""
        from pathshade.materials.fresnel import refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(ti.math.vec3(1.0, -1.0, 0.0))
            result[None] = refract(incident, ti.math.vec3(0.0, 1.0, 0.0), 1.5)

        test_kernel()
        t = result[None].to_numpy()
        assert abs(t[0] - math.sin(math.radians(45.0)) / 1.5) < 1e-5
        assert t[1] < 0.0
        assert abs(np.linalg.norm(t) - 1.0) < 1e-5

    def test_refract_from_inside_obeys_snell(self):
        """Test sin(theta_t) = ior * sin(theta_i) leaving glass."""
        from pathshade.materials.fresnel import refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.vec3(0.2, ti.sqrt(0.96), 0.0)
            result[None] = refract(incident, ti.math.vec3(0.0, 1.0, 0.0), 1.5)

        test_kernel()
        t = result[None].to_numpy()
        assert abs(t[0] - 0.3) < 1e-5
        assert abs(t[1] - math.sqrt(0.91)) < 1e-5

    def test_refract_normal_incidence_passes_straight(self):
        """Test that a head-on ray is not bent."""
        from pathshade.materials.fresnel import refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = refract(ti.math.vec3(0.0, -1.0, 0.0), ti.math.vec3(0.0, 1.0, 0.0), 1.5)

        test_kernel()
        assert np.allclose(result[None].to_numpy(), [0.0, -1.0, 0.0], atol=1e-6)

    def test_total_internal_reflection_returns_zero(self):
        """Test that refract gives the zero vector beyond the critical angle."""
        from pathshade.materials.fresnel import refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            # 60 degrees from the normal, inside the glass
            incident = ti.math.vec3(ti.sqrt(0.75), 0.5, 0.0)
            result[None] = refract(incident, ti.math.vec3(0.0, 1.0, 0.0), 1.5)

        test_kernel()
        assert np.all(result[None].to_numpy() == 0.0)


class TestFresnel:
    """Tests for the dielectric Fresnel reflectance."""

    def test_normal_incidence(self):
        """Test kr = ((n - 1) / (n + 1))^2 at normal incidence."""
        from pathshade.materials.fresnel import fresnel

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = fresnel(ti.math.vec3(0.0, -1.0, 0.0), ti.math.vec3(0.0, 1.0, 0.0), 1.5)

        test_kernel()
        assert abs(result[None] - 0.04) < 1e-6

    def test_total_internal_reflection_is_fully_reflective(self):
        """Test kr = 1 at a grazing angle from inside the denser medium."""
        from pathshade.materials.fresnel import fresnel

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            n = ti.math.vec3(0.0, 1.0, 0.0)
            # 45 degrees, just past the critical angle of ~41.8 degrees
            result[0] = fresnel(ti.math.normalize(ti.math.vec3(1.0, 1.0, 0.0)), n, 1.5)
            # Grazing
            result[1] = fresnel(ti.math.normalize(ti.math.vec3(1.0, 0.01, 0.0)), n, 1.5)

        test_kernel()
        assert result[0] == 1.0
        assert result[1] == 1.0

    def test_reflectance_is_in_unit_interval(self):
        """Test 0 <= kr <= 1 for angles on both sides of the interface."""
        from pathshade.materials.fresnel import fresnel

        n = 180
        result = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(n):
                # Sweep from straight down to straight up, skipping the exact tangent
                angle = (i + 0.5) / n * ti.math.pi
                incident = ti.math.vec3(ti.sin(angle), -ti.cos(angle), 0.0)
                result[i] = fresnel(incident, normal, 1.5)

        test_kernel()
        values = result.to_numpy()
        assert np.all(values >= 0.0)
        assert np.all(values <= 1.0)

    def test_reflectance_increases_toward_grazing(self):
        """Test that kr grows from normal to grazing incidence outside."""
        from pathshade.materials.fresnel import fresnel

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            result[0] = fresnel(ti.math.vec3(0.0, -1.0, 0.0), normal, 1.5)
            result[1] = fresnel(ti.math.normalize(ti.math.vec3(1.0, -0.05, 0.0)), normal, 1.5)

        test_kernel()
        assert result[1] > result[0]
        assert result[1] > 0.5


class TestSchlick:
    """Tests for schlick_fresnel."""

    def test_end_points(self):
        """Test F(1) = f0 and F(0) = 1."""
        from pathshade.materials.fresnel import schlick_fresnel

        at_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        at_grazing = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            f0 = ti.math.vec3(1.0, 0.782, 0.344)
            at_normal[None] = schlick_fresnel(f0, 1.0)
            at_grazing[None] = schlick_fresnel(f0, 0.0)

        test_kernel()
        assert np.allclose(at_normal[None].to_numpy(), [1.0, 0.782, 0.344], atol=1e-6)
        assert np.allclose(at_grazing[None].to_numpy(), [1.0, 1.0, 1.0], atol=1e-6)

    def test_half_angle_value(self):
        """Test the closed form at cos(theta) = 0.5."""
        from pathshade.materials.fresnel import schlick_fresnel

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_fresnel(ti.math.vec3(0.04, 0.04, 0.04), 0.5)

        test_kernel()
        expected = 0.04 + 0.96 * 0.5**5
        assert np.allclose(result[None].to_numpy(), expected, atol=1e-6)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
