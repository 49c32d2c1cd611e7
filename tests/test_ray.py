"""Unit tests for the ray and vector modules.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, cross, unit_vector, near_zero, reflect, refract)
- Schlick reflectance
- Random sampling functions for Monte Carlo
"""

import math

import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from pathtracer.core.ray import Ray, ray_at
        from pathtracer.core.vector import vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(1.0)
        assert r[1] == pytest.approx(2.0)
        assert r[2] == pytest.approx(3.0)

    def test_ray_at_unnormalized_direction(self):
        """Test ray_at scales the direction as given, without normalizing."""
        from pathtracer.core.ray import make_ray, ray_at
        from pathtracer.core.vector import vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 0.0, 0.0), vec3(0.0, 2.0, 0.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(1.0)
        assert r[1] == pytest.approx(5.0)
        assert r[2] == pytest.approx(0.0)

    def test_ray_at_negative_t(self):
        """Test ray_at handles negative t (behind origin)."""
        from pathtracer.core.ray import make_ray, ray_at
        from pathtracer.core.vector import vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
            result[None] = ray_at(ray, -3.0)

        test_kernel()
        assert result[None][1] == pytest.approx(-3.0)


class TestVectorAlgebra:
    """Tests for vector algebra helpers."""

    def test_dot_cross_length(self):
        """Test dot, cross and length on simple vectors."""
        from pathtracer.core.vector import cross, dot, length, length_squared, vec3

        dot_result = ti.field(dtype=ti.f64, shape=())
        cross_result = ti.Vector.field(3, dtype=ti.f64, shape=())
        len_result = ti.field(dtype=ti.f64, shape=())
        len_sq_result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            a = vec3(1.0, 2.0, 3.0)
            b = vec3(4.0, -5.0, 6.0)
            dot_result[None] = dot(a, b)
            cross_result[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
            len_result[None] = length(vec3(3.0, 4.0, 0.0))
            len_sq_result[None] = length_squared(vec3(3.0, 4.0, 0.0))

        test_kernel()
        assert dot_result[None] == pytest.approx(12.0)
        c = cross_result[None]
        assert (c[0], c[1], c[2]) == pytest.approx((0.0, 0.0, 1.0))
        assert len_result[None] == pytest.approx(5.0)
        assert len_sq_result[None] == pytest.approx(25.0)

    def test_unit_vector(self):
        """Test unit_vector produces a unit-length vector in the same direction."""
        from pathtracer.core.vector import unit_vector, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = unit_vector(vec3(0.0, 3.0, 4.0))

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((0.0, 0.6, 0.8))

    def test_normalize_matches_unit_vector(self):
        """Test normalize is the same operation as unit_vector."""
        from pathtracer.core.vector import normalize, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(-2.0, 0.0, 0.0))

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((-1.0, 0.0, 0.0))

    @pytest.mark.parametrize(
        "v,expected",
        [
            ((0.0, 0.0, 0.0), 1),
            ((1e-9, -1e-9, 5e-9), 1),
            ((1e-9, 0.0, 1e-7), 0),
            ((0.5, 0.0, 0.0), 0),
        ],
    )
    def test_near_zero(self, v, expected):
        """Test near_zero requires every component below 1e-8."""
        from pathtracer.core.vector import near_zero, vec3

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(x: ti.f64, y: ti.f64, z: ti.f64):
            result[None] = ti.cast(near_zero(vec3(x, y, z)), ti.i32)

        test_kernel(*v)
        assert result[None] == expected

    def test_reflect_flips_normal_component(self):
        """Test dot(reflect(v, n), n) == -dot(v, n) and the tangent part is kept."""
        from pathtracer.core.vector import dot, reflect, unit_vector, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())
        dot_in = ti.field(dtype=ti.f64, shape=())
        dot_out = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(1.0, -2.0, 0.5)
            n = unit_vector(vec3(0.2, 1.0, -0.3))
            r = reflect(v, n)
            result[None] = r
            dot_in[None] = dot(v, n)
            dot_out[None] = dot(r, n)

        test_kernel()
        assert dot_out[None] == pytest.approx(-dot_in[None], abs=1e-12)

    def test_reflect_mirror(self):
        """Test reflect on a 45 degree incidence."""
        from pathtracer.core.vector import reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((1.0, 1.0, 0.0))

    def test_refract_straight_through(self):
        """Test refract at normal incidence keeps the direction."""
        from pathtracer.core.vector import refract, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((0.0, -1.0, 0.0), abs=1e-12)

    def test_refract_snell(self):
        """Test refract obeys Snell's law: ratio * sin(theta_i) == sin(theta_t)."""
        from pathtracer.core.vector import refract, unit_vector, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())
        ratio = 1.0 / 1.5

        @ti.kernel
        def test_kernel(eta: ti.f64):
            incident = unit_vector(vec3(1.0, -1.0, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), eta)

        test_kernel(ratio)
        r = result[None]
        sin_in = math.sqrt(0.5)
        assert r[0] == pytest.approx(ratio * sin_in, abs=1e-12)
        assert r[1] < 0.0
        assert r[0] ** 2 + r[1] ** 2 + r[2] ** 2 == pytest.approx(1.0, abs=1e-12)

    @pytest.mark.parametrize("ratio", [1.5, 1.0 / 1.5, 1.33])
    def test_schlick_normal_incidence(self, ratio):
        """Test Schlick reflectance at cos = 1 equals r0."""
        from pathtracer.core.vector import schlick_reflectance

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(r: ti.f64):
            result[None] = schlick_reflectance(1.0, r)

        test_kernel(ratio)
        r0 = ((1.0 - ratio) / (1.0 + ratio)) ** 2
        assert result[None] == pytest.approx(r0)

    def test_schlick_grazing(self):
        """Test Schlick reflectance at grazing incidence is total."""
        from pathtracer.core.vector import schlick_reflectance

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        assert result[None] == pytest.approx(1.0)

    def test_degrees_to_radians(self):
        """Test the host-side angle conversion."""
        from pathtracer.core.vector import degrees_to_radians

        assert degrees_to_radians(180.0) == pytest.approx(math.pi)
        assert degrees_to_radians(90.0) == pytest.approx(math.pi / 2.0)


class TestRandomSampling:
    """Tests for random sampling utilities."""

    def test_random_double_range(self):
        """Test random_double draws lie in [0, 1)."""
        from pathtracer.core.vector import random_double

        n = 1000
        samples = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_double()

        test_kernel()
        values = samples.to_numpy()
        assert values.min() >= 0.0
        assert values.max() < 1.0

    def test_random_range_bounds(self):
        """Test random_range draws lie in [lo, hi)."""
        from pathtracer.core.vector import random_range

        n = 1000
        samples = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_range(-2.0, 3.0)

        test_kernel()
        values = samples.to_numpy()
        assert values.min() >= -2.0
        assert values.max() < 3.0

    def test_random_vec_range_bounds(self):
        """Test every component of random_vec_range lies in [lo, hi)."""
        from pathtracer.core.vector import random_vec_range

        n = 500
        samples = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_vec_range(0.5, 1.0)

        test_kernel()
        values = samples.to_numpy()
        assert values.min() >= 0.5
        assert values.max() < 1.0

    def test_random_unit_vector_is_unit(self):
        """Test random_unit_vector returns unit-length vectors."""
        from pathtracer.core.vector import random_unit_vector

        n = 1000
        samples = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_unit_vector()

        test_kernel()
        values = samples.to_numpy()
        lengths = (values**2).sum(axis=1) ** 0.5
        assert lengths == pytest.approx([1.0] * n, abs=1e-12)
        # Roughly uniform: mean close to the origin
        assert abs(values.mean(axis=0)).max() < 0.1

    def test_random_on_hemisphere(self):
        """Test random_on_hemisphere stays on the normal's side."""
        from pathtracer.core.vector import random_on_hemisphere, vec3

        n = 500
        samples = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_on_hemisphere(vec3(0.0, 0.0, 1.0))

        test_kernel()
        assert samples.to_numpy()[:, 2].min() >= 0.0

    def test_random_in_unit_disk(self):
        """Test random_in_unit_disk returns points with z = 0 inside the disk."""
        from pathtracer.core.vector import random_in_unit_disk

        n = 500
        samples = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_in_unit_disk()

        test_kernel()
        values = samples.to_numpy()
        assert (values[:, 0] ** 2 + values[:, 1] ** 2).max() < 1.0
        assert abs(values[:, 2]).max() == 0.0
