import math
import random

import pytest

from fcctransport.direction_cosine import DirectionCosine, Vector3


def _sequence(*values):
    it = iter(values)
    return lambda: next(it)


def test_cross_of_axes():
    assert Vector3(1, 0, 0).cross(Vector3(0, 1, 0)) == Vector3(0, 0, 1)
    assert Vector3(0, 1, 0).cross(Vector3(1, 0, 0)) == Vector3(0, 0, -1)


def test_dot_of_orthogonal_axes_is_zero():
    assert Vector3(1, 0, 0).dot(Vector3(0, 0, 1)) == 0


def test_length():
    assert Vector3(3.0, 4.0, 0.0).length() == pytest.approx(5.0)


def test_arithmetic_round_trip():
    a = Vector3(1.5, -2.0, 3.25)
    b = Vector3(0.5, 4.0, -1.0)
    assert (a + b) - b == a
    assert (a * 2.0) / 2.0 == a
    assert 2.0 * a == a * 2.0
    assert -a + a == Vector3(0.0, 0.0, 0.0)


def test_cross_is_orthogonal_to_operands():
    a = Vector3(1.0, 2.0, 3.0)
    b = Vector3(-2.0, 0.5, 4.0)
    c = a.cross(b)
    assert c.dot(a) == pytest.approx(0.0)
    assert c.dot(b) == pytest.approx(0.0)


def test_sample_isotropic_midpoint():
    dc = DirectionCosine()
    dc.sample_isotropic(_sequence(0.5, 0.5))
    assert dc.gamma == pytest.approx(0.0)
    assert dc.alpha == pytest.approx(1.0)
    assert dc.beta == pytest.approx(0.0)


def test_sample_isotropic_gives_unit_vectors():
    rng = random.Random(7)
    for _ in range(200):
        dc = DirectionCosine()
        dc.sample_isotropic(rng.random)
        norm = dc.alpha**2 + dc.beta**2 + dc.gamma**2
        assert norm == pytest.approx(1.0)


def test_sample_isotropic_is_deterministic_for_same_stream():
    first, second = DirectionCosine(), DirectionCosine()
    first.sample_isotropic(random.Random(3).random)
    second.sample_isotropic(random.Random(3).random)
    assert first == second


@pytest.mark.parametrize("theta", [0.1, 0.7, 1.3, 2.5])
@pytest.mark.parametrize("phi", [-2.0, 0.0, 1.0, 3.0])
def test_rotation_about_z_axis_is_identity(theta, phi):
    dc = DirectionCosine(0.0, 0.0, 1.0)
    dc.rotate_3d_vector(math.sin(theta), math.cos(theta), math.sin(phi), math.cos(phi))
    assert dc.gamma == pytest.approx(math.cos(theta))
    assert dc.alpha == pytest.approx(math.sin(theta) * math.cos(phi))
    assert dc.beta == pytest.approx(math.sin(theta) * math.sin(phi))


def test_rotation_preserves_unit_length():
    rng = random.Random(11)
    for _ in range(100):
        dc = DirectionCosine()
        dc.sample_isotropic(rng.random)
        theta = rng.uniform(0.0, math.pi)
        phi = rng.uniform(-math.pi, math.pi)
        dc.rotate_3d_vector(math.sin(theta), math.cos(theta), math.sin(phi), math.cos(phi))
        assert dc.alpha**2 + dc.beta**2 + dc.gamma**2 == pytest.approx(1.0)


def test_zero_polar_angle_keeps_direction():
    rng = random.Random(5)
    dc = DirectionCosine()
    dc.sample_isotropic(rng.random)
    before = (dc.alpha, dc.beta, dc.gamma)
    dc.rotate_3d_vector(0.0, 1.0, 0.0, 1.0)
    assert (dc.alpha, dc.beta, dc.gamma) == pytest.approx(before)