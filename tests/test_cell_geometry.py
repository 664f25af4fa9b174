import random

import pytest

from fcctransport.cell_geometry import (
    cell_position,
    generate_coordinate,
    reflect_particle,
    tet_determinant,
)
from fcctransport.decomposition import DecompositionObject
from fcctransport.direction_cosine import DirectionCosine, Vector3
from fcctransport.fcc_grid import GlobalFccGrid
from fcctransport.mesh import CellInfo, Domain, GeometryRegion, Shape
from fcctransport.particle import Particle


def _grid():
    return GlobalFccGrid(1, 1, 1, 2.0, 2.0, 2.0)


def _domain():
    grid = _grid()
    region = GeometryRegion(
        "fuel", Shape.BRICK, x_min=0.0, x_max=2.0, y_min=0.0, y_max=2.0, z_min=0.0, z_max=2.0
    )
    return Domain(
        0,
        0,
        {0: CellInfo(0, 0, 0, 0)},
        [],
        grid,
        DecompositionObject(0, 1, 1, 0),
        [region],
        "reflect",
        ["fuel"],
        1,
    )


def test_cell_position_matches_grid_center():
    domain = _domain()
    position = cell_position(domain, 0)
    center = _grid().cell_center(0)
    assert position.x == pytest.approx(center.x)
    assert position.y == pytest.approx(center.y)
    assert position.z == pytest.approx(center.z)


def test_tet_determinant_unit_tetrahedron():
    value = tet_determinant(
        Vector3(1.0, 0.0, 0.0), Vector3(0.0, 1.0, 0.0), Vector3(0.0, 0.0, 1.0), Vector3()
    )
    assert value == pytest.approx(1.0)


def test_tet_determinant_swap_negates():
    a, b, c, d = Vector3(1.0, 0.2, 0.0), Vector3(0.1, 1.5, 0.3), Vector3(0.0, 0.4, 2.0), Vector3(0.3, 0.3, 0.3)
    assert tet_determinant(a, b, c, d) == pytest.approx(-tet_determinant(b, a, c, d))


def test_tet_determinant_translation_invariant():
    a, b, c, d = Vector3(1.0, 0.2, 0.0), Vector3(0.1, 1.5, 0.3), Vector3(0.0, 0.4, 2.0), Vector3(0.3, 0.3, 0.3)
    shift = Vector3(5.0, -3.0, 7.0)
    assert tet_determinant(a + shift, b + shift, c + shift, d + shift) == pytest.approx(
        tet_determinant(a, b, c, d)
    )


def test_tet_determinant_degenerate_is_zero():
    a = Vector3(1.0, 1.0, 1.0)
    assert tet_determinant(a, a, Vector3(0.0, 1.0, 0.0), Vector3()) == pytest.approx(0.0)


def test_generate_coordinate_inside_cell():
    domain = _domain()
    rng = random.Random(7)
    for _ in range(200):
        point = generate_coordinate(rng.random, domain, 0)
        assert 0.0 <= point.x <= 2.0
        assert 0.0 <= point.y <= 2.0
        assert 0.0 <= point.z <= 2.0


def test_generate_coordinate_is_repeatable():
    domain = _domain()
    first = generate_coordinate(random.Random(3).random, domain, 0)
    second = generate_coordinate(random.Random(3).random, domain, 0)
    assert first == second


def test_generate_coordinate_no_facets_gives_origin():
    domain = _domain()
    domain.mesh.cell_connectivity[0].facets = []
    assert generate_coordinate(random.Random(1).random, domain, 0) == Vector3(0.0, 0.0, 0.0)


def test_generate_coordinate_without_selected_tet_raises():
    domain = _domain()
    with pytest.raises(ValueError):
        generate_coordinate(lambda: 0.0, domain, 0)


def _particle_along(normal, sign):
    direction = DirectionCosine(sign * normal.x, sign * normal.y, sign * normal.z)
    return Particle(
        cell=0,
        facet=0,
        direction_cosine=direction,
        velocity=Vector3(direction.alpha, direction.beta, direction.gamma) * 3.0,
    )


def test_reflect_particle_reverses_outward_direction():
    domain = _domain()
    normal = domain.mesh.cell_geometry[0][0].normal
    particle = _particle_along(normal, 1.0)
    reflect_particle(domain, particle)
    assert particle.direction_cosine.alpha == pytest.approx(-normal.x)
    assert particle.direction_cosine.beta == pytest.approx(-normal.y)
    assert particle.direction_cosine.gamma == pytest.approx(-normal.z)
    assert particle.velocity.x == pytest.approx(-3.0 * normal.x)
    assert particle.velocity.length() == pytest.approx(3.0)


def test_reflect_particle_keeps_inward_direction():
    domain = _domain()
    normal = domain.mesh.cell_geometry[0][0].normal
    particle = _particle_along(normal, -1.0)
    reflect_particle(domain, particle)
    assert particle.direction_cosine.alpha == pytest.approx(-normal.x)
    assert particle.direction_cosine.beta == pytest.approx(-normal.y)
    assert particle.direction_cosine.gamma == pytest.approx(-normal.z)
    assert particle.velocity.length() == pytest.approx(3.0)