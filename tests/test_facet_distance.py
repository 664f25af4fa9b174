import pytest

from fcctransport.decomposition import DecompositionObject
from fcctransport.direction_cosine import DirectionCosine, Vector3
from fcctransport.facet_distance import (
    HUGE_DOUBLE,
    NearestFacet,
    distance_to_segment,
    find_nearest,
    nearest_facet,
)
from fcctransport.fcc_grid import GlobalFccGrid
from fcctransport.location import Location
from fcctransport.mesh import CellInfo, Domain, GeneralPlane, GeometryRegion, Shape
from fcctransport.particle import Particle


def _unit_cell_domain():
    grid = GlobalFccGrid(1, 1, 1, 1.0, 1.0, 1.0)
    cells = {0: CellInfo(domain_gid=0, foreman=0, domain_index=0, cell_index=0)}
    region = GeometryRegion("fuel", Shape.BRICK, 0.0, 1.0, 0.0, 1.0, 0.0, 1.0)
    return Domain(
        0, 0, cells, [], grid, DecompositionObject(0, 1, 1, 0), [region], "reflect", ["fuel"], 1
    )


def _triangle():
    p0, p1, p2 = Vector3(0, 0, 0), Vector3(1, 0, 0), Vector3(0, 1, 0)
    return GeneralPlane.from_points(p0, p1, p2), p0, p1, p2


def test_distance_to_segment_hits_triangle():
    plane, p0, p1, p2 = _triangle()
    up = DirectionCosine(0.0, 0.0, 1.0)
    d = distance_to_segment(1e-16, 1.0, plane, p0, p1, p2, Vector3(0.2, 0.2, -1.0), up, False)
    assert d == pytest.approx(1.0)


def test_distance_to_segment_misses_triangle():
    plane, p0, p1, p2 = _triangle()
    up = DirectionCosine(0.0, 0.0, 1.0)
    d = distance_to_segment(1e-16, 1.0, plane, p0, p1, p2, Vector3(2.0, 2.0, -1.0), up, False)
    assert d == HUGE_DOUBLE


def test_distance_to_segment_behind_plane():
    plane, p0, p1, p2 = _triangle()
    up = DirectionCosine(0.0, 0.0, 1.0)
    start = Vector3(0.2, 0.2, 1.0)
    assert distance_to_segment(1e-16, 1.0, plane, p0, p1, p2, start, up, False) == HUGE_DOUBLE
    assert distance_to_segment(1e-16, 1.0, plane, p0, p1, p2, start, up, True) == pytest.approx(-1.0)


def test_find_nearest_prefers_smallest_positive():
    result = find_nearest([HUGE_DOUBLE, 2.0, 1.0, 3.0])
    assert result == NearestFacet(2, 1.0)


def test_find_nearest_later_facet_wins_tie():
    result = find_nearest([1.0, 1.0, HUGE_DOUBLE])
    assert result.facet == 1


def test_find_nearest_falls_back_to_small_negative():
    result = find_nearest([-0.5, -0.1, HUGE_DOUBLE])
    assert result.facet == 1
    assert result.distance_to_facet == -0.1


def test_find_nearest_without_solution():
    result = find_nearest([HUGE_DOUBLE] * 4)
    assert result.distance_to_facet == HUGE_DOUBLE


@pytest.mark.parametrize(
    "direction, face",
    [
        (DirectionCosine(1.0, 0.0, 0.0), 0),
        (DirectionCosine(-1.0, 0.0, 0.0), 1),
        (DirectionCosine(0.0, 1.0, 0.0), 2),
        (DirectionCosine(0.0, -1.0, 0.0), 3),
        (DirectionCosine(0.0, 0.0, 1.0), 4),
        (DirectionCosine(0.0, 0.0, -1.0), 5),
    ],
)
def test_nearest_facet_lies_on_face_ahead(direction, face):
    domain = _unit_cell_domain()
    start = Vector3(0.45, 0.3, 0.4)
    result = nearest_facet(None, Location(0, 0, 0), start, direction, [domain])
    assert result.facet // 4 == face
    hit = Vector3(
        start.x + result.distance_to_facet * direction.alpha,
        start.y + result.distance_to_facet * direction.beta,
        start.z + result.distance_to_facet * direction.gamma,
    )
    plane = domain.mesh.cell_geometry[0][result.facet]
    assert plane.evaluate(hit) == pytest.approx(0.0, abs=1e-12)
    assert plane.normal.dot(Vector3(direction.alpha, direction.beta, direction.gamma)) > 0


def test_nearest_facet_rejects_unset_location():
    domain = _unit_cell_domain()
    with pytest.raises(ValueError):
        nearest_facet(None, Location(), Vector3(0.5, 0.5, 0.5), DirectionCosine(1, 0, 0), [domain])


def test_nearest_facet_without_direction_is_unbound():
    domain = _unit_cell_domain()
    with pytest.raises(RuntimeError):
        nearest_facet(
            None, Location(0, 0, 0), Vector3(0.5, 0.5, 0.5), DirectionCosine(0, 0, 0), [domain]
        )


def test_nearest_facet_on_boundary_reports_zero():
    domain = _unit_cell_domain()
    result = nearest_facet(
        None, Location(0, 0, 0), Vector3(1.0, 0.3, 0.4), DirectionCosine(1, 0, 0), [domain]
    )
    assert result.distance_to_facet == 0.0
    assert result.facet // 4 == 0


def test_stuck_particle_is_moved_inside():
    domain = _unit_cell_domain()
    particle = Particle(num_segments=2e7)
    location = Location(0, 0, 3)
    coordinate = Vector3(1.0, 0.3, 0.4)
    result = nearest_facet(particle, location, coordinate, DirectionCosine(1, 0, 0), [domain])
    assert location.facet == -1
    assert coordinate.x < 1.0
    assert result.distance_to_facet > 0.0
    assert result.distance_to_facet == pytest.approx(1.0 - coordinate.x, rel=1e-6)