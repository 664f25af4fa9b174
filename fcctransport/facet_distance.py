"""Distance along a particle's flight path to the nearest facet of its cell."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from fcctransport.cell_geometry import cell_position
from fcctransport.direction_cosine import DirectionCosine, Vector3
from fcctransport.location import Location
from fcctransport.mesh import Domain, GeneralPlane
from fcctransport.particle import Particle

HUGE_DOUBLE = 1e75
SMALL_DOUBLE = 1e-35

_BOUNDING_BOX_TOLERANCE = 1e-9
_MAX_ALLOWED_SEGMENTS = 10_000_000
_MAX_ITERATIONS = 10_000
_MAX_MOVE_FACTOR = 1.0e-2


@dataclass
class NearestFacet:
    """The closest facet ahead of a particle and the distance to it."""

    facet: int = 0
    distance_to_facet: float = HUGE_DOUBLE


def _outside_on_axis(points: Sequence[Vector3], target: Vector3, axis: str) -> bool:
    """Whether all points lie strictly on one side of ``target`` along ``axis``."""
    value = getattr(target, axis)
    below = all(getattr(p, axis) > value + _BOUNDING_BOX_TOLERANCE for p in points)
    above = all(getattr(p, axis) < value - _BOUNDING_BOX_TOLERANCE for p in points)
    return below or above


def _cross(a: Vector3, b: Vector3, c: Vector3, u: str, v: str) -> float:
    """The 2D cross product (b - a) x (c - a) in the (u, v) projection."""
    au, av = getattr(a, u), getattr(a, v)
    return (getattr(b, u) - au) * (getattr(c, v) - av) - (getattr(b, v) - av) * (
        getattr(c, u) - au
    )


def distance_to_segment(
    plane_tolerance: float,
    normal_dot: float,
    plane: GeneralPlane,
    p0: Vector3,
    p1: Vector3,
    p2: Vector3,
    coordinate: Vector3,
    direction: DirectionCosine,
    allow_enter: bool,
) -> float:
    """Distance along ``direction`` to the triangle (p0, p1, p2), or HUGE_DOUBLE.

    ``normal_dot`` is the dot product of the plane normal with the direction.
    A point too far behind the plane is rejected unless ``allow_enter``.
    """
    numerator = -(plane.a * coordinate.x + plane.b * coordinate.y + plane.c * coordinate.z + plane.d)

    if not allow_enter and numerator < 0.0 and numerator * numerator > plane_tolerance:
        return HUGE_DOUBLE

    distance = numerator / normal_dot
    hit = Vector3(
        coordinate.x + distance * direction.alpha,
        coordinate.y + distance * direction.beta,
        coordinate.z + distance * direction.gamma,
    )
    corners = (p0, p1, p2)

    # At least one normal component exceeds 1/sqrt(3); project along it.
    if plane.c < -0.5 or plane.c > 0.5:
        box_axes, (u, v) = ("x", "y"), ("x", "y")
    elif plane.b < -0.5 or plane.b > 0.5:
        box_axes, (u, v) = ("x", "z"), ("z", "x")
    elif plane.a < -0.5 or plane.a > 0.5:
        box_axes, (u, v) = ("z", "y"), ("y", "z")
    else:
        box_axes, (u, v) = (), (None, None)

    if any(_outside_on_axis(corners, hit, axis) for axis in box_axes):
        return HUGE_DOUBLE

    if u is None:
        cross0 = cross1 = cross2 = 0.0
    else:
        cross1 = _cross(p0, p1, hit, u, v)
        cross2 = _cross(p1, p2, hit, u, v)
        cross0 = _cross(p2, p0, hit, u, v)

    cross_tol = 1e-9 * abs(cross0 + cross1 + cross2)
    if (cross0 > -cross_tol and cross1 > -cross_tol and cross2 > -cross_tol) or (
        cross0 < cross_tol and cross1 < cross_tol and cross2 < cross_tol
    ):
        return distance
    return HUGE_DOUBLE


def find_nearest(distances: Sequence[float]) -> NearestFacet:
    """The facet with the smallest positive distance.

    On ties the later facet wins.  If no distance is positive, the
    non-positive distance of smallest magnitude is used instead.
    """
    nearest = NearestFacet()
    negative = NearestFacet(distance_to_facet=-HUGE_DOUBLE)

    for index, distance in enumerate(distances):
        if distance > 0.0:
            if distance <= nearest.distance_to_facet:
                nearest = NearestFacet(index, distance)
        elif distance > negative.distance_to_facet:
            negative = NearestFacet(index, distance)

    if nearest.distance_to_facet == HUGE_DOUBLE and negative.distance_to_facet != -HUGE_DOUBLE:
        nearest = NearestFacet(negative.facet, negative.distance_to_facet)
    return nearest


def _move_toward_center(
    domain: Domain, location: Location, coordinate: Vector3, move_factor: float
) -> None:
    target = cell_position(domain, location.cell)
    coordinate.x += move_factor * (target.x - coordinate.x)
    coordinate.y += move_factor * (target.y - coordinate.y)
    coordinate.z += move_factor * (target.z - coordinate.z)


def _facet_distances(
    domain: Domain, location: Location, coordinate: Vector3, direction: DirectionCosine
) -> list[float]:
    connectivity = domain.mesh.cell_connectivity[location.cell]
    planes = domain.mesh.cell_geometry[location.cell]
    nodes = domain.mesh.nodes
    plane_tolerance = 1e-16 * coordinate.dot(coordinate)

    distances = []
    for facet, plane in zip(connectivity.facets, planes):
        normal_dot = plane.a * direction.alpha + plane.b * direction.beta + plane.c * direction.gamma
        # Only facets the particle is leaving through are candidates.
        if normal_dot <= 0.0:
            distances.append(HUGE_DOUBLE)
            continue
        p0, p1, p2 = (nodes[p] for p in facet.points[:3])
        distances.append(
            distance_to_segment(
                plane_tolerance, normal_dot, plane, p0, p1, p2, coordinate, direction, False
            )
        )
    return distances


def _nearest_facet_in_cell(
    particle: Particle | None,
    domain: Domain,
    location: Location,
    coordinate: Vector3,
    direction: DirectionCosine,
) -> NearestFacet:
    iteration = 0
    move_factor = 0.5 * SMALL_DOUBLE
    while True:
        nearest = find_nearest(_facet_distances(domain, location, coordinate, direction))
        if particle is None:
            return nearest
        stuck = (nearest.distance_to_facet == HUGE_DOUBLE and move_factor > 0) or (
            particle.num_segments > _MAX_ALLOWED_SEGMENTS and nearest.distance_to_facet <= 0.0
        )
        if not stuck:
            return nearest

        # No usable solution: nudge the particle toward the cell centre and retry.
        _move_toward_center(domain, location, coordinate, move_factor)
        iteration += 1
        move_factor = min(move_factor * 2.0, _MAX_MOVE_FACTOR)
        location.facet = -1
        if iteration == _MAX_ITERATIONS:
            raise RuntimeError(
                f"no facet found for cell {location.cell} after {_MAX_ITERATIONS} attempts"
            )


def nearest_facet(
    particle: Particle | None,
    location: Location,
    coordinate: Vector3,
    direction: DirectionCosine,
    domains: Sequence[Domain],
) -> NearestFacet:
    """The nearest facet of the located cell along ``direction``.

    With a particle, a coordinate that yields no solution is moved toward the
    cell centre (``coordinate`` and ``location.facet`` are updated in place)
    until one is found.  Negative distances are reported as zero.  Raises
    ValueError for an unset location and RuntimeError when the cell does not
    bound the flight path.
    """
    if location.domain < 0 or location.cell < 0:
        raise ValueError(f"bad location: domain {location.domain}, cell {location.cell}")
    domain = domains[location.domain]

    nearest = _nearest_facet_in_cell(particle, domain, location, coordinate, direction)
    if nearest.distance_to_facet < 0:
        nearest.distance_to_facet = 0.0
    if nearest.distance_to_facet >= HUGE_DOUBLE:
        raise RuntimeError(
            f"infinite distance (cell not bound) for domain {location.domain}, "
            f"cell {location.cell}, coordinate ({coordinate.x}, {coordinate.y}, {coordinate.z})"
        )
    return nearest