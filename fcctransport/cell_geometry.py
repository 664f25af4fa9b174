"""Geometry of a single mesh cell: centre, sampling and boundary reflection."""

from __future__ import annotations

from typing import Callable

from fcctransport.direction_cosine import Vector3
from fcctransport.mesh import Domain
from fcctransport.particle import Particle

RandomSource = Callable[[], float]


def cell_position(domain: Domain, cell_index: int) -> Vector3:
    """The "centre" of a cell: the mean of its node coordinates."""
    cell = domain.mesh.cell_connectivity[cell_index]
    nodes = domain.mesh.nodes
    total = Vector3()
    for point in cell.points:
        total = total + nodes[point]
    return total * (1.0 / cell.num_points)


def tet_determinant(v0: Vector3, v1: Vector3, v2: Vector3, v3: Vector3) -> float:
    """Six times the signed volume of the tetrahedron (v0, v1, v2, v3)."""
    a = v0 - v3
    b = v1 - v3
    c = v2 - v3
    return (
        a.z * (b.x * c.y - b.y * c.x)
        + a.y * (b.z * c.x - b.x * c.z)
        + a.x * (b.y * c.z - b.z * c.y)
    )


def generate_coordinate(rng: RandomSource, domain: Domain, cell: int) -> Vector3:
    """A random point inside a cell.

    A tetrahedron spanned by the cell centre and one facet is picked with
    probability weighted by its volume, then a point is drawn uniformly in
    it.  A cell without facets yields the origin.  ``rng`` is called with no
    arguments and returns a uniform sample in [0, 1).
    """
    connectivity = domain.mesh.cell_connectivity[cell]
    nodes = domain.mesh.nodes
    center = cell_position(domain, cell)

    if connectivity.num_facets == 0:
        return Vector3(0.0, 0.0, 0.0)

    which_volume = rng() * 6.0 * domain.cell_state[cell].volume

    corners: tuple[Vector3, Vector3, Vector3] | None = None
    current_volume = 0.0
    facets = iter(connectivity.facets)
    while current_volume < which_volume:
        facet = next(facets, None)
        if facet is None:
            break
        p0, p1, p2 = (nodes[p] for p in facet.points[:3])
        corners = (p0, p1, p2)
        current_volume += tet_determinant(p0, p1, p2, center)

    r1, r2, r3 = rng(), rng(), rng()

    # Cut and fold the cube into a prism.
    if r1 + r2 > 1.0:
        r1 = 1.0 - r1
        r2 = 1.0 - r2
    # Cut and fold the prism into a tetrahedron.
    if r2 + r3 > 1.0:
        tmp = r3
        r3 = 1.0 - r1 - r2
        r2 = 1.0 - tmp
    elif r1 + r2 + r3 > 1.0:
        tmp = r3
        r3 = r1 + r2 + r3 - 1.0
        r1 = 1.0 - r2 - tmp
    r4 = 1.0 - r1 - r2 - r3

    if corners is None:
        raise ValueError(f"no tetrahedron of cell {cell} could be selected for sampling")
    p0, p1, p2 = corners
    return center * r4 + p0 * r1 + p1 * r2 + p2 * r3


def reflect_particle(domain: Domain, particle: Particle) -> None:
    """Reflect a particle off the facet it sits on, keeping its speed.

    A particle already pointing into the cell keeps its direction.
    """
    plane = domain.mesh.cell_geometry[particle.cell][particle.facet]
    direction = particle.direction_cosine

    dot = 2.0 * (direction.alpha * plane.a + direction.beta * plane.b + direction.gamma * plane.c)
    if dot > 0:
        direction.alpha -= dot * plane.a
        direction.beta -= dot * plane.b
        direction.gamma -= dot * plane.c

    speed = particle.velocity.length()
    particle.velocity = Vector3(
        speed * direction.alpha, speed * direction.beta, speed * direction.gamma
    )