"""What happens to a particle that has been tracked to a facet of its cell."""

from __future__ import annotations

from typing import Callable, Sequence

from fcctransport.location import Location
from fcctransport.mesh import AdjacencyEvent, Domain, SubfacetAdjacency
from fcctransport.particle import Particle, TallyEvent

SendParticle = Callable[[int, Particle], None]


def adjacent_facet(location: Location, domains: Sequence[Domain]) -> SubfacetAdjacency:
    """The adjacency record of the facet at ``location``."""
    domain = location.get_domain(domains)
    return domain.mesh.cell_connectivity[location.cell].facets[location.facet].subfacet


def facet_crossing_event(
    particle: Particle, domains: Sequence[Domain], send: SendParticle
) -> TallyEvent:
    """Move the particle across its facet and return the resulting event.

    A particle may enter an adjacent cell of this processor, escape across
    the system boundary, reflect off it, or enter a cell owned by another
    rank.  In the last case ``send`` is called with the neighbour's rank and
    the particle, already relocated to the neighbour's cell.
    """
    location = Location(particle.domain, particle.cell, particle.facet)
    adjacency = adjacent_facet(location, domains)

    if adjacency.event == AdjacencyEvent.TRANSIT_ON_PROCESSOR:
        particle.domain = adjacency.adjacent.domain
        particle.cell = adjacency.adjacent.cell
        particle.facet = adjacency.adjacent.facet
        particle.last_event = TallyEvent.FACET_CROSSING_TRANSIT_EXIT
    elif adjacency.event == AdjacencyEvent.BOUNDARY_ESCAPE:
        particle.last_event = TallyEvent.FACET_CROSSING_ESCAPE
    elif adjacency.event == AdjacencyEvent.BOUNDARY_REFLECTION:
        particle.last_event = TallyEvent.FACET_CROSSING_REFLECTION
    elif adjacency.event == AdjacencyEvent.TRANSIT_OFF_PROCESSOR:
        particle.domain = adjacency.adjacent.domain
        particle.cell = adjacency.adjacent.cell
        particle.facet = adjacency.adjacent.facet
        particle.last_event = TallyEvent.FACET_CROSSING_COMMUNICATION
        current = adjacency.current.get_domain(domains)
        neighbor_rank = current.mesh.nbr_rank[adjacency.neighbor_index]
        send(neighbor_rank, particle)

    return particle.last_event