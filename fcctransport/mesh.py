"""Per-domain mesh: cell connectivity, facet planes and cell state."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Mapping, NamedTuple, Sequence

from fcctransport.decomposition import DecompositionObject
from fcctransport.direction_cosine import Vector3
from fcctransport.fcc_grid import GlobalFccGrid
from fcctransport.location import Location

FACETS_PER_CELL = 24
POINTS_PER_CELL = 14

# Stride that separates cell ids of different global cells.
_CELL_ID_STRIDE = 0x0100000000

# Cell-local node numbers of the three points of each facet.
_NODE_INDIRECT: tuple[tuple[int, int, int], ...] = (
    (1, 3, 8), (3, 7, 8), (7, 5, 8), (5, 1, 8),
    (0, 4, 9), (4, 6, 9), (6, 2, 9), (2, 0, 9),
    (3, 2, 10), (2, 6, 10), (6, 7, 10), (7, 3, 10),
    (0, 1, 11), (1, 5, 11), (5, 4, 11), (4, 0, 11),
    (4, 5, 12), (5, 7, 12), (7, 6, 12), (6, 4, 12),
    (0, 2, 13), (2, 3, 13), (3, 1, 13), (1, 0, 13),
)

# The facet of the face neighbour that coincides with each facet.
_OPPOSING_FACET: tuple[int, ...] = (
    7, 6, 5, 4, 3, 2, 1, 0, 12, 15,
    14, 13, 8, 11, 10, 9, 20, 23, 22, 21,
    16, 19, 18, 17,
)


class AdjacencyEvent(IntEnum):
    """What happens to a particle that reaches a facet."""

    ADJACENCY_UNDEFINED = 0
    BOUNDARY_ESCAPE = 1
    BOUNDARY_REFLECTION = 2
    TRANSIT_ON_PROCESSOR = 3
    TRANSIT_OFF_PROCESSOR = 4


@dataclass
class SubfacetAdjacency:
    """Where a facet leads.

    For boundary facets ``adjacent`` is the current cell and facet; for
    facets whose neighbour lies in this domain ``neighbor_index`` is -1.
    """

    event: AdjacencyEvent = AdjacencyEvent.ADJACENCY_UNDEFINED
    current: Location = field(default_factory=Location)
    adjacent: Location = field(default_factory=Location)
    neighbor_index: int = -1
    neighbor_global_domain: int = -1
    neighbor_foreman: int = -1


@dataclass
class FacetAdjacency:
    """A triangular facet: its three domain-local node indices and its adjacency."""

    points: tuple[int, int, int]
    subfacet: SubfacetAdjacency = field(default_factory=SubfacetAdjacency)

    @property
    def num_points(self) -> int:
        return len(self.points)


@dataclass
class FacetAdjacencyCell:
    """The connectivity of one cell: its facets and its node indices."""

    facets: list[FacetAdjacency] = field(default_factory=list)
    points: list[int] = field(default_factory=list)

    @property
    def num_facets(self) -> int:
        return len(self.facets)

    @property
    def num_points(self) -> int:
        return len(self.points)


@dataclass
class GeneralPlane:
    """The plane a*x + b*y + c*z + d = 0 with a unit normal (a, b, c)."""

    a: float = 0.0
    b: float = 0.0
    c: float = 0.0
    d: float = 0.0

    @classmethod
    def from_points(cls, r0: Vector3, r1: Vector3, r2: Vector3) -> GeneralPlane:
        """The plane through three points, normal along (r1-r0) x (r2-r0).

        Collinear points give the plane with normal (1, 0, 0) through r0.
        """
        normal = (r1 - r0).cross(r2 - r0)
        magnitude = normal.length()
        if magnitude == 0.0:
            normal = Vector3(1.0, 0.0, 0.0)
            magnitude = 1.0
        normal = normal / magnitude
        return cls(normal.x, normal.y, normal.z, -normal.dot(r0))

    @property
    def normal(self) -> Vector3:
        return Vector3(self.a, self.b, self.c)

    def evaluate(self, r: Vector3) -> float:
        """Signed distance of ``r`` from the plane, positive on the normal side."""
        return self.a * r.x + self.b * r.y + self.c * r.z + self.d


@dataclass(frozen=True)
class CellInfo:
    """Ownership of a global cell: its domain, foreman, and local indices."""

    domain_gid: int
    foreman: int
    domain_index: int
    cell_index: int


class Shape(IntEnum):
    UNDEFINED = 0
    BRICK = 1
    SPHERE = 2


@dataclass
class GeometryRegion:
    """A brick or sphere filled with a named material."""

    material_name: str
    shape: Shape = Shape.BRICK
    x_min: float = 0.0
    x_max: float = 0.0
    y_min: float = 0.0
    y_max: float = 0.0
    z_min: float = 0.0
    z_max: float = 0.0
    x_center: float = 0.0
    y_center: float = 0.0
    z_center: float = 0.0
    radius: float = 0.0


@dataclass
class CellState:
    """Material and cached cross sections of one cell."""

    material: int
    volume: float
    total: list[float]
    cell_number_density: float = 1.0
    cell_id: int = 0
    source_tally: int = 0


class _FaceInfo(NamedTuple):
    event: AdjacencyEvent
    cell_info: CellInfo
    nbr_index: int


def boundary_conditions(name: str) -> list[AdjacencyEvent]:
    """Events for the six outer faces (+x, -x, +y, -y, +z, -z).

    ``octant`` escapes through the + faces and reflects off the - faces.
    """
    if name == "reflect":
        return [AdjacencyEvent.BOUNDARY_REFLECTION] * 6
    if name == "escape":
        return [AdjacencyEvent.BOUNDARY_ESCAPE] * 6
    if name == "octant":
        return [
            AdjacencyEvent.BOUNDARY_ESCAPE if face % 2 == 0 else AdjacencyEvent.BOUNDARY_REFLECTION
            for face in range(6)
        ]
    raise ValueError(f"unknown boundary condition {name!r}")


def find_cell_center(cell: FacetAdjacencyCell, nodes: Sequence[Vector3]) -> Vector3:
    """Mean of the cell's node coordinates."""
    total = Vector3()
    for point in cell.points:
        total = total + nodes[point]
    return total / cell.num_points


def cell_volume(cell: FacetAdjacencyCell, nodes: Sequence[Vector3]) -> float:
    """Volume of the cell as the sum of the tets from its centre to each facet."""
    center = find_cell_center(cell, nodes)
    six_volume = 0.0
    for facet in cell.facets:
        aa, bb, cc = (nodes[p] - center for p in facet.points[:3])
        six_volume += abs(aa.dot(bb.cross(cc)))
    return six_volume / 6.0


def is_inside(region: GeometryRegion, r: Vector3) -> bool:
    """Whether ``r`` lies inside the region (boundaries included)."""
    if region.shape == Shape.BRICK:
        return (
            region.x_min <= r.x <= region.x_max
            and region.y_min <= r.y <= region.y_max
            and region.z_min <= r.z <= region.z_max
        )
    if region.shape == Shape.SPHERE:
        center = Vector3(region.x_center, region.y_center, region.z_center)
        return (r - center).length() <= region.radius
    raise ValueError(f"region {region.material_name!r} has no defined shape")


def find_material(regions: Sequence[GeometryRegion], r: Vector3) -> str:
    """Material at ``r``; where regions overlap the last one wins."""
    name = ""
    for region in regions:
        if is_inside(region, r):
            name = region.material_name
    if not name:
        raise ValueError(f"no material at ({r.x}, {r.y}, {r.z})")
    return name


def _bootstrap_node_map(
    local_cells: Sequence[tuple[int, CellInfo]], grid: GlobalFccGrid
) -> dict[int, int]:
    """Number the nodes of the local cells: all corners first, then face centres."""
    corners: dict[int, int] = {}
    face_centers: dict[int, int] = {}
    for cell_gid, _ in local_cells:
        node_gids = grid.node_gids(cell_gid)
        for node in node_gids[:8]:
            corners.setdefault(node, len(corners))
        for node in node_gids[8:]:
            face_centers.setdefault(node, len(face_centers))
    offset = len(corners)
    for node, index in face_centers.items():
        corners.setdefault(node, index + offset)
    return corners


def _make_facet(
    facet_id: int, location: Location, points: Sequence[int], faces: Sequence[_FaceInfo]
) -> FacetAdjacency:
    face = faces[facet_id // 4]
    event = face.event
    adjacent_facet = _OPPOSING_FACET[facet_id]
    if event in (AdjacencyEvent.BOUNDARY_REFLECTION, AdjacencyEvent.BOUNDARY_ESCAPE):
        adjacent_facet = location.facet
    subfacet = SubfacetAdjacency(
        event=event,
        current=location,
        adjacent=Location(face.cell_info.domain_index, face.cell_info.cell_index, adjacent_facet),
        neighbor_index=face.nbr_index,
        neighbor_global_domain=face.cell_info.domain_gid,
        neighbor_foreman=face.cell_info.foreman,
    )
    corner_a, corner_b, corner_c = _NODE_INDIRECT[facet_id]
    return FacetAdjacency((points[corner_a], points[corner_b], points[corner_c]), subfacet)


class MeshDomain:
    """Nodes, cell connectivity and facet planes of one spatial domain.

    ``cells`` maps global cell ids to their owners; it must hold every cell of
    this domain and every face neighbour of those cells.
    """

    def __init__(
        self,
        domain_gid: int,
        domain_index: int,
        cells: Mapping[int, CellInfo],
        nbr_domains: Sequence[int],
        grid: GlobalFccGrid,
        decomposition: DecompositionObject,
        boundary_condition: Sequence[AdjacencyEvent],
    ) -> None:
        if len(boundary_condition) != 6:
            raise ValueError("a boundary condition is needed for each of the 6 faces")
        self.domain_gid = domain_gid
        self.nbr_domain_gid = list(nbr_domains)
        self.nbr_rank = [decomposition.rank_of(gid) for gid in self.nbr_domain_gid]

        local_cells = [
            (gid, info) for gid, info in sorted(cells.items()) if info.domain_gid == domain_gid
        ]
        node_map = _bootstrap_node_map(local_cells, grid)
        self.cell_connectivity = self._build_cells(
            local_cells, domain_index, cells, node_map, grid, boundary_condition
        )
        self.nodes = [
            grid.node_coord(gid) for gid, _ in sorted(node_map.items(), key=lambda kv: kv[1])
        ]
        self.cell_geometry: list[list[GeneralPlane]] = [
            [
                GeneralPlane.from_points(*(self.nodes[p] for p in facet.points))
                for facet in cell.facets
            ]
            for cell in self.cell_connectivity
        ]

    def _build_cells(
        self,
        local_cells: Sequence[tuple[int, CellInfo]],
        domain_index: int,
        cells: Mapping[int, CellInfo],
        node_map: Mapping[int, int],
        grid: GlobalFccGrid,
        boundary_condition: Sequence[AdjacencyEvent],
    ) -> list[FacetAdjacencyCell]:
        nbr_index = {gid: position for position, gid in enumerate(self.nbr_domain_gid)}
        nbr_index[self.domain_gid] = -1

        built: list[FacetAdjacencyCell] = []
        for cell_gid, info in local_cells:
            if info.domain_index != domain_index:
                raise ValueError(
                    f"cell {cell_gid} has domain index {info.domain_index}, expected {domain_index}"
                )
            if info.cell_index != len(built):
                raise ValueError(
                    f"cell {cell_gid} has cell index {info.cell_index}, expected {len(built)}"
                )
            points = [node_map[node] for node in grid.node_gids(cell_gid)]

            faces = []
            for face, nbr_gid in enumerate(grid.face_neighbor_gids(cell_gid)):
                try:
                    nbr = cells[nbr_gid]
                except KeyError:
                    raise ValueError(f"neighbour cell {nbr_gid} of {cell_gid} is unknown") from None
                if nbr_gid == cell_gid:
                    event = AdjacencyEvent(boundary_condition[face])
                elif nbr.foreman == info.foreman:
                    event = AdjacencyEvent.TRANSIT_ON_PROCESSOR
                else:
                    event = AdjacencyEvent.TRANSIT_OFF_PROCESSOR
                faces.append(_FaceInfo(event, nbr, nbr_index.get(nbr.domain_gid, 0)))

            facets = [
                _make_facet(facet_id, Location(domain_index, info.cell_index, facet_id), points, faces)
                for facet_id in range(FACETS_PER_CELL)
            ]
            built.append(FacetAdjacencyCell(facets, points))
        return built


class Domain:
    """A spatial domain: its mesh and the material state of each cell."""

    def __init__(
        self,
        domain_gid: int,
        domain_index: int,
        cells: Mapping[int, CellInfo],
        nbr_domains: Sequence[int],
        grid: GlobalFccGrid,
        decomposition: DecompositionObject,
        regions: Sequence[GeometryRegion],
        boundary_condition: str,
        materials: Sequence[str],
        num_energy_groups: int,
    ) -> None:
        self.domain_index = domain_index
        self.global_domain = domain_gid
        self.num_energy_groups = num_energy_groups
        self.mesh = MeshDomain(
            domain_gid,
            domain_index,
            cells,
            nbr_domains,
            grid,
            decomposition,
            boundary_conditions(boundary_condition),
        )
        material_names = list(materials)
        self.cell_state: list[CellState] = []
        for cell in self.mesh.cell_connectivity:
            center = find_cell_center(cell, self.mesh.nodes)
            name = find_material(regions, center)
            if name not in material_names:
                raise ValueError(f"material {name!r} is not in the material list")
            self.cell_state.append(
                CellState(
                    material=material_names.index(name),
                    volume=cell_volume(cell, self.mesh.nodes),
                    total=[0.0] * num_energy_groups,
                    cell_number_density=1.0,
                    cell_id=grid.which_cell(center) * _CELL_ID_STRIDE,
                    source_tally=0,
                )
            )

    def clear_cross_section_cache(self) -> None:
        """Reset every cached total cross section to zero."""
        for state in self.cell_state:
            state.total[:] = [0.0] * self.num_energy_groups