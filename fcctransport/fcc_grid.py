"""The global face-centred cubic mesh: cells, nodes and their indices."""

from __future__ import annotations

from fcctransport.direction_cosine import Vector3

CellTuple = tuple[int, int, int]
NodeTuple = tuple[int, int, int, int]

_BASIS_COUNT = 4

# Offsets from a cell's base node to its 8 corners and 6 face centres.
_CORNER_TUPLE_OFFSETS: tuple[NodeTuple, ...] = (
    (0, 0, 0, 0),
    (1, 0, 0, 0),
    (0, 1, 0, 0),
    (1, 1, 0, 0),
    (0, 0, 1, 0),
    (1, 0, 1, 0),
    (0, 1, 1, 0),
    (1, 1, 1, 0),
    (1, 0, 0, 1),
    (0, 0, 0, 1),
    (0, 1, 0, 2),
    (0, 0, 0, 2),
    (0, 0, 1, 3),
    (0, 0, 0, 3),
)

_FACE_TUPLE_OFFSETS: tuple[CellTuple, ...] = (
    (1, 0, 0),
    (-1, 0, 0),
    (0, 1, 0),
    (0, -1, 0),
    (0, 0, 1),
    (0, 0, -1),
)


class GlobalFccGrid:
    """A box of nx*ny*nz hexahedral cells, each with corner and face-centre nodes."""

    def __init__(self, nx: int, ny: int, nz: int, lx: float, ly: float, lz: float) -> None:
        self.nx, self.ny, self.nz = nx, ny, nz
        self.lx, self.ly, self.lz = lx, ly, lz
        self.dx = lx / nx
        self.dy = ly / ny
        self.dz = lz / nz
        self._basis = (
            Vector3(0.0, 0.0, 0.0),
            Vector3(0.0, self.dy / 2.0, self.dz / 2.0),
            Vector3(self.dx / 2.0, 0.0, self.dz / 2.0),
            Vector3(self.dx / 2.0, self.dy / 2.0, 0.0),
        )

    def which_cell(self, r: Vector3) -> int:
        """Index of the cell holding the point ``r``."""
        return self.cell_tuple_to_index(
            (int(r.x / self.dx), int(r.y / self.dy), int(r.z / self.dz))
        )

    def cell_center(self, cell: int) -> Vector3:
        """Geometric centre of a cell."""
        x, y, z = self.cell_index_to_tuple(cell)
        return self.node_coord_of_tuple((x, y, z, 0)) + Vector3(
            self.dx / 2.0, self.dy / 2.0, self.dz / 2.0
        )

    def cell_index_to_tuple(self, cell: int) -> CellTuple:
        """(x, y, z) position of a cell index."""
        rest, x = divmod(cell, self.nx)
        z, y = divmod(rest, self.ny)
        return (x, y, z)

    def cell_tuple_to_index(self, cell_tuple: CellTuple) -> int:
        """Cell index of an (x, y, z) position."""
        x, y, z = cell_tuple
        return x + self.nx * (y + self.ny * z)

    def node_index(self, node_tuple: NodeTuple) -> int:
        """Node index of an (x, y, z, basis) position."""
        x, y, z, b = node_tuple
        return b + _BASIS_COUNT * (x + (self.nx + 1) * (y + (self.ny + 1) * z))

    def node_index_to_tuple(self, index: int) -> NodeTuple:
        """(x, y, z, basis) position of a node index."""
        rest, b = divmod(index, _BASIS_COUNT)
        rest, x = divmod(rest, self.nx + 1)
        z, y = divmod(rest, self.ny + 1)
        return (x, y, z, b)

    def corner_tuple_offsets(self) -> tuple[NodeTuple, ...]:
        """Offsets to the 8 corner nodes followed by the 6 face-centre nodes."""
        return _CORNER_TUPLE_OFFSETS

    def node_gids(self, cell_gid: int) -> list[int]:
        """Indices of the 14 nodes of a cell, corners first."""
        x, y, z = self.cell_index_to_tuple(cell_gid)
        return [
            self.node_index((x + ox, y + oy, z + oz, ob))
            for ox, oy, oz, ob in _CORNER_TUPLE_OFFSETS
        ]

    def face_neighbor_gids(self, cell_gid: int) -> list[int]:
        """Indices of the 6 face neighbours in the order +x, -x, +y, -y, +z, -z.

        On the outer surface of the grid the cell itself is returned.
        """
        x, y, z = self.cell_index_to_tuple(cell_gid)
        return [
            self.cell_tuple_to_index(self.snap_tuple((x + ox, y + oy, z + oz)))
            for ox, oy, oz in _FACE_TUPLE_OFFSETS
        ]

    def node_coord(self, index: int) -> Vector3:
        """Coordinates of a node given its index."""
        return self.node_coord_of_tuple(self.node_index_to_tuple(index))

    def node_coord_of_tuple(self, node_tuple: NodeTuple) -> Vector3:
        """Coordinates of a node given its (x, y, z, basis) position."""
        x, y, z, b = node_tuple
        return Vector3(x * self.dx, y * self.dy, z * self.dz) + self._basis[b]

    def snap_tuple(self, cell_tuple: CellTuple) -> CellTuple:
        """Clamp a cell position into the grid."""
        x, y, z = cell_tuple
        return (
            min(max(0, x), self.nx - 1),
            min(max(0, y), self.ny - 1),
            min(max(0, z), self.nz - 1),
        )