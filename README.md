# fcctransport

Building blocks for Monte Carlo particle transport on a mesh of hexahedral
cells. Each cell is split into 24 triangular facets through the face-centred
cubic (FCC) node lattice: 8 corner nodes and 6 face-centre nodes per cell.

The package has no third-party dependencies.

## Modules

- `fcctransport.direction_cosine`: `Vector3` (with `dot`, `cross`, `length`
  and arithmetic) and `DirectionCosine`, with `sample_isotropic(rng)` and
  `rotate_3d_vector(...)`. `rng` is any callable returning a uniform sample
  in [0, 1).
- `fcctransport.fcc_grid`: `GlobalFccGrid` maps points to cells, cells and
  nodes to and from index tuples, and gives node coordinates, the 14 node ids
  of a cell (`node_gids`) and its 6 face neighbours (`face_neighbor_gids`;
  on the outer surface the cell itself is returned).
- `fcctransport.decomposition`: `DecompositionObject` assigns domains to
  ranks, in consecutive blocks (mode 0) or shuffled (mode 1); `rank_of`,
  `index_of` and `assigned_gids`.
- `fcctransport.location`: `Location`, a (domain, cell, facet) triple.
- `fcctransport.particle`: `Particle`, `BaseParticle` and `TallyEvent`.
  `BaseParticle.pack()` splits a particle into int, float and byte payloads
  and `BaseParticle.unpack(...)` rebuilds it; `long_to_char8` and
  `char8_to_long` encode 64-bit values as 8 big-endian bytes.
- `fcctransport.input_block`: `InputBlock`, a named set of keyword/value
  pairs. `get_value(keyword, default)` reads a value as the type of
  `default`; `serialize()` / `InputBlock.deserialize(data)` round-trip it as
  NUL-separated bytes. Unreadable values raise `InputBlockError`.
- `fcctransport.mesh`: `Domain` and `MeshDomain` build the per-domain node
  list, cell connectivity (`FacetAdjacencyCell`, `FacetAdjacency`,
  `SubfacetAdjacency`), facet planes (`GeneralPlane`), cell volumes and
  material assignment from `GeometryRegion` bricks and spheres. Boundary
  conditions are `"reflect"`, `"escape"` or `"octant"`.
- `fcctransport.cell_geometry`: `cell_position`, `tet_determinant`,
  `generate_coordinate` (a random point inside a cell) and
  `reflect_particle` (reflection off the particle's current facet).
- `fcctransport.facet_distance`: `distance_to_segment`, `find_nearest` and
  `nearest_facet`, which find the nearest facet along a flight path and nudge
  a stuck particle toward the cell centre.
- `fcctransport.facet_crossing`: `adjacent_facet` and
  `facet_crossing_event`, which moves a particle into the neighbouring cell,
  or reports escape, reflection, or hand-off to another rank through a
  `send(rank, particle)` callback.
- `fcctransport.coral_benchmark`: checks on a `Balance` of event counts and
  on per-cell fluence values (`balance_ratio_test`, `balance_event_test`,
  `missing_particle_test`, `fluence_test`, `coral_benchmark_correctness`).
  Each prints a PASS/FAIL report and returns whether it passed.

## Example

```python
from fcctransport.fcc_grid import GlobalFccGrid
from fcctransport.direction_cosine import Vector3

grid = GlobalFccGrid(4, 4, 4, 4.0, 4.0, 4.0)
cell = grid.which_cell(Vector3(1.5, 0.5, 2.5))
print(cell, grid.cell_center(cell))
print(grid.face_neighbor_gids(cell))
```

## What it does not do

This is a library of pieces, not a simulation. It has no command-line
program and no driver that runs transport cycles. It has no nuclear data,
cross-section or collision physics, no particle storage between cycles, no
timing reports, no search for the nearest domain centre, and no
communication between ranks: a particle leaving for another rank is only
handed to the `send` callback you supply.

## Tests

Install the test extra and run pytest:

```
pip install .[test]
pytest
```