# -*- coding: utf-8 -*-
"""2D process mesh construction and neighbor discovery.

Axis 0 is x (west/east, coordinate rx), axis 1 is y (north/south, coordinate
ry). Without reordering, ranks follow the MPI Cartesian row-major order
``rank = rx * py + ry``. A missing neighbor is represented by ``None``.
"""

# Import dataclass for the immutable mesh record.
from dataclasses import dataclass, field

# Import typing primitives.
from typing import Any, List, Optional, Tuple

# Import local MPI handle and errors.
from .errors import MeshShapeError
from .mpi_utils import MPI, require_mpi

AXIS_X = 0
AXIS_Y = 1


@dataclass(frozen=True)
class ProcessMesh:
    """One worker's view of the 2D process mesh."""

    dims: Tuple[int, int]
    periods: Tuple[bool, bool]
    rank: int
    coords: Tuple[int, int]
    north: Optional[int]
    south: Optional[int]
    east: Optional[int]
    west: Optional[int]
    # Cartesian communicator backing this mesh (None for planned meshes).
    comm: Any = field(default=None, compare=False, repr=False)

    @property
    def size(self) -> int:
        """Return the number of workers in the mesh."""
        return int(self.dims[0] * self.dims[1])

    def neighbors(self) -> dict:
        """Return the four neighbors keyed by direction name."""
        return {"north": self.north, "south": self.south, "east": self.east, "west": self.west}


def check_mesh_shape(dims: Tuple[int, int], size: int) -> None:
    """Raise MeshShapeError unless px * py equals the worker count."""
    px, py = int(dims[0]), int(dims[1])
    if px <= 0 or py <= 0:
        raise MeshShapeError(f"Mesh dimensions must be positive, got px={px} py={py}.")
    if px * py != size:
        raise MeshShapeError(f"px * py must equal the number of processes ({px} * {py} != {size}).")


def mesh_coords(rank: int, dims: Tuple[int, int]) -> Tuple[int, int]:
    """Return (rx, ry) of `rank` in row-major order."""
    px, py = dims
    if not 0 <= rank < px * py:
        raise ValueError(f"Rank {rank} outside mesh of size {px * py}")
    return rank // py, rank % py


def mesh_rank(coords: Tuple[int, int], dims: Tuple[int, int]) -> int:
    """Inverse of mesh_coords."""
    rx, ry = coords
    px, py = dims
    if not (0 <= rx < px and 0 <= ry < py):
        raise ValueError(f"Coordinates {coords} outside mesh {dims}")
    return rx * py + ry


def mesh_shift(
    coords: Tuple[int, int],
    dims: Tuple[int, int],
    periods: Tuple[bool, bool],
    axis: int,
    displacement: int,
) -> Optional[int]:
    """Return the rank reached from `coords` by moving along `axis`, or None off the edge."""
    moved = list(coords)
    moved[axis] += displacement
    extent = dims[axis]
    if periods[axis]:
        moved[axis] %= extent
    elif not 0 <= moved[axis] < extent:
        return None
    return mesh_rank((moved[0], moved[1]), dims)


def plan_mesh(size: int, dims: Tuple[int, int], periods: Tuple[bool, bool]) -> List[ProcessMesh]:
    """Return the mesh every rank would see, without any communication."""
    check_mesh_shape(dims, size)
    dims = (int(dims[0]), int(dims[1]))
    periods = (bool(periods[0]), bool(periods[1]))
    meshes: List[ProcessMesh] = []
    for rank in range(size):
        coords = mesh_coords(rank, dims)
        meshes.append(
            ProcessMesh(
                dims=dims,
                periods=periods,
                rank=rank,
                coords=coords,
                north=mesh_shift(coords, dims, periods, AXIS_Y, -1),
                south=mesh_shift(coords, dims, periods, AXIS_Y, +1),
                east=mesh_shift(coords, dims, periods, AXIS_X, +1),
                west=mesh_shift(coords, dims, periods, AXIS_X, -1),
            )
        )
    return meshes


def _from_proc_null(rank: int) -> Optional[int]:
    """Translate MPI.PROC_NULL to None."""
    return None if rank == MPI.PROC_NULL else int(rank)


def build_mesh(
    comm: Any, dims: Tuple[int, int], periods: Tuple[bool, bool], reorder: bool = False
) -> ProcessMesh:
    """Create the Cartesian communicator and this worker's mesh record.

    The shape is validated before any communication. All later communication
    must go through ``mesh.comm`` so that neighbor ranks and coordinates share
    one identity space, including when MPI reorders ranks.
    """
    require_mpi()
    check_mesh_shape(dims, comm.Get_size())
    dims = (int(dims[0]), int(dims[1]))
    periods = (bool(periods[0]), bool(periods[1]))

    cart = comm.Create_cart(list(dims), periods=list(periods), reorder=bool(reorder))
    rank = cart.Get_rank()
    rx, ry = cart.Get_coords(rank)
    west, east = cart.Shift(AXIS_X, 1)
    north, south = cart.Shift(AXIS_Y, 1)
    return ProcessMesh(
        dims=dims,
        periods=periods,
        rank=int(rank),
        coords=(int(rx), int(ry)),
        north=_from_proc_null(north),
        south=_from_proc_null(south),
        east=_from_proc_null(east),
        west=_from_proc_null(west),
        comm=cart,
    )


def neighbor(mesh: ProcessMesh, axis: int, displacement: int) -> Optional[int]:
    """Return the rank `displacement` steps along `axis`, or None beyond a non-periodic edge."""
    if mesh.comm is not None:
        _, dest = mesh.comm.Shift(axis, displacement)
        return _from_proc_null(dest)
    return mesh_shift(mesh.coords, mesh.dims, mesh.periods, axis, displacement)


def coordinates(mesh: ProcessMesh, rank: int) -> Tuple[int, int]:
    """Return (rx, ry) of `rank` within `mesh`."""
    if mesh.comm is not None:
        rx, ry = mesh.comm.Get_coords(rank)
        return int(rx), int(ry)
    return mesh_coords(rank, mesh.dims)


def format_mesh_row(mesh: ProcessMesh) -> str:
    """Return a one-line description of a worker's coordinates and neighbors."""

    def _fmt(r: Optional[int]) -> str:
        return "-" if r is None else f"{r:2d}"

    return (
        f"rank[{mesh.rank:2d}] (rx={mesh.coords[0]}, ry={mesh.coords[1]}) - "
        f"[w]: {_fmt(mesh.west)}, [e]: {_fmt(mesh.east)}, [n]: {_fmt(mesh.north)}, [s]: {_fmt(mesh.south)}"
    )
