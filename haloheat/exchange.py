# -*- coding: utf-8 -*-
"""Non-blocking halo exchange over the Cartesian communicator."""

# Import typing primitives.
from typing import Any, List, Optional

# Import logging.
import logging

# Import numpy for buffer typing.
import numpy as np

# Import local modules.
from .decomposition import LocalBlock
from .halo import DIRECTIONS, OPPOSITE, HaloBuffers, pack, unpack
from .mpi_utils import MPI, require_mpi
from .topology import ProcessMesh

logger = logging.getLogger("haloheat")

DEFAULT_TAG = 9


class HaloExchanger:
    """Posts four receives, then four sends, then waits on all eight.

    A message travelling in direction ``d`` carries tag ``tag + index(d)``;
    the matching receive on the other side is posted from the opposite
    direction. Missing neighbors map to MPI.PROC_NULL, whose operations
    complete immediately without touching the buffer.
    """

    def __init__(self, mesh: ProcessMesh, halo: HaloBuffers, tag: int = DEFAULT_TAG) -> None:
        require_mpi()
        if mesh.comm is None:
            raise ValueError("HaloExchanger needs a mesh built on a communicator")
        self.comm = mesh.comm
        self.mesh = mesh
        self.halo = halo
        self.tag = int(tag)
        self._peers = {d: self._peer(getattr(mesh, d)) for d in DIRECTIONS}
        self._requests: List[Any] = []
        logger.debug("Halo peers (MPI ranks, PROC_NULL for none): %s", self._peers)

    @staticmethod
    def _peer(rank: Optional[int]) -> int:
        return MPI.PROC_NULL if rank is None else int(rank)

    def send_tag(self, direction: str) -> int:
        """Tag of the message this worker sends towards `direction`."""
        return self.tag + DIRECTIONS.index(direction)

    def recv_tag(self, direction: str) -> int:
        """Tag of the message arriving from `direction`."""
        return self.tag + DIRECTIONS.index(OPPOSITE[direction])

    @property
    def missing(self) -> List[str]:
        """Directions without a neighbor."""
        return [d for d in DIRECTIONS if getattr(self.mesh, d) is None]

    def post(self) -> None:
        """Post all receives first, then all sends."""
        if self._requests:
            raise RuntimeError("Previous halo exchange has not completed")
        reqs: List[Any] = []
        for d in DIRECTIONS:
            buf: np.ndarray = self.halo.recv[d]
            reqs.append(self.comm.Irecv([buf, MPI.DOUBLE], source=self._peers[d], tag=self.recv_tag(d)))
        for d in DIRECTIONS:
            buf = self.halo.send[d]
            reqs.append(self.comm.Isend([buf, MPI.DOUBLE], dest=self._peers[d], tag=self.send_tag(d)))
        self._requests = reqs

    def wait(self) -> None:
        """Block until all eight operations complete."""
        MPI.Request.Waitall(self._requests)
        self._requests = []

    def exchange(self) -> None:
        """Run one full exchange of the packed send buffers."""
        self.post()
        self.wait()


def halo_step(grid: np.ndarray, block: LocalBlock, halo: HaloBuffers, exchanger: HaloExchanger) -> None:
    """Pack, exchange and unpack the ghost border of `grid`."""
    pack(grid, block, halo)
    exchanger.exchange()
    unpack(grid, block, halo, skip=exchanger.missing)
