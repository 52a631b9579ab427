# -*- coding: utf-8 -*-
"""
Distributed wrapper around a stack mesh.

Every rank holds the same coarse `PolyMesh`; what differs between ranks is
which cells they own. Operations that change the mesh are collective: all
ranks call them in the same order with the same arguments, so the replicated
meshes stay identical. Cell ownership is decided on rank 0 and broadcast.
"""

import logging
from typing import Callable, Iterable, Optional

import numpy as np
from mpi4py import MPI

from ..exceptions import MeshInvariantError
from .partition import CELL_BASE_WEIGHT, partition_mesh, print_partition_summary
from .poly_mesh import PolyMesh

logger = logging.getLogger(__name__)


class DistributedMesh:
    """
    A mesh replicated on every rank of a communicator, with cell ownership.

    Attributes:
        comm: The mpi4py communicator the mesh lives on.
        dimension (int): Spatial dimension of the mesh.
        mesh (PolyMesh): The replicated coarse mesh, None until populated.
        cell_partitions (np.ndarray): Owning rank of each cell.
        partition_method (str): Method passed to `partition_mesh`.
    """

    def __init__(self, dimension: int, comm=None, partition_method: str = "metis"):
        self.comm = comm if comm is not None else MPI.COMM_WORLD
        self.dimension = dimension
        self.partition_method = partition_method
        self.mesh: Optional[PolyMesh] = None
        self.cell_partitions: np.ndarray = np.array([], dtype=int)
        self._cell_weight: Optional[Callable[[int], Optional[int]]] = None

    @property
    def rank(self) -> int:
        return self.comm.Get_rank()

    @property
    def size(self) -> int:
        return self.comm.Get_size()

    @property
    def n_global_active_cells(self) -> int:
        return 0 if self.mesh is None else self.mesh.n_cells

    def _require_mesh(self) -> PolyMesh:
        if self.mesh is None:
            raise RuntimeError("The distributed mesh has not been populated yet.")
        return self.mesh

    def _set_mesh(self, mesh: PolyMesh) -> None:
        if mesh.dimension != self.dimension:
            raise ValueError(
                f"Cannot store a {mesh.dimension}D mesh in a {self.dimension}D "
                "distributed mesh."
            )
        self.mesh = mesh
        # Until the next repartition, rank 0 owns everything.
        self.cell_partitions = np.zeros(mesh.n_cells, dtype=int)

    # =========================================================================
    # Collective Operations
    # =========================================================================

    def copy_from(self, mesh: PolyMesh) -> None:
        """Replaces the content with a copy of `mesh`."""
        self._set_mesh(mesh.copy())

    def merge(self, other: PolyMesh) -> None:
        """Merges `other` into the mesh, fusing coincident vertices."""
        self._set_mesh(PolyMesh.merge_meshes(self._require_mesh(), other))

    def connect_cell_weight(self, function: Callable[[int], Optional[int]]) -> None:
        """
        Registers the function giving the extra weight of a cell from its
        material id. The function returns None for materials it does not know.
        """
        self._cell_weight = function

    def repartition(self) -> np.ndarray:
        """
        Redistributes cell ownership over all ranks.

        Each cell weighs `CELL_BASE_WEIGHT` plus the extra weight of the
        registered weight function.

        Raises:
            MeshInvariantError: On every rank, if any rank owns a cell whose
                material the weight function does not know.
        """
        mesh = self._require_mesh()

        extra = np.zeros(mesh.n_cells, dtype=int)
        unknown = np.zeros(mesh.n_cells, dtype=bool)
        if self._cell_weight is not None:
            for ci, material_id in enumerate(mesh.cell_material_ids):
                weight = self._cell_weight(int(material_id))
                if weight is None:
                    unknown[ci] = True
                else:
                    extra[ci] = weight

        owned = self.locally_owned_cells()
        local_unknown = np.unique(mesh.cell_material_ids[owned[unknown[owned]]])
        if self.max_over_ranks(int(local_unknown.size > 0)) > 0:
            raise MeshInvariantError(
                "Unknown material id(s) found while computing cell weights"
                + (f": {local_unknown.tolist()}" if local_unknown.size else ".")
            )

        cell_weights = CELL_BASE_WEIGHT + extra
        parts = None
        if self.rank == 0:
            parts = partition_mesh(
                mesh, self.size, self.partition_method, cell_weights=cell_weights
            )
        self.cell_partitions = np.asarray(self.comm.bcast(parts, root=0), dtype=int)

        if self.rank == 0 and self.size > 1:
            print_partition_summary(self.cell_partitions, cell_weights)
        logger.info(
            "Repartitioned %d cells over %d rank(s); %d owned locally.",
            mesh.n_cells,
            self.size,
            self.locally_owned_cells().size,
        )
        return self.cell_partitions

    def refine_global(self, n_refinements: int = 1) -> None:
        """Refines every cell; children stay with the rank owning their parent."""
        mesh = self._require_mesh()
        n_children = 2**self.dimension
        for _ in range(int(n_refinements)):
            mesh.refine_global(1)
            self.cell_partitions = np.repeat(self.cell_partitions, n_children)

    def max_over_ranks(self, value):
        return self.comm.allreduce(value, op=MPI.MAX)

    def all_gather(self, value) -> list:
        """Values of every rank, in rank order."""
        return self.comm.allgather(value)

    # =========================================================================
    # Local Queries
    # =========================================================================

    def locally_owned_cells(self) -> np.ndarray:
        """Indices of the cells owned by the calling rank."""
        return np.where(self.cell_partitions == self.rank)[0]

    def filter_cells(self, material_ids: Iterable[int]) -> np.ndarray:
        """Locally owned cells whose material id is in `material_ids`."""
        return self._require_mesh().cells_with_material(
            material_ids, self.locally_owned_cells()
        )
