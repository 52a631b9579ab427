# -*- coding: utf-8 -*-
"""
Geometry of a layered energy storage device.

`Geometry` owns the distributed mesh of the device and the catalog naming its
materials and boundaries. Depending on the configured mesh type it restarts
from a checkpoint, reads a mesh file or assembles the stack itself. In every
case the cells are finally distributed over the ranks, weighted by the layer
they belong to.
"""

import logging
from typing import Any, List, Mapping, Optional, Tuple, Union

import numpy as np

from ..exceptions import ConfigurationError, MeshInvariantError
from ..polymesh.checkpoint import read_coarse_mesh, write_coarse_mesh
from ..polymesh.distributed_mesh import DistributedMesh
from ..polymesh.mesh_io import read_mesh
from ..polymesh.partition import compute_cell_weight
from ..polymesh.poly_mesh import PolyMesh
from .catalog import LayerCatalog
from .config import GeometryConfig
from .mesh_generator import MergeStep, MeshGenerator

logger = logging.getLogger(__name__)

# Faces closer to the terminal than this fraction of the cell measure are tagged.
BOUNDARY_TOLERANCE = 1e-6


class Geometry:
    """
    The mesh of the device together with its layer catalog.

    Attributes:
        config (GeometryConfig): The validated configuration, None when built
            with `from_mesh`.
        catalog (LayerCatalog): Material and boundary names.
        mesh (DistributedMesh): The device mesh and its cell ownership.
        merge_steps (List[MergeStep]): Merge records of a generated stack.
    """

    def __init__(
        self, database: Union[Mapping[str, Any], GeometryConfig], comm=None
    ) -> None:
        self.config = (
            database
            if isinstance(database, GeometryConfig)
            else GeometryConfig.from_dict(database)
        )
        self.mesh = DistributedMesh(
            self.config.dim, comm, partition_method=self.config.partition_method
        )
        self.merge_steps: List[MergeStep] = []
        self.catalog: Optional[LayerCatalog] = None

        mesh_type = self.config.type
        logger.info("Building %dD geometry of type '%s'", self.config.dim, mesh_type)
        if mesh_type == "restart":
            self._restart()
        else:
            if mesh_type == "file":
                self._read_mesh_file()
            else:
                self._generate()
            self.repartition()

    @classmethod
    def from_mesh(
        cls,
        database: Mapping[str, Any],
        mesh: Union[DistributedMesh, PolyMesh],
        comm=None,
    ) -> "Geometry":
        """
        Wraps an existing mesh.

        The catalog is read from `database` when it defines materials,
        otherwise the default catalog is used. Nothing is built, merged or
        repartitioned.
        """
        geometry = cls.__new__(cls)
        geometry.config = None
        geometry.merge_steps = []
        geometry.catalog = (
            LayerCatalog.from_config(database)
            if "materials" in database
            else LayerCatalog.default()
        )
        if isinstance(mesh, DistributedMesh):
            geometry.mesh = mesh
        else:
            geometry.mesh = DistributedMesh(mesh.dimension, comm)
            geometry.mesh.copy_from(mesh)
        return geometry

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def dimension(self) -> int:
        return self.mesh.dimension

    @property
    def materials(self):
        return self.catalog.materials

    @property
    def boundaries(self):
        return self.catalog.boundaries

    @property
    def coarse_mesh(self) -> PolyMesh:
        return self.mesh.mesh

    # =========================================================================
    # Mesh Types
    # =========================================================================

    def _restart(self) -> None:
        mesh, catalog = read_coarse_mesh(self.config.coarse_mesh_filename)
        if mesh.dimension != self.config.dim:
            raise ConfigurationError(
                f"Checkpoint {self.config.coarse_mesh_filename} holds a "
                f"{mesh.dimension}D mesh, the configuration asks for dim="
                f"{self.config.dim}."
            )
        self.catalog = catalog
        self.mesh.copy_from(mesh)
        self.repartition()
        self.mesh.refine_global(self.config.n_refinements)

    def _read_mesh_file(self) -> None:
        self.catalog = self.config.catalog
        mesh = read_mesh(self.config.mesh_file)
        if mesh.dimension != self.config.dim:
            raise ConfigurationError(
                f"Mesh file {self.config.mesh_file} holds a {mesh.dimension}D mesh, "
                f"the configuration asks for dim={self.config.dim}."
            )
        self.mesh.copy_from(mesh)
        if self.config.checkpoint:
            self.output_coarse_mesh(self.config.coarse_mesh_filename)

    def _generate(self) -> None:
        self.catalog = self.config.catalog or LayerCatalog.default()
        generator = MeshGenerator(self.config, self.catalog)
        self.merge_steps = generator.assemble(self.mesh)

        # Merging drops boundary ids, put the terminal ones back.
        self.set_boundary_ids(generator.collector_top, generator.collector_bottom)

        if self.config.checkpoint:
            self.output_coarse_mesh(self.config.coarse_mesh_filename)

        self.mesh.refine_global(self.config.n_refinements)

    # =========================================================================
    # Load Balancing
    # =========================================================================

    def compute_cell_weight(self, material_id: int) -> Optional[int]:
        """Extra weight of a cell, None if its material has no weight class."""
        weights = self.config.weights if self.config is not None else {}
        return compute_cell_weight(material_id, self.catalog, weights)

    def repartition(self) -> np.ndarray:
        """Distributes the cells over all ranks, weighted by layer."""
        self.mesh.connect_cell_weight(self.compute_cell_weight)
        return self.mesh.repartition()

    # =========================================================================
    # Boundary Recovery
    # =========================================================================

    def set_boundary_ids(self, collector_top: float, collector_bottom: float) -> None:
        """
        Tags the terminal faces of both collectors.

        Boundary faces of anode collector cells lying at `collector_top` get
        the "anode" boundary id; boundary faces of cathode collector cells at
        `collector_bottom` get the "cathode" boundary id. Positions are compared
        along the last axis.

        Raises:
            MeshInvariantError: On every rank, if no rank found a terminal face
                of either collector.
            ConfigurationError: If a terminal boundary has more than one id.
        """
        for material, boundary, target in (
            ("collector_anode", "anode", collector_top),
            ("collector_cathode", "cathode", collector_bottom),
        ):
            boundary_id = self.catalog.boundary_id(boundary)
            local_faces = self._find_terminal_faces(
                self.catalog.material_ids(material), target
            )

            # Every rank holds the whole mesh, so all ranks apply all tags.
            for faces in self.mesh.all_gather(local_faces):
                for cell_idx, face_idx in faces:
                    self.coarse_mesh.set_face_boundary_id(cell_idx, face_idx, boundary_id)

            if self.mesh.max_over_ranks(int(len(local_faces) > 0)) == 0:
                raise MeshInvariantError(
                    f"{boundary.capitalize()} boundary id not set: no boundary "
                    f"face of '{material}' found at {target:.6g}."
                )
            logger.debug(
                "Tagged %d %s terminal face(s) with boundary id %d on this rank",
                len(local_faces),
                boundary,
                boundary_id,
            )

    def _find_terminal_faces(self, material_ids, target: float) -> List[Tuple[int, int]]:
        mesh = self.coarse_mesh
        mesh.analyze_mesh()
        axis = mesh.dimension - 1
        faces = []
        for ci in self.mesh.filter_cells(material_ids):
            if not mesh.at_boundary(ci):
                continue
            tolerance = BOUNDARY_TOLERANCE * mesh.cell_volumes[ci]
            for fi in np.nonzero(mesh.cell_neighbors[ci] == -1)[0]:
                if abs(mesh.cell_face_midpoints[ci, fi, axis] - target) < tolerance:
                    faces.append((int(ci), int(fi)))
        return faces

    # =========================================================================
    # Checkpoint
    # =========================================================================

    def output_coarse_mesh(self, filename: str) -> None:
        """Writes the current mesh and catalog so a run can restart from them."""
        write_coarse_mesh(filename, self.coarse_mesh, self.catalog, self.mesh.comm)
