# -*- coding: utf-8 -*-
"""
Coarse mesh checkpoints.

A checkpoint is a single compressed numpy archive holding the coarse mesh and
the layer catalog, enough to restart without reassembling the stack. The
archive layout is tied to `FORMAT_VERSION`; archives of another version are
rejected.
"""

import json
import logging
from typing import Tuple

import numpy as np

from ..exceptions import MeshReadError
from ..meshgen.catalog import LayerCatalog
from .poly_mesh import PolyMesh

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def write_coarse_mesh(path: str, mesh: PolyMesh, catalog: LayerCatalog, comm) -> None:
    """
    Writes the coarse mesh and catalog to `path`.

    Collective: every rank must call it. Only rank 0 writes, all ranks wait
    at a barrier until the file exists.
    """
    if comm.Get_rank() == 0:
        mesh.analyze_mesh()
        # Through a file handle so numpy keeps the file name as given.
        with open(path, "wb") as f:
            np.savez_compressed(
                f,
                format_version=np.array(FORMAT_VERSION),
                dimension=np.array(mesh.dimension),
                node_coords=mesh.node_coords,
                cell_node_connectivity=np.asarray(mesh.cell_node_connectivity, dtype=int),
                cell_material_ids=mesh.cell_material_ids,
                boundary_face_nodes=mesh.boundary_face_nodes,
                boundary_face_tags=mesh.boundary_face_tags,
                catalog=np.array(json.dumps(catalog.to_dict())),
            )
        logger.info("Coarse mesh checkpoint written to %s", path)
    comm.Barrier()


def read_coarse_mesh(path: str) -> Tuple[PolyMesh, LayerCatalog]:
    """Reads a checkpoint written by `write_coarse_mesh`."""
    try:
        with np.load(path, allow_pickle=False) as archive:
            data = {key: archive[key] for key in archive.files}
    except (OSError, ValueError) as e:
        raise MeshReadError(path, "npz", str(e)) from e

    version = int(data.get("format_version", -1))
    if version != FORMAT_VERSION:
        raise MeshReadError(
            path, "npz", f"archive format version {version}, expected {FORMAT_VERSION}"
        )

    mesh = PolyMesh.from_arrays(
        int(data["dimension"]),
        data["node_coords"],
        data["cell_node_connectivity"].tolist(),
        data["cell_material_ids"],
        data["boundary_face_nodes"].tolist(),
        data["boundary_face_tags"].tolist(),
    )
    catalog = LayerCatalog.from_dict(json.loads(str(data["catalog"])))

    logger.info("Coarse mesh checkpoint read from %s (%d cells)", path, mesh.n_cells)
    return mesh, catalog
