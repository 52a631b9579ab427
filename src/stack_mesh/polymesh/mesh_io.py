# -*- coding: utf-8 -*-
"""
Reading externally generated stack meshes.

Two formats are accepted: AVS-UCD (``.ucd``) and Abaqus (``.inp``). Both are
read with meshio. Quads make a 2D mesh, hexahedra a 3D mesh. Material ids are
taken from the first cell data array whose name ends in "material". Boundary
blocks (lines in 2D, quads in 3D) with a non-zero id there become tagged
boundary faces; other lower dimensional blocks are ignored.
"""

import logging
import os

import meshio
import numpy as np

from ..exceptions import ConfigurationError, MeshReadError
from .poly_mesh import PolyMesh

logger = logging.getLogger(__name__)

MESH_FORMATS = {"ucd": "avsucd", "inp": "abaqus"}

VOLUME_CELL_TYPES = {"quad": 2, "hexahedron": 3}
BOUNDARY_CELL_TYPES = {2: {"vertex", "line"}, 3: {"vertex", "line", "triangle", "quad"}}
# Blocks whose cells are faces of the volume cells.
FACE_CELL_TYPES = {2: "line", 3: "quad"}


def mesh_extension(filename: str) -> str:
    """Extension of `filename` without the leading dot."""
    return os.path.splitext(filename)[1].lstrip(".")


def check_mesh_extension(filename: str) -> str:
    """
    Returns the meshio format name for `filename`.

    Raises:
        ConfigurationError: If the extension is neither ``.ucd`` nor ``.inp``.
    """
    extension = mesh_extension(filename)
    if extension not in MESH_FORMATS:
        raise ConfigurationError(
            f"Bad mesh file extension .{extension} in mesh file {filename}"
        )
    return MESH_FORMATS[extension]


def read_mesh(filename: str) -> PolyMesh:
    """
    Reads a `.ucd` or `.inp` mesh file into a PolyMesh.

    Raises:
        ConfigurationError: If the extension is not supported.
        MeshReadError: If the file cannot be parsed, or it holds cells other
            than quads or hexahedra and their boundary entities.
    """
    file_format = check_mesh_extension(filename)
    extension = mesh_extension(filename)

    try:
        raw = meshio.read(filename, file_format=file_format)
    except (OSError, meshio.ReadError, ValueError, KeyError, IndexError) as e:
        raise MeshReadError(filename, extension, str(e)) from e

    present = {block.type for block in raw.cells}
    if not present & set(VOLUME_CELL_TYPES):
        raise MeshReadError(
            filename, extension, "the file holds no quad or hexahedron cells"
        )
    dimension = max(VOLUME_CELL_TYPES[t] for t in present if t in VOLUME_CELL_TYPES)
    volume_type = "quad" if dimension == 2 else "hexahedron"
    for cell_type in present - {volume_type}:
        if cell_type not in BOUNDARY_CELL_TYPES[dimension]:
            raise MeshReadError(
                filename, extension, f"unsupported cell type '{cell_type}'"
            )

    material_key = next(
        (key for key in raw.cell_data if key.endswith("material")), None
    )

    def block_tags(i, block):
        if material_key is None:
            return np.zeros(len(block.data), dtype=int)
        return np.asarray(raw.cell_data[material_key][i], dtype=int)

    connectivity = []
    materials = []
    face_nodes = []
    face_tags = []
    for i, block in enumerate(raw.cells):
        if block.type == volume_type:
            connectivity.extend(block.data.tolist())
            materials.append(block_tags(i, block))
        elif block.type == FACE_CELL_TYPES[dimension]:
            tags = block_tags(i, block)
            tagged = np.nonzero(tags)[0]
            face_nodes.extend(block.data[tagged].tolist())
            face_tags.extend(int(t) for t in tags[tagged])

    mesh = PolyMesh.from_arrays(
        dimension,
        np.asarray(raw.points, dtype=float),
        connectivity,
        np.concatenate(materials),
        boundary_face_nodes=face_nodes,
        boundary_face_tags=face_tags,
    )
    logger.info(
        "Read %dD mesh with %d cells and %d tagged boundary faces from %s",
        dimension,
        mesh.n_cells,
        len(face_tags),
        filename,
    )
    return mesh
