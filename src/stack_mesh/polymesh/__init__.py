# -*- coding: utf-8 -*-
"""
This package provides the mesh data structures of the stack and the tools to
distribute, store and read them.

Key modules:
- poly_mesh:        Mesh container with merge and refinement.
- partition:        Weighted partitioning of the cells over ranks.
- distributed_mesh: Replicated mesh with per-rank cell ownership.
- checkpoint:       Coarse mesh checkpoints.
- mesh_io:          Reading .ucd and .inp mesh files.
"""

from .poly_mesh import PolyMesh
from .partition import partition_mesh
from .distributed_mesh import DistributedMesh
from .checkpoint import read_coarse_mesh, write_coarse_mesh
from .mesh_io import read_mesh

__all__ = [
    "PolyMesh",
    "DistributedMesh",
    "partition_mesh",
    "read_coarse_mesh",
    "write_coarse_mesh",
    "read_mesh",
]
