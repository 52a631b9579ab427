# -*- coding: utf-8 -*-
"""
Mesh partitioning tools.

This module provides functions for distributing the cells of a stack mesh over
several ranks. Cells are weighted by the layer they belong to, so that layers
with a more expensive physics model count for more when the load is balanced.

Key Features
------------
- Support for different partitioning methods, including METIS and a
  hierarchical coordinate bisection method.
- Per-material cell weights resolved through the layer catalog.
- A simple interface for partitioning a `PolyMesh` object.

Functions
---------
:py:func:`compute_cell_weight`:
    Extra weight of a cell from its material id.
:py:func:`partition_mesh`:
    Partitions a mesh into a specified number of parts.
:py:func:`print_partition_summary`:
    Prints a summary of the cell distribution across partitions.
"""

from __future__ import annotations

import logging
import warnings
from typing import TYPE_CHECKING, List, Mapping, Optional

import numpy as np

from ..exceptions import StackMeshError

if TYPE_CHECKING:
    from ..meshgen.catalog import LayerCatalog
    from .poly_mesh import PolyMesh

# The binding raises RuntimeError when the shared METIS library is missing.
try:
    import metis
except (ImportError, RuntimeError):
    metis = None

logger = logging.getLogger(__name__)

# Weight every cell carries before the per-layer extra weight is added.
CELL_BASE_WEIGHT = 1000

# Order in which material classes are tried; the first class containing the
# material id decides the weight.
WEIGHT_PRECEDENCE = ("anode", "cathode", "separator", "collector")


def compute_cell_weight(
    material_id: int, catalog: LayerCatalog, weights: Mapping[str, int]
) -> Optional[int]:
    """
    Returns the extra partitioning weight of a cell with `material_id`.

    Args:
        material_id: Material id of the cell.
        catalog: Catalog resolving material names to ids.
        weights: Extra weight per material class; missing classes weigh 0.

    Returns:
        The extra weight, or None when the material id belongs to none of the
        weighted classes.
    """
    for name in WEIGHT_PRECEDENCE:
        if name in catalog.materials and material_id in catalog.materials[name]:
            return int(weights.get(name, 0))
    return None


def partition_mesh(
    mesh: PolyMesh,
    n_parts: int,
    method: str = "metis",
    cell_weights: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Partitions mesh elements into a specified number of parts.

    This function supports different partitioning methods, including METIS and a
    simple hierarchical coordinate bisection method.

    Args:
        mesh: The mesh object to partition.
        n_parts: The number of partitions.
        method: The partitioning method ('metis' or 'hierarchical').
        cell_weights: Optional weights for each cell.

    Returns:
        A numpy array of partition IDs for each cell.
    """
    if n_parts <= 1:
        return np.zeros(mesh.n_cells, dtype=int)

    if cell_weights is not None and len(cell_weights) != mesh.n_cells:
        raise ValueError(
            f"Got {len(cell_weights)} cell weights for a mesh with {mesh.n_cells} cells."
        )

    if method == "metis":
        return _partition_with_metis(mesh, n_parts, cell_weights)
    elif method == "hierarchical":
        return _partition_with_hierarchical(mesh, n_parts, cell_weights)
    else:
        raise NotImplementedError(f"Partition method '{method}' not implemented")


def _get_adjacency(mesh: PolyMesh) -> List[List[int]]:
    """
    Computes the adjacency list for the mesh cells.

    Args:
        mesh: The mesh object.

    Returns:
        The adjacency list.
    """
    mesh.analyze_mesh()

    adjacency: List[List[int]] = []
    for i in range(mesh.n_cells):
        neighs = {int(nb) for nb in mesh.cell_neighbors[i] if nb != -1}
        neighs.discard(i)
        adjacency.append(sorted(neighs))
    return adjacency


def _partition_with_metis(
    mesh: PolyMesh, n_parts: int, cell_weights: Optional[np.ndarray]
) -> np.ndarray:
    """Partitions the mesh using the METIS library."""
    if metis is None:
        raise ImportError("METIS python binding not available")

    adjacency = _get_adjacency(mesh)
    vwgt = [int(w) for w in cell_weights] if cell_weights is not None else None
    try:
        _, parts = metis.part_graph(
            adjacency, nparts=n_parts, vweights=vwgt, recursive=True
        )
    except metis.METIS_Error as ex:
        raise StackMeshError(f"METIS partitioning failed: {ex}") from ex
    return np.array(parts, dtype=int)


def _partition_with_hierarchical(
    mesh: PolyMesh, n_parts: int, cell_weights: Optional[np.ndarray]
) -> np.ndarray:
    """Partitions the mesh using a sequential coordinate bisection method."""
    is_power_of_two = (n_parts > 0) and (n_parts & (n_parts - 1) == 0)
    if not is_power_of_two:
        warnings.warn(
            f"The 'hierarchical' method works best with a power-of-two number of partitions. "
            f"Provided n_parts={n_parts} may result in uneven partitions."
        )

    mesh.analyze_mesh()

    centroids = mesh.cell_centroids
    weights = (
        np.asarray(cell_weights, dtype=float)
        if cell_weights is not None
        else np.ones(mesh.n_cells)
    )
    parts = np.zeros(mesh.n_cells, dtype=int)

    # Iteratively bisect the heaviest partition until the desired number of
    # partitions is reached.
    for i in range(1, n_parts):
        part_loads = np.bincount(parts, weights=weights)
        p_to_split = np.argmax(part_loads)
        idxs_to_split = np.where(parts == p_to_split)[0]

        if idxs_to_split.size < 2:
            continue

        # Split along the longest side of the partition's centroid bounding box.
        pts = centroids[idxs_to_split]
        axis = int(np.argmax(pts.max(axis=0) - pts.min(axis=0)))
        order = np.argsort(pts[:, axis], kind="stable")

        # Find the weighted median split point.
        cum_w = np.cumsum(weights[idxs_to_split][order])
        total_w = cum_w[-1]

        split_idx = len(order) // 2
        if total_w > 0:
            split_idx = int(np.searchsorted(cum_w, total_w / 2.0))

        # Handle cases where the split is at the beginning or end.
        if split_idx == 0 or split_idx == len(order):
            split_idx = len(order) // 2

        right_indices = idxs_to_split[order[split_idx:]]
        parts[right_indices] = i

    return parts


def print_partition_summary(
    parts: np.ndarray, cell_weights: Optional[np.ndarray] = None
) -> None:
    """Prints a summary of the cell distribution across partitions."""
    if parts.size == 0:
        print("--- Partition Summary ---")
        print("No partitions found.")
        return

    n_parts = int(np.max(parts) + 1)
    counts = np.bincount(parts, minlength=n_parts)
    loads = (
        np.bincount(parts, weights=cell_weights, minlength=n_parts)
        if cell_weights is not None
        else None
    )

    print("--- Partition Summary ---")
    print(f"Number of partitions: {n_parts}")
    for p, count in enumerate(counts):
        if loads is None:
            print(f"  Partition {p}: {count} cells")
        else:
            print(f"  Partition {p}: {count} cells, load {int(loads[p])}")
