# -*- coding: utf-8 -*-
"""
This module defines the PolyMesh class, the data structure holding a quad (2D)
or hexahedral (3D) mesh of a layered stack. It is a stand-alone, data-centric
container: node coordinates, cell connectivity, one material id per cell and
boundary ids on faces.

Besides the derived topology and geometry, PolyMesh provides the primitive
operations used to assemble a stack: building a structured box, transforming
and shifting node coordinates, merging two meshes with fusion of coincident
vertices, and uniform global refinement.
"""

import copy
import logging
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
from scipy.spatial import cKDTree

from ..common.utility import plot_mesh

logger = logging.getLogger(__name__)

# Vertices closer than this fraction of the bounding box diagonal are fused.
MERGE_RELATIVE_TOLERANCE = 1e-12

# Position of each cell vertex in the unit cell, in connectivity order.
CORNER_POSITIONS = {
    2: [(0, 0), (1, 0), (1, 1), (0, 1)],
    3: [
        (0, 0, 0),
        (1, 0, 0),
        (1, 1, 0),
        (0, 1, 0),
        (0, 0, 1),
        (1, 0, 1),
        (1, 1, 1),
        (0, 1, 1),
    ],
}

# (axis, side) of the unit cell covered by each face, in face order.
FACE_SIDES = {
    2: [(1, 0), (0, 1), (1, 1), (0, 0)],
    3: [(2, 0), (2, 1), (1, 0), (0, 1), (1, 1), (0, 0)],
}

ELEMENT_TYPES = {
    2: {"name": "Quad 4", "num_nodes": 4},
    3: {"name": "Hexahedron 8", "num_nodes": 8},
}


class PolyMesh:
    """
    A data-centric class for storing and manipulating the mesh of a stack.

    Attributes:
        dimension (int): The spatial dimension of the mesh (2 or 3).
        n_nodes (int): The total number of nodes (vertices) in the mesh.
        n_cells (int): The total number of cells in the mesh.
        node_coords (np.ndarray): Node coordinates, z is zero in 2D.
            - Shape: `(n_nodes, 3)`
            - `dtype`: `float`
        cell_node_connectivity (List[List[int]]): Node indices of each cell,
            ordered counter-clockwise (bottom face first for hexahedra).
        cell_material_ids (np.ndarray): Material id of each cell.
            - Shape: `(n_cells,)`
            - `dtype`: `int`
        cell_face_nodes (List[List[List[int]]]): Faces of each cell as node lists.
        cell_neighbors (np.ndarray): Neighbor across each face, -1 on the boundary.
            - Shape: `(n_cells, faces_per_cell)`
        cell_face_tags (np.ndarray): Boundary id of each face, 0 for interior
            faces and untagged boundary faces.
            - Shape: `(n_cells, faces_per_cell)`
        cell_centroids (np.ndarray): The geometric center of each cell.
        cell_volumes (np.ndarray): The measure of each cell (area in 2D).
        cell_face_midpoints (np.ndarray): The center of each face of each cell.
            - Shape: `(n_cells, faces_per_cell, 3)`
        cell_face_normals (np.ndarray): Outward unit normal of each face.
        cell_face_areas (np.ndarray): The area (3D) or length (2D) of each face.
        boundary_face_nodes (np.ndarray): Node indices of each tagged boundary face.
        boundary_face_tags (np.ndarray): Boundary id of each tagged boundary face.
    """

    def __init__(self) -> None:
        """Initializes the PolyMesh instance with empty attributes."""
        self.dimension: int = 0
        self.n_nodes: int = 0
        self.n_cells: int = 0
        self._is_analyzed: bool = False

        # Topology Data (defined)
        self.node_coords: np.ndarray = np.zeros((0, 3))
        self.cell_node_connectivity: List[List[int]] = []
        self.cell_material_ids: np.ndarray = np.array([], dtype=int)

        # Topology Data (derived)
        self.cell_face_nodes: List[List[List[int]]] = []
        self.cell_neighbors: np.ndarray = np.array([])
        self.cell_face_tags: np.ndarray = np.array([])

        # Boundary Data
        self.boundary_face_nodes: np.ndarray = np.array([], dtype=int)
        self.boundary_face_tags: np.ndarray = np.array([], dtype=int)

        # Computed Geometric Properties
        self.cell_centroids: np.ndarray = np.array([])
        self.cell_volumes: np.ndarray = np.array([])
        self.cell_face_midpoints: np.ndarray = np.array([])
        self.cell_face_normals: np.ndarray = np.array([])
        self.cell_face_areas: np.ndarray = np.array([])

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_arrays(
        cls,
        dimension: int,
        node_coords: np.ndarray,
        cell_node_connectivity: Sequence[Sequence[int]],
        cell_material_ids: Optional[Sequence[int]] = None,
        boundary_face_nodes: Optional[Sequence[Sequence[int]]] = None,
        boundary_face_tags: Optional[Sequence[int]] = None,
    ) -> "PolyMesh":
        """
        Creates a mesh from raw arrays.

        Args:
            dimension: 2 for quads, 3 for hexahedra.
            node_coords: Coordinates, shape `(n_nodes, dimension)` or `(n_nodes, 3)`.
            cell_node_connectivity: Node indices of each cell.
            cell_material_ids: Material id of each cell, 0 if omitted.
            boundary_face_nodes: Node indices of tagged boundary faces.
            boundary_face_tags: Boundary id of each tagged boundary face.
        """
        if dimension not in ELEMENT_TYPES:
            raise ValueError(f"dimension={dimension} must be 2 or 3")

        coords = np.asarray(node_coords, dtype=float)
        if coords.ndim != 2 or coords.shape[1] not in (dimension, 3):
            raise ValueError(
                f"node_coords must have shape (n_nodes, {dimension}) or (n_nodes, 3)"
            )
        if coords.shape[1] != 3:
            coords = np.hstack([coords, np.zeros((coords.shape[0], 3 - coords.shape[1]))])

        n_vertices = ELEMENT_TYPES[dimension]["num_nodes"]
        connectivity = [[int(n) for n in conn] for conn in cell_node_connectivity]
        for conn in connectivity:
            if len(conn) != n_vertices:
                raise ValueError(
                    f"Cells of a {dimension}D mesh must have {n_vertices} nodes, "
                    f"got {len(conn)}."
                )

        mesh = cls()
        mesh.dimension = dimension
        mesh.node_coords = coords
        mesh.n_nodes = coords.shape[0]
        mesh.cell_node_connectivity = connectivity
        mesh.n_cells = len(connectivity)
        if cell_material_ids is None:
            mesh.cell_material_ids = np.zeros(mesh.n_cells, dtype=int)
        else:
            mesh.cell_material_ids = np.asarray(cell_material_ids, dtype=int)
            if mesh.cell_material_ids.shape != (mesh.n_cells,):
                raise ValueError("cell_material_ids must have one entry per cell")
        if boundary_face_nodes is not None and len(boundary_face_nodes) > 0:
            mesh.boundary_face_nodes = np.asarray(boundary_face_nodes, dtype=int)
            mesh.boundary_face_tags = np.asarray(boundary_face_tags, dtype=int)
        return mesh

    @classmethod
    def create_subdivided_box(
        cls,
        repetitions: Sequence[int],
        p1: Sequence[float],
        p2: Sequence[float],
        material_id: int = 0,
    ) -> "PolyMesh":
        """
        Creates a structured mesh of the axis-aligned box spanned by `p1` and `p2`.

        The box is split into `repetitions[a]` equal cells along each axis `a`.
        All cells get `material_id`, all boundary ids are 0.

        Args:
            repetitions: Number of cells along each axis; its length sets the dimension.
            p1: One corner of the box.
            p2: The opposite corner of the box.
            material_id: Material id stamped on every cell.

        Returns:
            A new PolyMesh instance.
        """
        if repetitions is None or len(repetitions) == 0:
            raise ValueError("repetitions must be given for every axis")
        dim = len(repetitions)
        if dim not in ELEMENT_TYPES:
            raise ValueError(f"repetitions={list(repetitions)} must have 2 or 3 entries")
        if len(p1) != dim or len(p2) != dim:
            raise ValueError(
                f"Box corners must have {dim} coordinates to match repetitions="
                f"{list(repetitions)}"
            )
        reps = [int(r) for r in repetitions]
        if any(r < 1 for r in reps):
            raise ValueError(f"repetitions={reps} must all be positive")

        lower = np.minimum(np.asarray(p1, dtype=float), np.asarray(p2, dtype=float))
        upper = np.maximum(np.asarray(p1, dtype=float), np.asarray(p2, dtype=float))
        if np.any(upper - lower <= 0.0):
            raise ValueError(f"Box from {list(p1)} to {list(p2)} is degenerate")

        ticks = [np.linspace(lower[a], upper[a], reps[a] + 1) for a in range(dim)]
        n_ticks = [r + 1 for r in reps]

        # Node (i, j, k) gets index i + nx * (j + ny * k)
        grid = np.meshgrid(*ticks, indexing="ij")
        node_coords = np.zeros((int(np.prod(n_ticks)), 3))
        for a in range(dim):
            node_coords[:, a] = grid[a].ravel(order="F")

        def node_index(idx: Tuple[int, ...]) -> int:
            flat, stride = 0, 1
            for a in range(dim):
                flat += idx[a] * stride
                stride *= n_ticks[a]
            return flat

        cell_connectivity = []
        for cell_idx in np.ndindex(*reps[::-1]):
            base = cell_idx[::-1]
            cell_connectivity.append(
                [
                    node_index(tuple(base[a] + pos[a] for a in range(dim)))
                    for pos in CORNER_POSITIONS[dim]
                ]
            )

        return cls.from_arrays(
            dim,
            node_coords,
            cell_connectivity,
            np.full(len(cell_connectivity), material_id, dtype=int),
        )

    def copy(self) -> "PolyMesh":
        """Returns a deep copy of the mesh."""
        return copy.deepcopy(self)

    # =========================================================================
    # Analysis
    # =========================================================================

    def analyze_mesh(self) -> None:
        """
        Computes all derived topological and geometric properties for the mesh.

        The result is cached until the mesh is modified.
        """
        if self.n_cells == 0 or self.n_nodes == 0:
            raise RuntimeError("Mesh has no cells or nodes.")
        if self._is_analyzed:
            return

        self._extract_cell_faces()
        self._compute_face_topology()

        self._compute_cell_centroids()
        self._compute_face_properties()
        self._compute_cell_volumes()

        self._is_analyzed = True

    def _invalidate(self) -> None:
        self._is_analyzed = False

    def at_boundary(self, cell_idx: int) -> bool:
        """True if at least one face of the cell lies on the mesh boundary."""
        self.analyze_mesh()
        return bool(np.any(self.cell_neighbors[cell_idx] == -1))

    def cells_with_material(
        self, material_ids: Iterable[int], candidates: Optional[np.ndarray] = None
    ) -> np.ndarray:
        """
        Returns the indices of the cells whose material id is in `material_ids`.

        Args:
            material_ids: Accepted material ids.
            candidates: Optional subset of cell indices to filter instead of all cells.
        """
        ids = np.fromiter(material_ids, dtype=int)
        cells = np.arange(self.n_cells) if candidates is None else np.asarray(candidates)
        return cells[np.isin(self.cell_material_ids[cells], ids)]

    def material_histogram(self) -> Dict[int, int]:
        """Number of cells per material id."""
        return {int(k): int(v) for k, v in sorted(Counter(self.cell_material_ids).items())}

    def bounding_box(self) -> Tuple[np.ndarray, np.ndarray]:
        """Lower and upper corners of the mesh, restricted to its dimension."""
        coords = self.node_coords[:, : self.dimension]
        return np.min(coords, axis=0), np.max(coords, axis=0)

    def set_face_boundary_id(self, cell_idx: int, face_idx: int, boundary_id: int) -> None:
        """Assigns a boundary id to a boundary face of a cell."""
        self.analyze_mesh()
        if self.cell_neighbors[cell_idx, face_idx] != -1:
            raise ValueError(
                f"Face {face_idx} of cell {cell_idx} is an interior face and cannot "
                "carry a boundary id."
            )
        self.cell_face_tags[cell_idx, face_idx] = boundary_id
        self._collect_boundary_faces()

    def _collect_boundary_faces(self) -> None:
        """Rebuilds the boundary face arrays from the per-cell face tags."""
        mask = (self.cell_neighbors == -1) & (self.cell_face_tags != 0)
        cells, faces = np.nonzero(mask)
        if cells.size == 0:
            self.boundary_face_nodes = np.array([], dtype=int)
            self.boundary_face_tags = np.array([], dtype=int)
            return
        self.boundary_face_nodes = np.array(
            [self.cell_face_nodes[c][f] for c, f in zip(cells, faces)], dtype=int
        )
        self.boundary_face_tags = self.cell_face_tags[cells, faces].astype(int)

    # =========================================================================
    # Coordinate Operations
    # =========================================================================

    def transform(self, function: Callable[[np.ndarray], np.ndarray]) -> None:
        """
        Moves every node to `function(point)`.

        The function receives and returns a point with `dimension` coordinates.
        """
        dim = self.dimension
        new_coords = self.node_coords.copy()
        for i in range(self.n_nodes):
            new_coords[i, :dim] = function(self.node_coords[i, :dim].copy())
        self.node_coords = new_coords
        self._invalidate()

    def shift(self, shift_vector: Sequence[float]) -> None:
        """Translates every node by `shift_vector`."""
        vec = np.asarray(shift_vector, dtype=float)
        if vec.shape != (self.dimension,):
            raise ValueError(f"shift_vector must have {self.dimension} components")
        self.node_coords[:, : self.dimension] += vec
        self._invalidate()

    @classmethod
    def merge_meshes(
        cls, first: "PolyMesh", second: "PolyMesh", tolerance: Optional[float] = None
    ) -> "PolyMesh":
        """
        Creates the union of two meshes.

        Vertices of `second` lying on a vertex of `first` are fused with it, so
        cells on both sides of a shared face become neighbors. Cells keep their
        material ids; boundary ids are not carried over.

        Args:
            first: The first mesh; its node and cell numbering is kept.
            second: The mesh appended after `first`.
            tolerance: Fusion distance. Defaults to a small fraction of the
                bounding box diagonal of both meshes.
        """
        if first.dimension != second.dimension:
            raise ValueError(
                f"Cannot merge a {first.dimension}D mesh with a {second.dimension}D mesh."
            )

        coords_a, coords_b = first.node_coords, second.node_coords
        if tolerance is None:
            all_coords = np.vstack([coords_a, coords_b])
            diagonal = np.linalg.norm(all_coords.max(axis=0) - all_coords.min(axis=0))
            tolerance = MERGE_RELATIVE_TOLERANCE * diagonal
        tolerance = max(tolerance, np.finfo(float).tiny)

        tree = cKDTree(coords_a)
        distances, nearest = tree.query(coords_b, distance_upper_bound=tolerance)
        matched = np.isfinite(distances)

        node_map = np.empty(coords_b.shape[0], dtype=int)
        node_map[matched] = nearest[matched]
        n_new = int(np.count_nonzero(~matched))
        node_map[~matched] = coords_a.shape[0] + np.arange(n_new)

        merged = cls.from_arrays(
            first.dimension,
            np.vstack([coords_a, coords_b[~matched]]),
            first.cell_node_connectivity
            + [[int(node_map[n]) for n in conn] for conn in second.cell_node_connectivity],
            np.concatenate([first.cell_material_ids, second.cell_material_ids]),
        )
        logger.debug(
            "Merged meshes: %d + %d cells, %d vertices fused.",
            first.n_cells,
            second.n_cells,
            int(np.count_nonzero(matched)),
        )
        return merged

    # =========================================================================
    # Refinement
    # =========================================================================

    def refine_global(self, n_refinements: int = 1) -> None:
        """
        Uniformly refines every cell `n_refinements` times.

        Each refinement splits a quad into 4 and a hexahedron into 8 children.
        Children inherit the material id of their parent, and child faces on a
        tagged parent boundary face inherit its boundary id.
        """
        for _ in range(int(n_refinements)):
            self._refine_once()

    def _refine_once(self) -> None:
        self.analyze_mesh()
        dim = self.dimension
        corners = CORNER_POSITIONS[dim]
        face_sides = FACE_SIDES[dim]

        # Lattice points of a refined unit cell and the parent corners they average
        lattice = list(np.ndindex(*([3] * dim)))
        lattice_corners = {
            point: [
                k
                for k, pos in enumerate(corners)
                if all(
                    point[a] == 1 or point[a] == 2 * pos[a] for a in range(dim)
                )
            ]
            for point in lattice
        }

        coords = [row for row in self.node_coords]
        point_index: Dict[frozenset, int] = {}
        new_connectivity: List[List[int]] = []
        new_materials: List[int] = []
        new_boundary_nodes: List[List[int]] = []
        new_boundary_tags: List[int] = []

        for ci, conn in enumerate(self.cell_node_connectivity):
            local: Dict[Tuple[int, ...], int] = {}
            for point in lattice:
                parent_nodes = [conn[k] for k in lattice_corners[point]]
                if len(parent_nodes) == 1:
                    local[point] = parent_nodes[0]
                    continue
                key = frozenset(parent_nodes)
                if key not in point_index:
                    point_index[key] = len(coords)
                    coords.append(np.mean(self.node_coords[parent_nodes], axis=0))
                local[point] = point_index[key]

            for child in np.ndindex(*([2] * dim)):
                child_conn = [
                    local[tuple(child[a] + pos[a] for a in range(dim))] for pos in corners
                ]
                new_connectivity.append(child_conn)
                new_materials.append(int(self.cell_material_ids[ci]))

                for fi, (axis, side) in enumerate(face_sides):
                    tag = int(self.cell_face_tags[ci, fi])
                    if tag != 0 and child[axis] == side:
                        face = self._get_faces_for_cell(child_conn)[fi]
                        new_boundary_nodes.append(face)
                        new_boundary_tags.append(tag)

        refined = PolyMesh.from_arrays(
            dim,
            np.array(coords),
            new_connectivity,
            new_materials,
            new_boundary_nodes,
            new_boundary_tags,
        )
        self.__dict__.update(refined.__dict__)
        logger.debug("Refined mesh to %d cells.", self.n_cells)

    # =========================================================================
    # Topology and Connectivity Computations
    # =========================================================================

    def _extract_cell_faces(self) -> None:
        """
        Extracts the faces for each cell based on its connectivity and dimension.
        """
        self.cell_face_nodes = [
            self._get_faces_for_cell(conn) for conn in self.cell_node_connectivity
        ]

    def _get_faces_for_cell(self, conn: List[int]) -> List[List[int]]:
        """Helper to get faces for a single cell."""
        face_templates = {
            8: [  # Hexahedron
                [0, 1, 2, 3],
                [4, 5, 6, 7],
                [0, 1, 5, 4],
                [1, 2, 6, 5],
                [2, 3, 7, 6],
                [3, 0, 4, 7],
            ],
        }
        num_nodes = len(conn)
        if self.dimension == 2:
            # For 2D cells, faces are edges.
            return [[conn[i], conn[(i + 1) % num_nodes]] for i in range(num_nodes)]
        if self.dimension == 3 and num_nodes in face_templates:
            return [[conn[idx] for idx in face] for face in face_templates[num_nodes]]
        return []

    def _compute_face_topology(self) -> None:
        """
        Computes cell-to-cell neighbors and boundary ids for all cell faces.
        """
        if not self.cell_face_nodes:
            return

        # Map unique faces (as sorted node tuples) to the cells they belong to.
        face_to_cell_map: Dict[Tuple[int, ...], List[int]] = {}
        for cell_idx, faces in enumerate(self.cell_face_nodes):
            for face in faces:
                key = tuple(sorted(face))
                face_to_cell_map.setdefault(key, []).append(cell_idx)

        # Map boundary faces (as frozensets) to their boundary ids.
        boundary_face_map = {
            frozenset(int(n) for n in nodes): int(tag)
            for nodes, tag in zip(self.boundary_face_nodes, self.boundary_face_tags)
        }

        max_faces = max(len(f) for f in self.cell_face_nodes)
        self.cell_neighbors = -np.ones((self.n_cells, max_faces), dtype=int)
        self.cell_face_tags = np.zeros((self.n_cells, max_faces), dtype=np.int32)

        for cell_idx, faces in enumerate(self.cell_face_nodes):
            for face_idx, face in enumerate(faces):
                shared_cells = face_to_cell_map.get(tuple(sorted(face)), [])

                if len(shared_cells) == 2:  # This is an interior face
                    neighbor_idx = (
                        shared_cells[0]
                        if shared_cells[1] == cell_idx
                        else shared_cells[1]
                    )
                    self.cell_neighbors[cell_idx, face_idx] = neighbor_idx

                elif len(shared_cells) == 1:  # This is a boundary face
                    tag = boundary_face_map.get(frozenset(face))
                    if tag is not None:
                        self.cell_face_tags[cell_idx, face_idx] = tag

    # =========================================================================
    # Geometric Property Computations
    # =========================================================================

    def _compute_cell_centroids(self) -> None:
        """Computes the geometric centroid of each cell."""
        self.cell_centroids = np.array(
            [
                np.mean(self.node_coords[conn], axis=0)
                for conn in self.cell_node_connectivity
            ]
        )

    def _compute_face_properties(self) -> None:
        """
        Computes geometric properties (midpoint, area, normal) for each face
        of each cell.
        """
        max_faces = self.cell_neighbors.shape[1]
        self.cell_face_midpoints = np.zeros((self.n_cells, max_faces, 3))
        self.cell_face_normals = np.zeros((self.n_cells, max_faces, 3))
        self.cell_face_areas = np.zeros((self.n_cells, max_faces))

        for ci, faces in enumerate(self.cell_face_nodes):
            for fi, face_nodes in enumerate(faces):
                nodes = self.node_coords[face_nodes]
                self.cell_face_midpoints[ci, fi] = np.mean(nodes, axis=0)
                if self.dimension == 2:
                    self._compute_2d_face_metrics(ci, fi, nodes)
                elif self.dimension == 3:
                    self._compute_3d_face_metrics(ci, fi, nodes)

        self._orient_face_normals()

    def _compute_2d_face_metrics(self, ci: int, fi: int, nodes: np.ndarray) -> None:
        """Computes area (length) and normal for a 2D face (edge)."""
        edge_vec = nodes[1] - nodes[0]
        length = np.linalg.norm(edge_vec)
        self.cell_face_areas[ci, fi] = length
        if length > 0.0:
            self.cell_face_normals[ci, fi] = (
                np.array([edge_vec[1], -edge_vec[0], 0.0]) / length
            )

    def _compute_3d_face_metrics(self, ci: int, fi: int, nodes: np.ndarray) -> None:
        """Computes area and normal for a 3D face (polygon)."""
        centroid = np.mean(nodes, axis=0)
        area_vec = (
            sum(
                np.cross(nodes[k] - centroid, nodes[(k + 1) % len(nodes)] - centroid)
                for k in range(len(nodes))
            )
            / 2.0
        )
        area = np.linalg.norm(area_vec)
        self.cell_face_areas[ci, fi] = area
        if area > 0.0:
            self.cell_face_normals[ci, fi] = area_vec / area

    def _orient_face_normals(self) -> None:
        """Ensures all face normals point outwards from their cell centroid."""
        for ci in range(self.n_cells):
            for fi in range(len(self.cell_face_nodes[ci])):
                vec_to_face = self.cell_face_midpoints[ci, fi] - self.cell_centroids[ci]
                if np.dot(self.cell_face_normals[ci, fi], vec_to_face) < 0:
                    self.cell_face_normals[ci, fi] *= -1

    def _compute_cell_volumes(self) -> None:
        """Computes the volume (3D) or area (2D) of each cell."""
        if self.dimension == 2:
            volumes = np.zeros(self.n_cells)
            for i, conn in enumerate(self.cell_node_connectivity):
                nodes = self.node_coords[conn][:, :2]
                x, y = nodes[:, 0], nodes[:, 1]
                volumes[i] = 0.5 * abs(np.dot(x, np.roll(y, 1)) - np.dot(y, np.roll(x, 1)))
            self.cell_volumes = volumes
        else:
            # Divergence theorem: (1/3) * sum(face_midpoint . face_normal * face_area),
            # taken relative to the cell centroid to avoid cancellation far from the origin.
            rel = self.cell_face_midpoints - self.cell_centroids[:, None, :]
            contrib = np.sum(rel * self.cell_face_normals, axis=2)
            self.cell_volumes = np.sum(contrib * self.cell_face_areas, axis=1) / 3.0

    # =========================================================================
    # Reporting
    # =========================================================================

    def print_summary(self) -> None:
        """Prints a formatted summary report of the mesh."""
        print("\n" + "=" * 80)
        print(f"{'Mesh Summary':^80}")
        print("=" * 80)
        print(f"\n{'--- General Information ---':^80}\n")
        print(f"  {'Dimension:':<25} {self.dimension}D")
        print(f"  {'Number of Nodes:':<25} {self.n_nodes}")
        print(f"  {'Number of Cells:':<25} {self.n_cells}")
        print(f"  {'Cell Type:':<25} {ELEMENT_TYPES[self.dimension]['name']}")

        if self.n_nodes > 0:
            lower, upper = self.bounding_box()
            print(f"\n{'--- Geometric Bounding Box ---':^80}\n")
            for axis, name in enumerate("XYZ"[: self.dimension]):
                print(
                    f"  {name + ' Range:':<25} {lower[axis]:.4e} to {upper[axis]:.4e}"
                )

        print(f"\n{'--- Material Distribution ---':^80}\n")
        for material_id, count in self.material_histogram().items():
            print(f"    - {'material ' + str(material_id) + ':':<20} {count}")
        print("\n" + "=" * 80)

    def plot(
        self,
        filepath: str = "mesh_plot.png",
        parts: Optional[np.ndarray] = None,
        show_cells: bool = False,
        show_nodes: bool = False,
    ) -> None:
        """
        Generates a 2D plot of the mesh and saves it to a file.

        Cells are colored by `parts` if given, otherwise by material id.

        Args:
            filepath (str): The path to save the plot image.
            parts (np.ndarray, optional): An array mapping each cell to a
                partition ID for coloring. Shape: (n_cells,), dtype: int.
            show_cells (bool): Whether to display cell labels.
            show_nodes (bool): Whether to display node labels.
        """
        if self.dimension != 2:
            logger.warning("Plotting is currently supported only for 2D meshes.")
            return

        fig, ax = plt.subplots(figsize=(10, 8))
        plot_mesh(
            ax,
            self.node_coords,
            self.cell_node_connectivity,
            show_nodes=show_nodes,
            show_cells=show_cells,
            parts=parts if parts is not None else self.cell_material_ids,
            title="Mesh Plot",
            label="Part" if parts is not None else "Material",
        )
        plt.savefig(filepath, dpi=300, bbox_inches="tight")
        plt.close(fig)
        logger.info("Mesh plot saved to: %s", filepath)
