import contextlib
import io
import os
import unittest

import numpy as np

from stack_mesh.polymesh.poly_mesh import PolyMesh
from tests.common_meshes import count_tagged_faces, create_box_mesh


class TestSubdividedBox(unittest.TestCase):
    """Unit tests for structured box creation."""

    def test_quad_box(self):
        mesh = PolyMesh.create_subdivided_box([4, 3], [0.0, 0.0], [2.0, 1.5], material_id=7)
        self.assertEqual(mesh.dimension, 2)
        self.assertEqual(mesh.n_cells, 12)
        self.assertEqual(mesh.n_nodes, 20)
        self.assertEqual(mesh.node_coords.shape, (20, 3))
        self.assertTrue(np.all(mesh.cell_material_ids == 7))

        lower, upper = mesh.bounding_box()
        np.testing.assert_allclose(lower, [0.0, 0.0])
        np.testing.assert_allclose(upper, [2.0, 1.5])

        mesh.analyze_mesh()
        np.testing.assert_allclose(mesh.cell_volumes, 0.25)
        self.assertEqual(mesh.boundary_face_tags.size, 0)

    def test_hex_box(self):
        mesh = PolyMesh.create_subdivided_box([2, 3, 4], [1.0, 1.0, 1.0], [0.0, 0.0, 0.0])
        self.assertEqual(mesh.dimension, 3)
        self.assertEqual(mesh.n_cells, 24)
        self.assertEqual(mesh.n_nodes, 3 * 4 * 5)

        mesh.analyze_mesh()
        self.assertEqual(mesh.cell_neighbors.shape, (24, 6))
        self.assertAlmostEqual(float(np.sum(mesh.cell_volumes)), 1.0)
        np.testing.assert_allclose(mesh.cell_volumes, 1.0 / 24.0)

    def test_invalid_boxes(self):
        with self.assertRaises(ValueError):
            PolyMesh.create_subdivided_box([], [0.0], [1.0])
        with self.assertRaises(ValueError):
            PolyMesh.create_subdivided_box([2, 2], [0.0, 0.0, 0.0], [1.0, 1.0, 1.0])
        with self.assertRaises(ValueError):
            PolyMesh.create_subdivided_box([2, 0], [0.0, 0.0], [1.0, 1.0])
        with self.assertRaises(ValueError):
            PolyMesh.create_subdivided_box([2, 2], [0.0, 0.0], [1.0, 0.0])


class TestPolyMeshOperations(unittest.TestCase):
    """Unit tests for coordinate operations, merging and refinement."""

    @classmethod
    def setUpClass(cls):
        cls.output_dir = "results/polymesh"
        os.makedirs(cls.output_dir, exist_ok=True)

    def test_face_topology(self):
        mesh = create_box_mesh(3, 2)
        mesh.analyze_mesh()
        self.assertEqual(mesh.cell_neighbors.shape, (6, 4))
        # Corner cell 0 has two neighbors, the middle bottom cell three.
        self.assertEqual(int(np.sum(mesh.cell_neighbors[0] != -1)), 2)
        self.assertEqual(int(np.sum(mesh.cell_neighbors[1] != -1)), 3)
        self.assertTrue(mesh.at_boundary(0))
        self.assertTrue(np.all(mesh.cell_face_tags == 0))

    def test_shift_and_transform(self):
        mesh = create_box_mesh(2, 2)
        mesh.shift([1.0, -1.0])
        lower, upper = mesh.bounding_box()
        np.testing.assert_allclose(lower, [1.0, -1.0])
        np.testing.assert_allclose(upper, [3.0, 1.0])

        mesh.transform(lambda p: p * 2.0)
        lower, upper = mesh.bounding_box()
        np.testing.assert_allclose(lower, [2.0, -2.0])
        np.testing.assert_allclose(upper, [6.0, 2.0])
        np.testing.assert_allclose(mesh.node_coords[:, 2], 0.0)

        mesh.analyze_mesh()
        np.testing.assert_allclose(mesh.cell_volumes, 4.0)

    def test_merge_fuses_shared_vertices(self):
        left = create_box_mesh(2, 2, material_id=1)
        right = create_box_mesh(2, 2, material_id=2)
        right.shift([2.0, 0.0])

        merged = PolyMesh.merge_meshes(left, right)
        self.assertEqual(merged.n_cells, 8)
        self.assertEqual(merged.n_nodes, 9 + 9 - 3)
        self.assertEqual(merged.material_histogram(), {1: 4, 2: 4})

        # Cells on both sides of the interface are neighbors.
        merged.analyze_mesh()
        interface_cell = 1  # left box, bottom right
        neighbor_materials = {
            int(merged.cell_material_ids[nb])
            for nb in merged.cell_neighbors[interface_cell]
            if nb != -1
        }
        self.assertIn(2, neighbor_materials)

    def test_merge_drops_boundary_ids(self):
        left = create_box_mesh(1, 1)
        left.set_face_boundary_id(0, 0, 5)
        self.assertEqual(count_tagged_faces(left, 5), 1)

        right = create_box_mesh(1, 1)
        right.shift([1.0, 0.0])
        merged = PolyMesh.merge_meshes(left, right)
        merged.analyze_mesh()
        self.assertEqual(count_tagged_faces(merged, 5), 0)
        self.assertTrue(np.all(merged.cell_face_tags == 0))

    def test_merge_keeps_disjoint_meshes_apart(self):
        first = create_box_mesh(1, 1)
        second = create_box_mesh(1, 1)
        second.shift([5.0, 0.0])
        merged = PolyMesh.merge_meshes(first, second)
        self.assertEqual(merged.n_nodes, 8)

    def test_merge_dimension_mismatch(self):
        quad = create_box_mesh(1, 1)
        hexa = PolyMesh.create_subdivided_box([1, 1, 1], [0, 0, 0], [1, 1, 1])
        with self.assertRaises(ValueError):
            PolyMesh.merge_meshes(quad, hexa)

    def test_set_boundary_id_on_interior_face(self):
        mesh = create_box_mesh(2, 1)
        mesh.analyze_mesh()
        interior_face = int(np.nonzero(mesh.cell_neighbors[0] != -1)[0][0])
        with self.assertRaises(ValueError):
            mesh.set_face_boundary_id(0, interior_face, 3)

    def test_refine_quads(self):
        mesh = PolyMesh.create_subdivided_box([2, 1], [0.0, 0.0], [2.0, 1.0], material_id=4)
        # Tag the bottom face of both cells.
        mesh.set_face_boundary_id(0, 0, 9)
        mesh.set_face_boundary_id(1, 0, 9)

        mesh.refine_global(1)
        self.assertEqual(mesh.n_cells, 8)
        self.assertEqual(mesh.n_nodes, 5 * 3)
        self.assertTrue(np.all(mesh.cell_material_ids == 4))
        self.assertEqual(count_tagged_faces(mesh, 9), 4)

        mesh.analyze_mesh()
        self.assertAlmostEqual(float(np.sum(mesh.cell_volumes)), 2.0)
        np.testing.assert_allclose(mesh.cell_volumes, 0.25)

        # Tagged faces stay on the bottom edge.
        for nodes in mesh.boundary_face_nodes:
            np.testing.assert_allclose(mesh.node_coords[nodes, 1], 0.0)

        mesh.refine_global(2)
        self.assertEqual(mesh.n_cells, 8 * 16)
        self.assertEqual(count_tagged_faces(mesh, 9), 16)

    def test_refine_hexahedra(self):
        mesh = PolyMesh.create_subdivided_box([1, 1, 2], [0, 0, 0], [1.0, 1.0, 2.0])
        mesh.analyze_mesh()
        # Face 1 of the upper cell is the top of the box.
        mesh.set_face_boundary_id(1, 1, 2)

        mesh.refine_global(1)
        self.assertEqual(mesh.n_cells, 16)
        self.assertEqual(mesh.n_nodes, 3 * 3 * 5)
        self.assertEqual(count_tagged_faces(mesh, 2), 4)

        mesh.analyze_mesh()
        self.assertAlmostEqual(float(np.sum(mesh.cell_volumes)), 2.0)
        for nodes in mesh.boundary_face_nodes:
            np.testing.assert_allclose(mesh.node_coords[nodes, 2], 2.0)

    def test_cells_with_material(self):
        left = create_box_mesh(2, 1, material_id=0)
        right = create_box_mesh(2, 1, material_id=3)
        right.shift([2.0, 0.0])
        merged = PolyMesh.merge_meshes(left, right)

        np.testing.assert_array_equal(merged.cells_with_material({3}), [2, 3])
        np.testing.assert_array_equal(
            merged.cells_with_material([0, 3], candidates=np.array([1, 2])), [1, 2]
        )
        self.assertEqual(merged.cells_with_material({8}).size, 0)

    def test_summary_and_plot(self):
        mesh = create_box_mesh(4, 3, material_id=2)
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            mesh.print_summary()
        self.assertIn("Quad 4", output.getvalue())
        filepath = os.path.join(self.output_dir, "box_mesh.png")
        mesh.plot(filepath, show_cells=True)
        self.assertTrue(os.path.exists(filepath))


if __name__ == "__main__":
    unittest.main()
