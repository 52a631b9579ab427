import os
import unittest

import numpy as np

from stack_mesh.meshgen.catalog import LayerCatalog
from stack_mesh.polymesh import partition
from stack_mesh.polymesh.partition import (
    CELL_BASE_WEIGHT,
    compute_cell_weight,
    partition_mesh,
    print_partition_summary,
)
from tests.common_meshes import create_box_mesh


class TestPartitionMesh(unittest.TestCase):

    def setUp(self):
        self.tmp_path = "results/partition"
        os.makedirs(self.tmp_path, exist_ok=True)

    def test_single_part(self):
        mesh = create_box_mesh(4, 4)
        parts = partition_mesh(mesh, 1)
        np.testing.assert_array_equal(parts, np.zeros(16, dtype=int))

    @unittest.skipIf(partition.metis is None, "METIS library not available")
    def test_metis_partitioning(self):
        """Test METIS partitioning."""
        mesh = create_box_mesh(15, 15)
        n_parts = 3
        weights = np.full(mesh.n_cells, CELL_BASE_WEIGHT)
        parts = partition_mesh(mesh, n_parts, method="metis", cell_weights=weights)
        self.assertEqual(parts.shape[0], mesh.n_cells)
        self.assertEqual(len(np.unique(parts)), n_parts)
        mesh.plot(
            os.path.join(self.tmp_path, "mesh_partition_metis.png"),
            parts=parts,
        )
        print_partition_summary(parts, weights)

    def test_hierarchical_partitioning(self):
        """Test hierarchical partitioning."""
        mesh = create_box_mesh(15, 15)
        n_parts = 4
        parts = partition_mesh(mesh, n_parts, method="hierarchical")
        self.assertEqual(parts.shape[0], mesh.n_cells)
        self.assertEqual(len(np.unique(parts)), n_parts)
        mesh.plot(
            os.path.join(self.tmp_path, "mesh_partition_hierarchical.png"),
            parts=parts,
        )
        print_partition_summary(parts)

    def test_hierarchical_balances_weights(self):
        """Heavy cells get a part of their own."""
        mesh = create_box_mesh(8, 1)
        weights = np.array([1000, 1000, 1000, 1000, 1000, 1000, 7000, 7000])
        parts = partition_mesh(mesh, 2, method="hierarchical", cell_weights=weights)
        self.assertNotEqual(parts[0], parts[7])
        # Without weights the split would fall in the middle.
        self.assertEqual(int(np.sum(parts == parts[7])), 2)

    def test_weight_count_mismatch(self):
        mesh = create_box_mesh(2, 2)
        with self.assertRaises(ValueError):
            partition_mesh(mesh, 2, method="hierarchical", cell_weights=np.ones(3))

    def test_unknown_method(self):
        mesh = create_box_mesh(2, 2)
        with self.assertRaises(NotImplementedError):
            partition_mesh(mesh, 2, method="spectral")


class TestCellWeight(unittest.TestCase):

    def setUp(self):
        self.catalog = LayerCatalog.default()
        self.weights = {"anode": 10, "cathode": 20, "separator": 30, "collector": 40}

    def test_weight_per_layer(self):
        self.assertEqual(compute_cell_weight(0, self.catalog, self.weights), 10)
        self.assertEqual(compute_cell_weight(2, self.catalog, self.weights), 20)
        self.assertEqual(compute_cell_weight(1, self.catalog, self.weights), 30)
        self.assertEqual(compute_cell_weight(3, self.catalog, self.weights), 40)
        self.assertEqual(compute_cell_weight(4, self.catalog, self.weights), 40)

    def test_missing_weights_default_to_zero(self):
        self.assertEqual(compute_cell_weight(0, self.catalog, {}), 0)

    def test_unknown_material(self):
        self.assertIsNone(compute_cell_weight(99, self.catalog, self.weights))

    def test_precedence(self):
        """A material listed in several classes takes the first class's weight."""
        catalog = LayerCatalog(
            materials={"anode": {5}, "cathode": {5}, "collector": {5, 6}},
            boundaries={},
        )
        self.assertEqual(compute_cell_weight(5, catalog, self.weights), 10)
        self.assertEqual(compute_cell_weight(6, catalog, self.weights), 40)

    def test_deterministic(self):
        first = [compute_cell_weight(m, self.catalog, self.weights) for m in range(6)]
        second = [compute_cell_weight(m, self.catalog, self.weights) for m in range(6)]
        self.assertEqual(first, second)


if __name__ == "__main__":
    unittest.main()
