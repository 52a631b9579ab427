import unittest

import numpy as np

from stack_mesh.meshgen.catalog import LayerCatalog
from stack_mesh.meshgen.component import ALIGNMENT_AXIS, STACK_AXIS
from stack_mesh.meshgen.config import GeometryConfig
from stack_mesh.meshgen.mesh_generator import (
    STACK_ORDER,
    MeshGenerator,
    StackRole,
)
from stack_mesh.polymesh.distributed_mesh import DistributedMesh
from tests.common_meshes import FakeComm, generate_database

# Thicknesses of the test configuration, in meters.
COLLECTOR = 0.01
ELECTRODE = 0.02
SEPARATOR = 0.015


def assemble(dim=2, n_repetitions=0):
    config = GeometryConfig.from_dict(generate_database(dim, n_repetitions))
    generator = MeshGenerator(config, LayerCatalog.default())
    mesh = DistributedMesh(dim, FakeComm())
    steps = generator.assemble(mesh)
    return generator, mesh, steps


class TestStackOrder(unittest.TestCase):

    def test_stack_order(self):
        self.assertEqual(len(STACK_ORDER), 8)
        self.assertEqual(STACK_ORDER[0], StackRole.ANODE_ELECTRODE)
        self.assertEqual(STACK_ORDER[3], StackRole.CATHODE_COLLECTOR)
        self.assertEqual(STACK_ORDER[7], StackRole.ANODE_COLLECTOR)
        # The pattern mirrors around the cathode collector.
        self.assertEqual(STACK_ORDER[:3], STACK_ORDER[4:7][::-1])

    def test_role_layers(self):
        self.assertEqual(StackRole.ANODE_COLLECTOR.layer, "collector")
        self.assertEqual(StackRole.CATHODE_COLLECTOR.layer, "collector")
        self.assertEqual(StackRole.SEPARATOR.layer, "separator")


class TestMeshGenerator(unittest.TestCase):
    """Merging the stack conserves cells and advances the offset without gaps."""

    def test_single_cycle(self):
        generator, mesh, steps = assemble(n_repetitions=0)
        self.assertEqual(
            [step.role for step in steps],
            [
                StackRole.ANODE_ELECTRODE,
                StackRole.SEPARATOR,
                StackRole.CATHODE_ELECTRODE,
                StackRole.CATHODE_COLLECTOR,
            ],
        )
        self.assertEqual(mesh.n_global_active_cells, 6 + 50 + 25 + 50 + 6)
        self.assertEqual(
            mesh.mesh.material_histogram(), {0: 50, 1: 25, 2: 50, 3: 6, 4: 6}
        )

    def test_cell_count_conservation(self):
        for n_repetitions in (0, 1, 2):
            with self.subTest(n_repetitions=n_repetitions):
                generator, mesh, steps = assemble(n_repetitions=n_repetitions)
                expected = generator.components[StackRole.ANODE_COLLECTOR].mesh.n_cells
                for step in steps:
                    expected += generator.components[step.role].mesh.n_cells
                    self.assertEqual(step.n_cells, expected)
                self.assertEqual(len(steps), 4 * (n_repetitions + 1))
                self.assertEqual(mesh.n_global_active_cells, expected)

    def test_offsets_are_contiguous(self):
        generator, mesh, steps = assemble(n_repetitions=1)
        self.assertAlmostEqual(steps[0].offset_before, COLLECTOR)
        for previous, step in zip(steps, steps[1:]):
            self.assertGreater(step.offset_after, step.offset_before)
            self.assertEqual(step.offset_before, previous.offset_after)

        lower, upper = mesh.mesh.bounding_box()
        self.assertAlmostEqual(lower[STACK_AXIS], 0.0)
        self.assertAlmostEqual(upper[STACK_AXIS], steps[-1].offset_after)
        self.assertAlmostEqual(
            upper[STACK_AXIS],
            2 * COLLECTOR + 4 * ELECTRODE + 2 * SEPARATOR + COLLECTOR,
        )

    def test_cathode_collector_shifted_once(self):
        generator, mesh, steps = assemble(n_repetitions=1)
        collector_steps = [s for s in steps if s.role == StackRole.CATHODE_COLLECTOR]
        self.assertEqual(len(collector_steps), 1)
        self.assertAlmostEqual(
            collector_steps[0].applied_shift[ALIGNMENT_AXIS], generator.collector_bottom
        )
        collector_c = generator.components[StackRole.CATHODE_COLLECTOR]
        self.assertEqual(collector_c.shift_vector[ALIGNMENT_AXIS], 0.0)

        # Every other merge only moves along the stacking axis.
        for step in steps:
            if step.role != StackRole.CATHODE_COLLECTOR:
                self.assertEqual(step.applied_shift[ALIGNMENT_AXIS], 0.0)

    def test_repeated_cycles_reuse_components(self):
        generator, mesh, steps = assemble(n_repetitions=1)
        self.assertEqual(
            mesh.mesh.material_histogram(), {0: 100, 1: 50, 2: 100, 3: 12, 4: 6}
        )
        anode_steps = [s for s in steps if s.role == StackRole.ANODE_ELECTRODE]
        self.assertEqual(len(anode_steps), 2)
        self.assertEqual(
            generator.components[StackRole.ANODE_ELECTRODE].offset,
            anode_steps[-1].offset_before,
        )

    def test_collectors_span_the_tab(self):
        generator, mesh, steps = assemble(n_repetitions=0)
        lower, upper = mesh.mesh.bounding_box()
        self.assertAlmostEqual(upper[ALIGNMENT_AXIS], generator.collector_top)
        self.assertAlmostEqual(lower[ALIGNMENT_AXIS], generator.collector_bottom)
        self.assertLess(generator.collector_bottom, 0.0)

    def test_electrodes_conform_to_collectors(self):
        """Aligned collector rows fuse with the electrode vertices."""
        generator, mesh, steps = assemble(n_repetitions=0)
        poly = mesh.mesh
        poly.analyze_mesh()
        for material in (3, 4):
            cells = poly.cells_with_material({material})
            neighbors = poly.cell_neighbors[cells]
            neighbor_materials = {
                int(poly.cell_material_ids[nb]) for nb in neighbors.ravel() if nb != -1
            }
            self.assertTrue(neighbor_materials & {0, 2})

    def test_3d_stack(self):
        generator, mesh, steps = assemble(dim=3, n_repetitions=0)
        self.assertEqual(mesh.n_global_active_cells, 27 + 50 + 32 + 50 + 27)
        lower, upper = mesh.mesh.bounding_box()
        self.assertAlmostEqual(upper[STACK_AXIS], 2 * COLLECTOR + 2 * ELECTRODE + SEPARATOR)
        self.assertAlmostEqual(upper[2], generator.collector_top)
        self.assertAlmostEqual(lower[2], generator.collector_bottom)


if __name__ == "__main__":
    unittest.main()
