import unittest

from stack_mesh.exceptions import ConfigurationError
from stack_mesh.meshgen.catalog import LayerCatalog


class TestLayerCatalog(unittest.TestCase):

    def test_default_catalog(self):
        """The default catalog names every layer of a generated stack."""
        catalog = LayerCatalog.default()
        self.assertEqual(catalog.material_ids("anode"), frozenset({0}))
        self.assertEqual(catalog.material_ids("collector"), frozenset({3, 4}))
        self.assertEqual(catalog.material_id("collector_cathode"), 4)
        self.assertEqual(catalog.boundary_id("anode"), 1)
        self.assertEqual(catalog.boundary_id("cathode"), 2)

    def test_from_config(self):
        """Catalog entries accept lists and comma separated strings."""
        database = {
            "materials": 2,
            "material_0": {"name": "anode", "material_id": "5,7"},
            "material_1": {"name": "collector", "material_id": [9]},
            "boundaries": 1,
            "boundary_0": {"name": "cathode", "boundary_id": 3},
        }
        catalog = LayerCatalog.from_config(database)
        self.assertEqual(catalog.material_ids("anode"), frozenset({5, 7}))
        self.assertEqual(catalog.material_id("anode"), 5)
        self.assertEqual(catalog.material_ids("collector"), frozenset({9}))
        self.assertEqual(catalog.boundary_id("cathode"), 3)

    def test_missing_section_raises(self):
        database = {"materials": 1, "boundaries": 0}
        with self.assertRaises(ConfigurationError):
            LayerCatalog.from_config(database)

    def test_unknown_name_raises(self):
        catalog = LayerCatalog.default()
        with self.assertRaises(ConfigurationError):
            catalog.material_ids("electrolyte")
        with self.assertRaises(ConfigurationError):
            catalog.boundary_id("ground")

    def test_multi_tag_boundary_rejected(self):
        catalog = LayerCatalog(materials={}, boundaries={"anode": {1, 2}})
        with self.assertRaises(ConfigurationError):
            catalog.boundary_id("anode")

    def test_catalog_is_read_only(self):
        catalog = LayerCatalog.default()
        with self.assertRaises(TypeError):
            catalog.materials["anode"] = frozenset({42})
        with self.assertRaises(AttributeError):
            catalog.materials = {}

    def test_dict_round_trip(self):
        catalog = LayerCatalog.default()
        self.assertEqual(LayerCatalog.from_dict(catalog.to_dict()), catalog)


if __name__ == "__main__":
    unittest.main()
