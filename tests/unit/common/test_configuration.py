import copy
import os
import unittest

from sem_metrics.common import Configuration, ConfigurationSchema, ConfigValueError, load_default_schema, readfile


self_dir = os.path.dirname(os.path.realpath(__file__))
config_test_dir = self_dir


class ConfigurationTestCases(unittest.TestCase):
    def setUp(self):
        self.schema = load_default_schema()

    def load(self, name: str, load_post_config: bool = True) -> Configuration:
        return Configuration(readfile(os.path.join(config_test_dir, name)), self.schema, load_post_config)

    def test_load_configuration_with_schema_default(self):
        conf = self.load("metrics-1.ini")

        self.assertEqual(conf.dimension, 3)
        self.assertListEqual(conf.num_solpts, [4, 4, 4])
        self.assertEqual(conf.node_type, "lobatto")
        self.assertListEqual(conf.num_elements, [1, 1, 1])
        self.assertListEqual(conf.domain_min, [0.0, 0.0, 0.0])
        self.assertListEqual(conf.domain_max, [1.0, 1.0, 1.0])
        self.assertEqual(conf.warp_amplitude, 0.0)
        self.assertListEqual(conf.n_metric, [3, 3, 3])
        self.assertEqual(conf.num_workers, 1)
        self.assertEqual(conf.desired_device, "cpu")
        self.assertTrue(conf.verbose)

    def test_load_configuration_with_valid_values(self):
        conf = self.load("metrics-2.ini")

        self.assertEqual(conf.dimension, 2)
        self.assertListEqual(conf.num_solpts, [5, 3])
        self.assertEqual(conf.node_type, "legendre")
        self.assertListEqual(conf.num_elements, [4, 2])
        self.assertListEqual(conf.domain_min, [-1.0, 0.0])
        self.assertListEqual(conf.domain_max, [1.0, 1.0])
        self.assertAlmostEqual(conf.warp_amplitude, 0.05)
        self.assertListEqual(conf.n_metric, [3, 2])
        self.assertEqual(conf.num_workers, 2)
        self.assertFalse(conf.verbose)

    def test_load_configuration_without_post_config(self):
        conf = self.load("metrics-2.ini", load_post_config=False)
        self.assertListEqual(conf.domain_max, [1.0])
        self.assertListEqual(conf.n_metric, [3, -1])

    def test_load_configuration_with_invalid_values(self):
        for i in range(1, 7):
            with self.subTest(config=i):
                with self.assertRaises(ConfigValueError):
                    self.load(f"metrics-invalid-{i}.ini")

    def test_configuration_from_string(self):
        conf = Configuration("[Grid]\ndimension = 1\nnum_solpts = 6\n[Metric]\nn_metric = 2\n", self.schema)
        self.assertListEqual(conf.num_solpts, [6])
        self.assertListEqual(conf.n_metric, [2])

        text = str(conf)
        self.assertIn("Grid", text)
        self.assertIn("n_metric", text)

        other = copy.deepcopy(conf)
        other.num_solpts[0] = 3
        self.assertListEqual(conf.num_solpts, [6])
        self.assertIs(other.parser, conf.parser)

    def test_invalid_schema(self):
        with self.assertRaises(ValueError):
            ConfigurationSchema("{not json")
        with self.assertRaises(ValueError):
            ConfigurationSchema(
                '{"version": "1", "sections": [{"name": "A", "fields": [{"name": "a", "type": "complex"}]}]}'
            )
        with self.assertRaises(ValueError):
            ConfigurationSchema(
                '{"version": "1", "sections": [{"name": "A", "fields": '
                '[{"name": "a", "type": "int", "default": 5, "min": 0, "max": 3}]}]}'
            )

    def test_dependency(self):
        schema = ConfigurationSchema(
            '{"version": "1", "sections": [{"name": "A", "fields": ['
            '{"name": "b", "type": "int", "dependency": {"name": "a", "values": [1]}},'
            '{"name": "a", "type": "int", "default": 0}'
            "]}]}"
        )
        conf = Configuration("[A]\na = 1\nb = 4\n", schema, load_post_config=False)
        self.assertEqual(conf.b, 4)

        conf = Configuration("[A]\nb = 4\n", schema, load_post_config=False)
        self.assertFalse(hasattr(conf, "b"))


if __name__ == "__main__":
    unittest.main()
