import unittest

import numpy
import scipy.linalg

from sem_metrics.device import CpuDevice, default_device, make_device
from sem_metrics.geometry import cutoff_matrix


class DeviceTestCases(unittest.TestCase):
    def test_cpu_modules(self):
        self.assertIsInstance(default_device, CpuDevice)
        self.assertIs(default_device.xp, numpy)
        # Linear algebra is reached through the scipy package, the same way on every device
        self.assertIs(default_device.xalg.linalg, scipy.linalg)
        self.assertTrue(hasattr(default_device.xalg.linalg, "solve_triangular"))
        self.assertTrue(hasattr(default_device.xp.linalg, "inv"))

    def test_filter_only_needs_array_module_inverse(self):
        class ArrayModuleOnly(CpuDevice):
            def __init__(self):
                super().__init__()
                self.xalg = None

        F = cutoff_matrix(4, 2, device=ArrayModuleOnly())
        numpy.testing.assert_allclose(F, cutoff_matrix(4, 2), atol=1e-14)

    def test_host_copies(self):
        a = numpy.arange(6.0).reshape(2, 3)
        on_device = default_device.array(a)
        numpy.testing.assert_array_equal(default_device.to_host(on_device), a)
        default_device.synchronize()

    def test_make_device(self):
        self.assertIs(make_device("cpu"), default_device)
        with self.assertRaises(ValueError):
            make_device("tpu")


if __name__ == "__main__":
    unittest.main()
