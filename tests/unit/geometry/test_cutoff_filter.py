import unittest

import numpy
import numpy.polynomial.legendre as leg

from sem_metrics.geometry import (
    DimensionMismatchError,
    apply_cutoff,
    cutoff_matrices,
    cutoff_matrix,
    gauss_legendre,
    gauss_lobatto,
    resolve_n_metric,
)


class CutoffFilterTestCases(unittest.TestCase):
    def test_no_truncation_gives_identity(self):
        for N in range(7):
            numpy.testing.assert_array_equal(cutoff_matrix(N, N), numpy.identity(N + 1))
            numpy.testing.assert_array_equal(cutoff_matrix(N, N + 3), numpy.identity(N + 1))

    def test_filter_is_a_projection(self):
        for N in range(1, 9):
            for N_max in range(N):
                F = cutoff_matrix(N, N_max)
                self.assertEqual(F.shape, (N + 1, N + 1))
                numpy.testing.assert_allclose(F @ F, F, atol=1e-12)

    def test_keeps_low_modes_and_removes_high_modes(self):
        N, N_max = 6, 3
        _, points, _ = gauss_lobatto(N + 1)
        F = cutoff_matrix(N, N_max)

        for degree in range(N + 1):
            mode = leg.Legendre.basis(degree)(points)
            expected = mode if degree <= N_max else numpy.zeros_like(mode)
            numpy.testing.assert_allclose(F @ mode, expected, atol=1e-12, err_msg=f"degree {degree}")

    def test_filter_on_given_points(self):
        N, N_max = 4, 1
        _, points, _ = gauss_legendre(N + 1)
        F = cutoff_matrix(N, N_max, points=points)

        line = 2.0 * points - 0.5
        numpy.testing.assert_allclose(F @ (line + leg.Legendre.basis(3)(points)), line, atol=1e-12)

        with self.assertRaises(DimensionMismatchError):
            cutoff_matrix(N, N_max, points=points[:-1])

    def test_single_point_filter(self):
        numpy.testing.assert_array_equal(cutoff_matrix(0, 0), numpy.ones((1, 1)))
        numpy.testing.assert_array_equal(cutoff_matrix(0, 0, points=numpy.array([0.3])), numpy.ones((1, 1)))

        # The number of points is checked even when nothing is truncated
        with self.assertRaises(DimensionMismatchError):
            cutoff_matrix(3, 3, points=numpy.array([-1.0, 1.0]))

    def test_filters_on_grid_nodes(self):
        num_points = (5, 4)
        points = [gauss_legendre(n)[1] for n in num_points]
        filters = cutoff_matrices((1, 3), num_points, points)
        self.assertIsNone(filters[1])

        # Linear fields stay untouched on the grid they are filtered on
        X1, X2 = numpy.meshgrid(*points, indexing="ij")
        field = (0.5 + 2.0 * X1 - X2**3)[..., numpy.newaxis]
        expected = field.copy()
        apply_cutoff([field], filters)
        numpy.testing.assert_allclose(field, expected, atol=1e-12)

        # The same filter built on the default (Lobatto) nodes is not a projection of these values
        lobatto = cutoff_matrix(4, 1)
        self.assertGreater(numpy.max(numpy.abs(lobatto @ points[0] - points[0])), 1e-3)

        with self.assertRaises(DimensionMismatchError):
            cutoff_matrices((1, 3), num_points, points[:1])

    def test_negative_degree_is_rejected(self):
        with self.assertRaises(ValueError):
            cutoff_matrix(3, -1)

    def test_resolve_metric_degree(self):
        self.assertEqual(resolve_n_metric(None, (3, 5)), (2, 4))
        self.assertEqual(resolve_n_metric([1, 2], (3, 5)), (1, 2))

        with self.assertLogs(level="WARNING") as logs:
            self.assertEqual(resolve_n_metric([7, 2], (3, 5)), (2, 2))
        self.assertIn("direction 1", logs.output[0])

        with self.assertRaises(ValueError):
            resolve_n_metric([-1, 2], (3, 5))
        with self.assertRaises(DimensionMismatchError):
            resolve_n_metric([1, 2, 3], (3, 5))

    def test_apply_along_every_direction(self):
        num_points = (4, 5, 3)
        filters = cutoff_matrices((1, 4, 1), num_points)
        self.assertIsNone(filters[1])

        # Field that is linear in every direction plus a quadratic term in the first one
        x = [gauss_lobatto(n)[1] for n in num_points]
        X1, X2, X3 = numpy.meshgrid(*x, indexing="ij")
        linear = 1.0 + X1 - 2.0 * X2 * X3 + X1 * X2**4
        field = numpy.stack([linear + X1**2, linear + X3**2], axis=-1)

        apply_cutoff([field], filters)

        numpy.testing.assert_allclose(field[..., 0], linear + 1.0 / 3.0, atol=1e-12)
        numpy.testing.assert_allclose(field[..., 1], linear + 1.0 / 3.0, atol=1e-12)


if __name__ == "__main__":
    unittest.main()
