#!/usr/bin/env python3

import argparse
import os
import re
import sys
from typing import Optional
import unittest

main_project_dir = os.path.join(os.path.dirname(os.path.realpath(__file__)), "../..")
sys.path.append(main_project_dir)

from tests.unit.common.test_configuration import ConfigurationTestCases
from tests.unit.common.test_element_parallel import ElementParallelTestCases
from tests.unit.device.test_device import DeviceTestCases
from tests.unit.geometry.test_quadrature import QuadratureTestCases
from tests.unit.geometry.test_cutoff_filter import CutoffFilterTestCases
from tests.unit.geometry.test_grid_blend import GridBlendTestCases
from tests.unit.geometry.test_metric_1d import Metric1DTestCases
from tests.unit.geometry.test_metric_2d import Metric2DTestCases
from tests.unit.geometry.test_metric_3d import Metric3DTestCases
from tests.unit.geometry.test_element_metric import BrickTestCases, ElementMetricTestCases
from tests.unit.test_main_metrics import MainMetricsTestCases


def add_test(suite: unittest.TestSuite, test: unittest.TestCase, test_re: Optional[re.Pattern]):
    if test_re is None or test_re.search(str(test)) is not None:
        suite.addTest(test)


def add_test_case(suite: unittest.TestSuite, case: type, test_re: Optional[re.Pattern]):
    for name in unittest.TestLoader().getTestCaseNames(case):
        add_test(suite, case(name), test_re)


def load_tests(test_name):
    """Create a test suite with cases we want to run."""

    test_re = re.compile(test_name, re.IGNORECASE)
    suite = unittest.TestSuite()

    add_test_case(suite, ConfigurationTestCases, test_re)
    add_test_case(suite, ElementParallelTestCases, test_re)
    add_test_case(suite, DeviceTestCases, test_re)

    add_test_case(suite, QuadratureTestCases, test_re)
    add_test_case(suite, CutoffFilterTestCases, test_re)
    add_test_case(suite, GridBlendTestCases, test_re)

    add_test_case(suite, Metric1DTestCases, test_re)
    add_test_case(suite, Metric2DTestCases, test_re)
    add_test_case(suite, Metric3DTestCases, test_re)

    add_test_case(suite, BrickTestCases, test_re)
    add_test_case(suite, ElementMetricTestCases, test_re)
    add_test_case(suite, MainMetricsTestCases, test_re)

    return suite


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the sem_metrics unit tests")
    parser.add_argument(
        "test_name",
        nargs="?",
        default="",
        type=str,
        help="Will only run tests whose name or type matches this regular expression.",
    )
    args = parser.parse_args()

    runner = unittest.TextTestRunner(buffer=True, verbosity=1)
    result = runner.run(load_tests(args.test_name))
    if not result.wasSuccessful():
        failed_tests = "\n  ".join([f"{r[0]}" for r in result.errors + result.unexpectedSuccesses + result.failures])
        print(f"failed tests: \n  {failed_tests}")
        raise SystemExit(-1)
