#!/usr/bin/env python3

"""Compute the metric terms of a (possibly warped) brick of spectral elements and report their quality."""

import argparse
import cProfile
import logging
import os.path
import sys
import traceback
from typing import List, Optional

import numpy

from .common import Configuration, load_default_schema, readfile
from .device import make_device
from .geometry import ElementMetric, brick_vertices, gcl_residual, normal_norm_error, reference_grids, warp_coordinates


def run(config: Configuration) -> ElementMetric:
    """Build the grid described by the configuration and compute its metric terms."""
    device = make_device(config.desired_device)

    grids = reference_grids(config.num_solpts, config.node_type, device)
    e2c = brick_vertices(config.num_elements, config.domain_min, config.domain_max, device)

    metric = ElementMetric(grids, e2c.shape[-1], device)
    logging.info(
        f"Grid: {metric.dim}D, {metric.nelem} elements of {metric.num_points} {config.node_type} points, "
        f"metric degree {config.n_metric}"
    )

    metric.create_grid(e2c)
    warp_coordinates(metric.coords, config.domain_min, config.domain_max, config.warp_amplitude, device)
    metric.build_metric(config.n_metric, config.num_workers)
    device.synchronize()

    report(metric)

    return metric


def report(metric: ElementMetric) -> None:
    """Log the range of the Jacobian and how well the metric terms satisfy their identities."""
    xp = metric.device.xp
    gcl = gcl_residual(metric.J, metric.dxi_dx, metric.diffs, metric.device)
    J_min, J_max = float(metric.device.to_host(xp.min(metric.J))), float(metric.device.to_host(xp.max(metric.J)))

    logging.info(f"Jacobian range: [{J_min:.6e}, {J_max:.6e}]")
    logging.info(f"Max GCL residual: {float(xp.max(xp.abs(gcl))):.3e}")
    logging.info(f"Max normal length error: {normal_norm_error(metric.normals, metric.device):.3e}")

    if J_min <= 0.0 <= J_max:
        logging.warning("The Jacobian changes sign or vanishes, some elements are degenerate or inverted")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compute metric terms of curvilinear spectral elements")
    parser.add_argument("config", type=str, help="File that contains the grid and metric parameters")
    parser.add_argument("--profile", action="store_true", help="Produce an execution profile when running")
    parser.add_argument(
        "--numpy-warn-as-except", action="store_true", help="Raise an exception if there is a numpy warning"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        if not os.path.exists(args.config):
            raise ValueError(f"Config file does not seem valid: {args.config}")

        pr = None
        if args.profile:
            pr = cProfile.Profile()
            pr.enable()

        numpy.set_printoptions(suppress=True, linewidth=256)
        if args.numpy_warn_as_except:
            numpy.seterr(all="raise")

        config = Configuration(readfile(args.config), load_default_schema())
        if config.verbose:
            logging.info(f"{config}")

        run(config)

        if pr is not None:
            pr.disable()
            pr.dump_stats("prof_metrics.out")

    except Exception:
        sys.stdout.flush()
        traceback.print_exc()
        logging.error("There was an error while computing the metric terms.")
        return -1

    return 0


if __name__ == "__main__":
    sys.exit(main())
