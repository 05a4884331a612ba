# Copyright 2024-2025 pydss authors. All rights reserved.

import argparse
import time

from pydss import xp
from pydss.configs.solver_config import SolverConfig
from pydss.core.controls import Symmetry
from pydss.core.stats import StatsLinSol, VerifyLinSys
from pydss.core.triplet import SparseTriplet
from pydss.solvers import MumpsSolver
from pydss.utils import print_msg


def parse_args():
    parser = argparse.ArgumentParser(description="2D Poisson problem example")
    parser.add_argument(
        "--nx",
        type=int,
        default=50,
        help="Number of interior grid points per direction.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print the engine messages.",
    )
    parser.add_argument(
        "--json",
        type=str,
        default=None,
        help="Write the statistics to this file.",
    )
    return parser.parse_args()


def laplacian_2d(nx: int) -> SparseTriplet:
    """Lower triangle of the 5-point finite difference Laplacian on the unit square."""
    n = nx * nx
    h2 = 1.0 / (nx + 1) ** 2
    trip = SparseTriplet(n, n, 3 * n, Symmetry.POS_DEF_TRIANGULAR)

    for j in range(nx):
        for i in range(nx):
            k = i + j * nx
            trip.put(k, k, 4.0 / h2)
            if i > 0:
                trip.put(k, k - 1, -1.0 / h2)
            if j > 0:
                trip.put(k, k - nx, -1.0 / h2)

    return trip


if __name__ == "__main__":
    args = parse_args()

    stats = StatsLinSol()
    stats.set_matrix_name_from_path(f"poisson_2d_{args.nx}x{args.nx}")

    tic = time.perf_counter_ns()
    A = laplacian_2d(args.nx)
    stats.time_nanoseconds.read_matrix = time.perf_counter_ns() - tic

    # u = sin(pi x) sin(pi y) => -lap(u) = 2 pi^2 u
    x = xp.linspace(0.0, 1.0, args.nx + 2)[1:-1]
    X, Y = xp.meshgrid(x, x)
    u_ref = (xp.sin(xp.pi * X) * xp.sin(xp.pi * Y)).ravel()
    rhs = 2.0 * xp.pi**2 * u_ref

    config = SolverConfig(
        symmetry="pos_def_triangular",
        compute_determinant=True,
        verbose=args.verbose,
    )
    with MumpsSolver(config) as solver:
        solver.factorize(A)
        u = solver.solve(rhs)
        print_msg(f"log|det(A)| = {solver.logdet():.6e}")

        tic = time.perf_counter_ns()
        stats.verify = VerifyLinSys.new(A, u, rhs)
        stats.time_nanoseconds.verify = time.perf_counter_ns() - tic

        solver.update_stats(stats)

    print_msg(f"max |u - u_ref| = {xp.max(xp.abs(u - u_ref)):.3e}")
    print_msg(stats)

    if args.json is not None:
        with open(args.json, "w") as f:
            f.write(stats.get_json())
