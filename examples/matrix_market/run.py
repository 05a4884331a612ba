# Copyright 2024-2025 pydss authors. All rights reserved.

import argparse
import time

from scipy.io import mmread
from scipy.sparse import tril

from pydss import xp
from pydss.configs.solver_config import parse_config
from pydss.core.stats import StatsLinSol, VerifyLinSys
from pydss.solvers import MumpsSolver
from pydss.utils import print_msg


def parse_args():
    parser = argparse.ArgumentParser(description="Solve A x = 1 for a MatrixMarket file")
    parser.add_argument("matrix", type=str, help="Path to the .mtx file.")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="TOML file with the solver configuration.",
    )
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    config = parse_config(args.config if args.config is not None else {})

    stats = StatsLinSol()
    stats.set_matrix_name_from_path(args.matrix)

    tic = time.perf_counter_ns()
    A = mmread(args.matrix).tocsr()
    stats.time_nanoseconds.read_matrix = time.perf_counter_ns() - tic

    rhs = xp.ones(A.shape[0])
    with MumpsSolver(config) as solver:
        # mmread expands symmetric files to both triangles
        solver.factorize(tril(A) if config.get_symmetry().triangular else A)
        x = solver.solve(rhs)

        stats.verify = VerifyLinSys.new(A, x, rhs)

        solver.update_stats(stats)

    print_msg(stats.get_json())
