# Copyright 2024-2025 pydss authors. All rights reserved.

import logging
import math
import time
from warnings import warn

from scipy.sparse import coo_matrix

from pydss import ArrayLike, NDArray, xp
from pydss.configs.solver_config import SolverConfig
from pydss.core.controls import ordering_name, scaling_name
from pydss.core.driver import last_job
from pydss.core.engine import Engine, Job
from pydss.core.errors import SolverError, error_message
from pydss.core.interface import (
    solver_drop,
    solver_factorize,
    solver_get_det_coef_a,
    solver_get_det_exp_c,
    solver_get_ordering,
    solver_get_scaling,
    solver_initialize,
    solver_new,
    solver_solve,
)
from pydss.core.solver import Solver
from pydss.core.stats import StatsLinSol
from pydss.core.triplet import SparseTriplet

logger = logging.getLogger(__name__)


class MumpsSolver(Solver):
    """Sparse direct solver driving an engine session.

    The session is initialized by the first call to ``factorize``, using the
    dimension and number of non-zeros of that matrix; later matrices must
    keep both. With a full-storage symmetric configuration only the upper
    triangle of the given matrix is handed to the engine.

    Examples
    --------
    >>> with MumpsSolver(SolverConfig(symmetry="pos_def")) as solver:
    ...     solver.factorize(A)
    ...     x = solver.solve(b)
    """

    def __init__(
        self,
        config: SolverConfig = None,
        engine: Engine = None,
        **kwargs,
    ) -> None:
        """Initializes the solver."""
        super().__init__(config if config is not None else SolverConfig())

        self._closed = True  # Set early in case the session cannot be created
        self.session = solver_new(engine)
        if self.session is None:
            raise MemoryError("Cannot allocate the solver session")
        self._closed = False

        self.n: int = None
        self.nnz: int = None
        self.factorized: bool = False

        self.time_factorize_ns: int = 0
        self.time_solve_ns: int = 0

    def factorize(
        self,
        A: SparseTriplet | ArrayLike,
        verbose: bool = None,
        **kwargs,
    ) -> None:
        """Analyze and factorize ``A``.

        Parameters
        ----------
        A : SparseTriplet or scipy.sparse matrix
            Square matrix with 0-based indices.
        verbose : bool, optional
            Overrides ``config.verbose`` for this call.
        """
        self._check_open()
        verbose = self.config.verbose if verbose is None else verbose

        n, rows, cols, values = self._get_triples(A)
        if self.n is None:
            self._initialize(n, values.size)
        elif (n, values.size) != (self.n, self.nnz):
            raise ValueError(
                f"Matrix with n = {n}, nnz = {values.size} does not match the "
                f"session (n = {self.n}, nnz = {self.nnz})"
            )

        self.factorized = False

        tic = time.perf_counter_ns()
        status = solver_factorize(self.session, rows, cols, values, verbose)
        self.time_factorize_ns = time.perf_counter_ns() - tic

        # The sequence stops after an analysis that reported anything but success.
        if last_job(self.session) == Job.ANALYZE and status != 0:
            raise SolverError(status, "analyze")

        self._check_status(status, "factorize")
        self.factorized = True

    def solve(
        self,
        rhs: ArrayLike,
        verbose: bool = None,
        **kwargs,
    ) -> NDArray:
        """Solve ``A x = rhs`` with the current factors; ``rhs`` is not modified."""
        self._check_open()
        if not self.factorized:
            raise ValueError("Matrix not factorized")

        x = xp.array(rhs, dtype=xp.float64)
        if x.shape != (self.n,):
            raise ValueError(f"rhs must have shape ({self.n},), got {x.shape}")

        verbose = self.config.verbose if verbose is None else verbose

        tic = time.perf_counter_ns()
        status = solver_solve(self.session, x, verbose)
        self.time_solve_ns = time.perf_counter_ns() - tic

        self._check_status(status, "solve")

        return x

    def get_determinant(self) -> tuple[float, float, float]:
        """``(mantissa, base, exponent)`` with ``det = mantissa * base**exponent``.

        All zero unless ``config.compute_determinant`` is set.
        """
        if not self.config.compute_determinant:
            return 0.0, 0.0, 0.0

        return (
            solver_get_det_coef_a(self.session),
            2.0,
            solver_get_det_exp_c(self.session),
        )

    def logdet(self, **kwargs) -> float:
        """Compute log of the absolute determinant from the cached factors."""
        if not self.config.compute_determinant:
            raise ValueError("Determinant not requested, set compute_determinant")
        if not self.factorized:
            raise ValueError("Matrix not factorized")

        mantissa, base, exponent = self.get_determinant()
        if mantissa == 0.0:
            return -math.inf

        return math.log(abs(mantissa)) + exponent * math.log(base)

    def get_effective_ordering(self) -> str:
        return ordering_name(solver_get_ordering(self.session))

    def get_effective_scaling(self) -> str:
        return scaling_name(solver_get_scaling(self.session))

    def get_solver_memory(self) -> int:
        """Return the memory used by the triplet buffers in number of bytes"""
        if self.session is None:
            return 0
        return self.session.allocator.live_bytes

    def update_stats(self, stats: StatsLinSol) -> None:
        stats.main.solver = f"MUMPS ({type(self.session.engine).__name__})"

        stats.matrix.nrow = self.n or 0
        stats.matrix.ncol = self.n or 0
        stats.matrix.nnz = self.nnz or 0
        stats.matrix.symmetry = self.config.symmetry

        stats.requests.ordering = ordering_name(self.config.get_ordering())
        stats.requests.scaling = scaling_name(self.config.get_scaling())
        stats.requests.openmp_num_threads = self.config.openmp_num_threads

        stats.output.effective_ordering = self.get_effective_ordering()
        stats.output.effective_scaling = self.get_effective_scaling()

        mantissa, base, exponent = self.get_determinant()
        stats.determinant.mantissa = mantissa
        stats.determinant.base = base
        stats.determinant.exponent = exponent

        stats.time_nanoseconds.factorize = self.time_factorize_ns
        stats.time_nanoseconds.solve = self.time_solve_ns

    def close(self) -> None:
        """Terminate the engine session; further calls are rejected."""
        if not self._closed:
            solver_drop(self.session)
            self._closed = True
            self.factorized = False

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def __del__(self):
        if hasattr(self, "_closed"):
            self.close()

    def _initialize(self, n: int, nnz: int) -> None:
        status = solver_initialize(
            self.session,
            n=n,
            nnz=nnz,
            symmetry=self.config.get_symmetry().engine_code,
            ordering=self.config.get_ordering(),
            scaling=self.config.get_scaling(),
            pct_inc_workspace=self.config.pct_inc_workspace,
            max_work_memory=self.config.max_work_memory,
            openmp_num_threads=self.config.openmp_num_threads,
            compute_determinant=self.config.compute_determinant,
        )
        self._check_status(status, "initialize")

        self.n, self.nnz = n, nnz
        logger.info("Solver session initialized (n = %d, nnz = %d).", n, nnz)

    def _get_triples(self, A) -> tuple[int, NDArray, NDArray, NDArray]:
        if isinstance(A, SparseTriplet):
            if A.symmetry != self.config.get_symmetry():
                raise ValueError(
                    f"Triplet symmetry {A.symmetry.value!r} does not match the "
                    f"solver symmetry {self.config.symmetry!r}"
                )
            nrow, ncol = A.dims()
            rows, cols, values = A.get_triples()
        else:
            A = coo_matrix(A)
            nrow, ncol = A.shape
            rows, cols, values = A.row, A.col, A.data

        if nrow != ncol:
            raise ValueError(f"Matrix must be square, got shape ({nrow}, {ncol})")

        # The engine would skip such entries with a warning and stop after analysis.
        if rows.size > 0 and (
            rows.min() < 0 or cols.min() < 0 or rows.max() >= nrow or cols.max() >= nrow
        ):
            raise IndexError(f"Matrix indices must lie in [0, {nrow})")

        symmetry = self.config.get_symmetry()
        if symmetry.engine_code != 0 and not symmetry.triangular:
            upper = rows <= cols
            rows, cols, values = rows[upper], cols[upper], values[upper]

        return nrow, rows, cols, values

    def _check_status(self, status: int, phase: str) -> None:
        if status < 0:
            raise SolverError(status, phase)
        if status > 0:
            message = f"Warning during {phase} (code {status}): {error_message(status)}"
            logger.warning(message)
            warn(message)

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Solver has been closed")
