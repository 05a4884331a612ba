# Copyright 2024-2025 pydss authors. All rights reserved.

import math
import time

from scipy.sparse import coo_matrix, csc_matrix, diags
from scipy.sparse.linalg import splu

from pydss import NDArray, xp
from pydss.core.constants import ENGINE_VERSION, STDOUT_STREAM
from pydss.core.controls import Ordering, Scaling
from pydss.core.engine import Engine, EngineState, Job
from pydss.utils import print_msg

# Engine status codes
_SUCCESS = 0
_WARNING_INDEX_OUT_OF_RANGE = 1
_ERROR_NZ_OUT_OF_RANGE = -2
_ERROR_INVALID_JOB = -3
_ERROR_SINGULAR = -10
_ERROR_N_OUT_OF_RANGE = -16
_ERROR_BAD_ARRAY = -22
_ERROR_NOT_POSITIVE_DEFINITE = -40

# Number of equilibration sweeps for the iterative scalings
_RUIZ_SWEEPS = {Scaling.ROW_COL_ITER: 5, Scaling.ROW_COL_RIG: 20}


class ScipyEngine(Engine):
    """Host engine running the job protocol on top of SuperLU.

    Every ordering request is served by a minimum degree ordering on the
    pattern of ``A^T + A`` and reported as AMD. For ``sym != 0`` an entry
    ``(i, j)`` stands for both ``(i, j)`` and ``(j, i)``; repeated entries are
    summed.
    """

    def __init__(self) -> None:
        self._initialized: bool = False
        self._reset()

    def _reset(self) -> None:
        self._sym: int = 0
        self._rows: NDArray = None
        self._cols: NDArray = None
        self._kept: NDArray = None
        self._lu = None
        self._row_scale: NDArray = None
        self._col_scale: NDArray = None

    def run(self, state: EngineState) -> None:
        try:
            job = Job(state.job)
        except ValueError:
            state.set_status(_ERROR_INVALID_JOB, state.job)
            return

        if job != Job.INITIALIZE and not self._initialized:
            state.set_status(_ERROR_INVALID_JOB, int(job))
            return

        state.set_status(_SUCCESS)

        handlers = {
            Job.INITIALIZE: self._initialize,
            Job.ANALYZE: self._analyze,
            Job.FACTORIZE: self._factorize,
            Job.SOLVE: self._solve,
            Job.TERMINATE: self._terminate,
        }

        tic = time.perf_counter()
        handlers[job](state)
        toc = time.perf_counter() - tic

        if state.infog(1) < 0:
            self._print_error(state, job)
        else:
            self._print_statistics(state, job, toc)

    # --- Jobs -----------------------------------------------------------------
    def _initialize(self, state: EngineState) -> None:
        self._reset()
        self._initialized = True

        # Any other value of SYM is treated as unsymmetric.
        self._sym = state.sym if state.sym in (0, 1, 2) else 0

        state.info_[:] = 0
        state.infog_[:] = 0
        state.rinfog_[:] = 0.0

        state.icntl_[:] = 0
        state.set_icntl(1, STDOUT_STREAM)
        state.set_icntl(3, STDOUT_STREAM)
        state.set_icntl(4, 2)
        state.set_icntl(6, 7)
        state.set_icntl(7, Ordering.AUTO)
        state.set_icntl(8, Scaling.AUTO)
        state.set_icntl(14, 20)

        state.version_number = ENGINE_VERSION

    def _analyze(self, state: EngineState) -> None:
        n, nz = state.n, state.nz

        if n < 1:
            state.set_status(_ERROR_N_OUT_OF_RANGE, n)
            return

        if nz < 0 or (nz > 0 and (state.irn is None or state.jcn is None)):
            state.set_status(_ERROR_NZ_OUT_OF_RANGE, nz)
            return

        if nz == 0:
            rows = cols = xp.zeros(0, dtype=xp.int64)
        else:
            rows = xp.asarray(state.irn[:nz], dtype=xp.int64) - 1
            cols = xp.asarray(state.jcn[:nz], dtype=xp.int64) - 1

        kept = (rows >= 0) & (rows < n) & (cols >= 0) & (cols < n)
        n_ignored = int(nz - xp.count_nonzero(kept))

        if self._sym != 0:
            rows, cols = xp.maximum(rows, cols), xp.minimum(rows, cols)

        self._rows = rows[kept]
        self._cols = cols[kept]
        self._kept = kept
        self._lu = None

        state.set_infog(7, Ordering.AMD)
        state.set_infog(33, self._effective_scaling(state.icntl(8)))

        if n_ignored > 0:
            state.set_status(_WARNING_INDEX_OUT_OF_RANGE, n_ignored)

    def _factorize(self, state: EngineState) -> None:
        if self._kept is None:
            state.set_status(_ERROR_INVALID_JOB, int(Job.FACTORIZE))
            return

        n = state.n
        if state.nz > 0 and state.a is None:
            state.set_status(_ERROR_BAD_ARRAY)
            return

        values = xp.zeros(0, dtype=xp.float64)
        if state.nz > 0:
            values = xp.asarray(state.a[: state.nz], dtype=xp.float64)[self._kept]
        A = coo_matrix((values, (self._rows, self._cols)), shape=(n, n)).tocsc()
        if self._sym != 0:
            A = (A + A.T - diags(A.diagonal())).tocsc()

        row_scale, col_scale = _scaling_vectors(A, state.infog(33))
        S = csc_matrix(diags(row_scale) @ A @ diags(col_scale))

        options = {}
        if self._sym == 1:
            options = dict(diag_pivot_thresh=0, options={"SymmetricMode": True})

        try:
            lu = splu(S, permc_spec="MMD_AT_PLUS_A", **options)
        except RuntimeError:
            self._lu = None
            state.set_status(_ERROR_SINGULAR)
            return

        pivots = lu.U.diagonal()
        if not xp.all(xp.isfinite(pivots)) or xp.any(pivots == 0.0):
            self._lu = None
            state.set_status(_ERROR_SINGULAR)
            return

        if self._sym == 1 and xp.any(pivots < 0.0):
            self._lu = None
            state.set_status(_ERROR_NOT_POSITIVE_DEFINITE)
            return

        self._lu = lu
        self._row_scale = row_scale
        self._col_scale = col_scale

        if state.icntl(33) == 1:
            mantissa, exponent = _determinant(lu, row_scale, col_scale)
            state.set_rinfog(12, mantissa)
            state.set_rinfog(13, 0.0)
            state.set_infog(34, exponent)

    def _solve(self, state: EngineState) -> None:
        if self._lu is None:
            state.set_status(_ERROR_INVALID_JOB, int(Job.SOLVE))
            return

        rhs = state.rhs
        if rhs is None or xp.shape(rhs) != (state.n,):
            state.set_status(_ERROR_BAD_ARRAY)
            return

        y = self._lu.solve(self._row_scale * xp.asarray(rhs, dtype=xp.float64))
        rhs[:] = self._col_scale * y

    def _terminate(self, state: EngineState) -> None:
        self._reset()
        self._initialized = False

    # --- Helpers --------------------------------------------------------------
    def _effective_scaling(self, requested: int) -> int:
        if requested == Scaling.AUTO:
            return Scaling.DIAGONAL if self._sym != 0 else Scaling.ROW_COL_ITER
        if requested in (
            Scaling.DIAGONAL,
            Scaling.COLUMN,
            Scaling.ROW_COL,
            Scaling.ROW_COL_ITER,
            Scaling.ROW_COL_RIG,
        ):
            return requested
        return Scaling.NO

    def _print_statistics(self, state: EngineState, job: Job, elapsed: float) -> None:
        if state.icntl(3) != STDOUT_STREAM or state.icntl(4) < 2:
            return

        if job == Job.ANALYZE:
            print_msg(
                f"ENGINE analysis: n = {state.n}, nz = {state.nz}, "
                f"ordering = {state.infog(7)}, scaling = {state.infog(33)}, "
                f"time = {elapsed:.3e} s",
                flush=True,
            )
        elif job == Job.FACTORIZE:
            print_msg(
                f"ENGINE factorization: nnz(L+U) = {self._lu.nnz}, "
                f"time = {elapsed:.3e} s",
                flush=True,
            )
        elif job == Job.SOLVE:
            print_msg(f"ENGINE solution: time = {elapsed:.3e} s", flush=True)

    def _print_error(self, state: EngineState, job: Job) -> None:
        if state.icntl(1) != STDOUT_STREAM or state.icntl(4) < 1:
            return
        print_msg(
            f"ENGINE error in job {job.name}: INFO(1) = {state.info(1)}, "
            f"INFO(2) = {state.info(2)}",
            flush=True,
        )


def _abs_max(A: csc_matrix, axis: int) -> NDArray:
    m = xp.asarray(abs(A).max(axis=axis).todense(), dtype=xp.float64).ravel()
    m[m == 0.0] = 1.0
    return m


def _scaling_vectors(A: csc_matrix, scaling: int) -> tuple[NDArray, NDArray]:
    """Row and column scaling factors such that ``diag(r) A diag(c)`` is
    better balanced than ``A``."""
    n = A.shape[0]
    row_scale = xp.ones(n, dtype=xp.float64)
    col_scale = xp.ones(n, dtype=xp.float64)

    if scaling == Scaling.DIAGONAL:
        d = xp.abs(A.diagonal())
        d[d == 0.0] = 1.0
        row_scale = 1.0 / xp.sqrt(d)
        col_scale = row_scale.copy()

    elif scaling == Scaling.COLUMN:
        col_scale = 1.0 / _abs_max(A, axis=0)

    elif scaling == Scaling.ROW_COL:
        row_scale = 1.0 / _abs_max(A, axis=1)
        col_scale = 1.0 / _abs_max(diags(row_scale) @ A, axis=0)

    elif scaling in _RUIZ_SWEEPS:
        for _ in range(_RUIZ_SWEEPS[scaling]):
            S = diags(row_scale) @ A @ diags(col_scale)
            row_scale = row_scale / xp.sqrt(_abs_max(S, axis=1))
            col_scale = col_scale / xp.sqrt(_abs_max(S, axis=0))

    return row_scale, col_scale


def _permutation_sign(perm: NDArray) -> int:
    visited = xp.zeros(perm.size, dtype=bool)
    n_cycles = 0
    for start in range(perm.size):
        if visited[start]:
            continue
        n_cycles += 1
        k = start
        while not visited[k]:
            visited[k] = True
            k = perm[k]
    return -1 if (perm.size - n_cycles) % 2 else 1


def _determinant(lu, row_scale: NDArray, col_scale: NDArray) -> tuple[float, int]:
    """Return ``(mantissa, exponent)`` with ``det(A) = mantissa * 2**exponent``.

    ``lu`` factorizes ``diag(r) A diag(c)``; the scaling is divided out.
    """
    factors = xp.concatenate(
        (lu.U.diagonal(), 1.0 / row_scale, 1.0 / col_scale)
    )
    m, e = xp.frexp(factors)

    mantissa = float(_permutation_sign(lu.perm_r) * _permutation_sign(lu.perm_c))
    exponent = int(e.sum())

    # |m| >= 0.5, so chunks of 256 cannot underflow
    for start in range(0, m.size, 256):
        mantissa, shift = math.frexp(mantissa * float(xp.prod(m[start : start + 256])))
        exponent += shift

    return mantissa, exponent
