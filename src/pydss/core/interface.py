# Copyright 2024-2025 pydss authors. All rights reserved.

"""Session interface to the sparse direct solver engine.

Every operation takes the session as first argument, accepts ``None`` in its
place and reports through an integer status code:

- ``0`` success,
- ``> 0`` engine warning, passed through unchanged,
- ``< 0`` engine error, passed through unchanged, or one of the codes in
  :mod:`pydss.core.constants` (null session, allocation failure, version
  mismatch, call out of sequence, wrong dimensions).

Nothing is raised to the caller. The triplet indices given to
:func:`solver_factorize` are 0-based; the engine receives them 1-based.
"""

import logging

from pydss import ArrayLike, NDArray, xp
from pydss.core.buffers import BufferAllocator, allocate_triplet_buffers
from pydss.core.constants import (
    DIMENSION_ERROR,
    ENGINE_VERSION,
    MALLOC_ERROR,
    NULL_POINTER_ERROR,
    STATE_ERROR,
    SUCCESSFUL_EXIT,
    VERSION_ERROR,
)
from pydss.core.controls import encode_controls, set_parallelism
from pydss.core.driver import local_error, run_job
from pydss.core.engine import Engine, Job
from pydss.core.session import Session

logger = logging.getLogger(__name__)


def solver_new(
    engine: Engine = None,
    allocator: BufferAllocator = None,
) -> Session | None:
    """Allocate a fresh session, or return ``None`` if memory is exhausted.

    Without an explicit engine the host engine based on SuperLU is used.
    """
    if engine is None:
        from pydss.engines import ScipyEngine

        engine = ScipyEngine()

    try:
        return Session(
            engine=engine,
            allocator=allocator if allocator is not None else BufferAllocator(),
        )
    except MemoryError:
        return None


def solver_drop(session: Session | None) -> None:
    """Release the triplet buffers and discharge a pending terminate job."""
    if session is None:
        return

    session.release_buffers()

    if session.initialized:
        run_job(session, Job.TERMINATE, verbose=False)
        session.initialized = False
        logger.debug("Engine session terminated.")


def solver_initialize(
    session: Session | None,
    n: int,
    nnz: int,
    symmetry: int,
    ordering: int,
    scaling: int,
    pct_inc_workspace: int,
    max_work_memory: int,
    openmp_num_threads: int,
    compute_determinant: bool,
) -> int:
    """Run the initialize job, allocate the triplet buffers and set controls.

    ``symmetry`` is the engine code: 0 unsymmetric, 1 positive-definite,
    2 general symmetric. If ``compute_determinant`` is set, scaling is
    disabled whatever ``scaling`` says.
    """
    if session is None:
        return NULL_POINTER_ERROR

    if session.initialized:
        return STATE_ERROR

    if n < 0 or nnz < 0:
        return DIMENSION_ERROR

    state = session.engine_state
    set_parallelism(state, int(symmetry))

    status = run_job(session, Job.INITIALIZE, verbose=False)
    if status != 0:
        return status
    session.initialized = True

    if state.version_number != ENGINE_VERSION:
        logger.error(
            "Engine library version = %s != interface version = %s",
            state.version_number,
            ENGINE_VERSION,
        )
        return VERSION_ERROR

    try:
        row_idx, col_idx, values = allocate_triplet_buffers(session.allocator, nnz)
    except MemoryError:
        logger.error("Cannot allocate triplet buffers for nnz = %d", nnz)
        return MALLOC_ERROR

    session.row_idx, session.col_idx, session.values = row_idx, col_idx, values
    state.irn, state.jcn, state.a = row_idx, col_idx, values

    state.n = int(n)
    state.nz = int(nnz)

    encode_controls(
        state,
        ordering=int(ordering),
        scaling=int(scaling),
        pct_inc_workspace=int(pct_inc_workspace),
        max_work_memory=int(max_work_memory),
        openmp_num_threads=int(openmp_num_threads),
        compute_determinant=bool(compute_determinant),
    )

    logger.debug("Engine session initialized with n = %d, nnz = %d.", n, nnz)

    return SUCCESSFUL_EXIT


def solver_factorize(
    session: Session | None,
    indices_i: ArrayLike,
    indices_j: ArrayLike,
    values_aij: ArrayLike,
    verbose: bool = False,
) -> int:
    """Copy the triplets, then run the analyze and factorize jobs.

    The analysis is repeated on every call because the structure of the
    triplets may have changed since the previous factorization.
    """
    if session is None:
        return NULL_POINTER_ERROR

    if not session.initialized or session.values is None:
        return STATE_ERROR

    state = session.engine_state

    indices_i = xp.asarray(indices_i)
    indices_j = xp.asarray(indices_j)
    values_aij = xp.asarray(values_aij)
    if not (indices_i.shape == indices_j.shape == values_aij.shape == (state.nz,)):
        return DIMENSION_ERROR

    session.row_idx[:] = indices_i
    session.col_idx[:] = indices_j
    session.row_idx += 1
    session.col_idx += 1
    session.values[:] = values_aij

    # stale values must not survive a failed factorization
    session.det_mantissa = 0.0
    session.det_exponent = 0.0

    status = run_job(session, Job.ANALYZE, verbose=verbose)
    if local_error(session):
        return status

    status = run_job(session, Job.FACTORIZE, verbose=verbose)

    if state.icntl(33) == 1:
        session.det_mantissa = state.rinfog(12)
        session.det_exponent = float(state.infog(34))

    return status


def solver_solve(
    session: Session | None,
    rhs: NDArray,
    verbose: bool = False,
) -> int:
    """Run the solve job; ``rhs`` (length n) is overwritten by the solution."""
    if session is None:
        return NULL_POINTER_ERROR

    if not session.initialized:
        return STATE_ERROR

    state = session.engine_state
    state.rhs = rhs
    try:
        status = run_job(session, Job.SOLVE, verbose=verbose)
    finally:
        state.rhs = None

    return status


def solver_get_ordering(session: Session | None) -> int:
    """Ordering effectively used by the engine, ``INFOG(7)``."""
    if session is None:
        return 0
    return session.engine_state.infog(7)


def solver_get_scaling(session: Session | None) -> int:
    """Scaling effectively used by the engine, ``INFOG(33)``."""
    if session is None:
        return 0
    return session.engine_state.infog(33)


def solver_get_det_coef_a(session: Session | None) -> float:
    if session is None:
        return 0.0
    return session.det_mantissa


def solver_get_det_exp_c(session: Session | None) -> float:
    # Integral value, kept as float: det = a * 2^c
    if session is None:
        return 0.0
    return session.det_exponent
