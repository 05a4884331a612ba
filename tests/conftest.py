# Copyright 2024-2025 pydss authors. All rights reserved.

from os import environ

import numpy as np
import pytest

from pydss.core.buffers import BufferAllocator
from pydss.core.constants import ENGINE_VERSION
from pydss.core.engine import Engine, EngineState, Job

environ["OMP_NUM_THREADS"] = "1"


class MockEngine(Engine):
    """Engine double which records every job and the data it was given.

    Factorization keeps the diagonal of the assembled matrix and the solve
    job divides the right-hand side by it.
    """

    def __init__(
        self,
        version: str = ENGINE_VERSION,
        init_status: int = 0,
        analyze_status: int = 0,
        factorize_status: int = 0,
        solve_status: int = 0,
        det_mantissa: float = 0.5,
        det_exponent: int = 7,
        effective_ordering: int = 5,
        effective_scaling: int = 0,
    ) -> None:
        self.version = version
        self.init_status = init_status
        self.analyze_status = analyze_status
        self.factorize_status = factorize_status
        self.solve_status = solve_status
        self.det_mantissa = det_mantissa
        self.det_exponent = det_exponent
        self.effective_ordering = effective_ordering
        self.effective_scaling = effective_scaling

        self.jobs: list[Job] = []
        self.seen: list[tuple[Job, np.ndarray, np.ndarray, np.ndarray]] = []
        self.icntl_at_factorize: np.ndarray = None
        self.diag: np.ndarray = None

    def count(self, job: Job) -> int:
        return self.jobs.count(job)

    def run(self, state: EngineState) -> None:
        job = Job(state.job)
        self.jobs.append(job)
        state.set_status(0)

        if job == Job.INITIALIZE:
            if self.init_status != 0:
                state.set_status(self.init_status)
                return
            state.version_number = self.version

        elif job == Job.ANALYZE:
            self.seen.append(
                (job, state.irn.copy(), state.jcn.copy(), state.a.copy())
            )
            if self.analyze_status != 0:
                state.set_status(self.analyze_status)
                return
            state.set_infog(7, self.effective_ordering)
            state.set_infog(33, self.effective_scaling)

        elif job == Job.FACTORIZE:
            self.seen.append(
                (job, state.irn.copy(), state.jcn.copy(), state.a.copy())
            )
            self.icntl_at_factorize = state.icntl_.copy()
            self.diag = np.zeros(state.n)
            for i, j, v in zip(state.irn, state.jcn, state.a):
                if i == j:
                    self.diag[i - 1] += v
            state.set_rinfog(12, self.det_mantissa)
            state.set_infog(34, self.det_exponent)
            if self.factorize_status != 0:
                state.set_status(self.factorize_status)

        elif job == Job.SOLVE:
            state.rhs[:] = state.rhs / self.diag
            if self.solve_status != 0:
                state.set_status(self.solve_status)


class FailingAllocator(BufferAllocator):
    """Allocator whose ``fail_at``-th allocation raises ``MemoryError``."""

    def __init__(self, fail_at: int) -> None:
        super().__init__()
        self.fail_at = fail_at
        self.n_calls = 0

    def _empty(self, size: int, dtype):
        self.n_calls += 1
        if self.n_calls == self.fail_at:
            raise MemoryError("out of memory")
        return super()._empty(size, dtype)


@pytest.fixture
def mock_engine():
    return MockEngine()


@pytest.fixture
def diagonal_system():
    """3x3 diagonal matrix as 0-based triplets, with its rhs and solution."""
    indices_i = np.array([0, 1, 2], dtype=np.int32)
    indices_j = np.array([0, 1, 2], dtype=np.int32)
    values_aij = np.array([2.0, 4.0, 8.0])
    rhs = np.array([2.0, 4.0, 8.0])
    x_ref = np.array([1.0, 1.0, 1.0])
    return indices_i, indices_j, values_aij, rhs, x_ref


@pytest.fixture
def unsymmetric_matrix():
    """5x5 unsymmetric, non-singular matrix (dense)."""
    return np.array(
        [
            [2.0, 3.0, 0.0, 0.0, 0.0],
            [3.0, 0.0, 4.0, 0.0, 6.0],
            [0.0, -1.0, -3.0, 2.0, 0.0],
            [0.0, 0.0, 1.0, 0.0, 0.0],
            [0.0, 4.0, 2.0, 0.0, 1.0],
        ]
    )


@pytest.fixture
def spd_matrix():
    """Random, symmetric positive definite, diagonally dominant matrix."""
    rng = np.random.default_rng(42)
    n = 8
    a = rng.random((n, n))
    a[a < 0.6] = 0.0
    a = (a + a.T) / 2
    for i in range(n):
        a[i, i] = 1.0 + np.sum(np.abs(a[i, :]))
    return a


@pytest.fixture
def make_engine():
    return MockEngine


@pytest.fixture
def make_allocator():
    return FailingAllocator
