# Copyright 2024-2025 pydss authors. All rights reserved.

import numpy as np
import pytest

from pydss.core.controls import Ordering, Scaling
from pydss.core.engine import EngineState, Job
from pydss.engines import ScipyEngine


def to_engine_state(a, sym=0, lower=False):
    """Engine state holding the 1-based triplets of the dense array ``a``."""
    rows, cols = np.nonzero(np.tril(a) if lower else a)
    state = EngineState(
        sym=sym,
        n=a.shape[0],
        nz=rows.size,
        irn=(rows + 1).astype(np.int32),
        jcn=(cols + 1).astype(np.int32),
        a=a[rows, cols].astype(np.float64),
    )
    return state


def run(engine, state, job):
    state.job = int(job)
    engine.run(state)
    return state.infog(1)


def start(engine, state, scaling=Scaling.NO, det=False):
    """Initialize the engine, silence it and set the requested controls."""
    assert run(engine, state, Job.INITIALIZE) == 0
    for k in (1, 2, 3, 4):
        state.set_icntl(k, -1)
    state.set_icntl(8, scaling)
    state.set_icntl(33, 1 if det else 0)


@pytest.mark.parametrize("scaling", list(Scaling))
def test_solve_unsymmetric(unsymmetric_matrix, scaling):
    engine = ScipyEngine()
    state = to_engine_state(unsymmetric_matrix)
    start(engine, state, scaling=scaling)

    assert run(engine, state, Job.ANALYZE) == 0
    assert run(engine, state, Job.FACTORIZE) == 0

    x_ref = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    state.rhs = np.array([8.0, 45.0, -3.0, 3.0, 19.0])
    assert run(engine, state, Job.SOLVE) == 0
    assert np.allclose(state.rhs, x_ref)

    assert run(engine, state, Job.TERMINATE) == 0


@pytest.mark.parametrize("sym", [1, 2])
def test_solve_symmetric_lower_triangle(spd_matrix, sym):
    engine = ScipyEngine()
    state = to_engine_state(spd_matrix, sym=sym, lower=True)
    start(engine, state, scaling=Scaling.AUTO)

    assert run(engine, state, Job.ANALYZE) == 0
    assert run(engine, state, Job.FACTORIZE) == 0

    x_ref = np.arange(1.0, spd_matrix.shape[0] + 1.0)
    state.rhs = spd_matrix @ x_ref
    assert run(engine, state, Job.SOLVE) == 0
    assert np.allclose(state.rhs, x_ref)


def test_symmetric_entries_from_either_triangle(spd_matrix):
    engine = ScipyEngine()
    lower = to_engine_state(spd_matrix, sym=2, lower=True)
    # the same triangle, given with swapped indices
    state = EngineState(
        sym=2,
        n=lower.n,
        nz=lower.nz,
        irn=lower.jcn.copy(),
        jcn=lower.irn.copy(),
        a=lower.a.copy(),
    )
    start(engine, state)

    assert run(engine, state, Job.ANALYZE) == 0
    assert run(engine, state, Job.FACTORIZE) == 0

    state.rhs = spd_matrix @ np.ones(lower.n)
    assert run(engine, state, Job.SOLVE) == 0
    assert np.allclose(state.rhs, np.ones(lower.n))


@pytest.mark.parametrize("scaling", [Scaling.NO, Scaling.ROW_COL_ITER])
def test_determinant(unsymmetric_matrix, scaling):
    engine = ScipyEngine()
    state = to_engine_state(unsymmetric_matrix)
    start(engine, state, scaling=scaling, det=True)

    run(engine, state, Job.ANALYZE)
    assert run(engine, state, Job.FACTORIZE) == 0

    mantissa = state.rinfog(12)
    exponent = state.infog(34)
    assert 0.5 <= abs(mantissa) < 1.0
    assert state.rinfog(13) == 0.0
    assert mantissa * 2.0**exponent == pytest.approx(
        np.linalg.det(unsymmetric_matrix)
    )


def test_determinant_of_large_diagonal_does_not_overflow():
    n = 2000
    a = np.diag(np.full(n, 1e3))
    engine = ScipyEngine()
    state = to_engine_state(a)
    start(engine, state, det=True)

    run(engine, state, Job.ANALYZE)
    assert run(engine, state, Job.FACTORIZE) == 0

    log2_det = np.log2(abs(state.rinfog(12))) + state.infog(34)
    assert log2_det == pytest.approx(n * np.log2(1e3))


def test_effective_controls():
    a = np.eye(3)
    engine = ScipyEngine()

    state = to_engine_state(a)
    start(engine, state, scaling=Scaling.AUTO)
    state.set_icntl(7, Ordering.METIS)
    run(engine, state, Job.ANALYZE)
    assert state.infog(7) == Ordering.AMD
    assert state.infog(33) == Scaling.ROW_COL_ITER

    state = to_engine_state(a, sym=1)
    start(engine, state, scaling=Scaling.AUTO)
    run(engine, state, Job.ANALYZE)
    assert state.infog(33) == Scaling.DIAGONAL

    state = to_engine_state(a)
    start(engine, state, scaling=5)
    run(engine, state, Job.ANALYZE)
    assert state.infog(33) == Scaling.NO


def test_initialize_sets_defaults_and_version():
    engine = ScipyEngine()
    state = EngineState()

    assert run(engine, state, Job.INITIALIZE) == 0
    assert state.version_number != ""
    assert state.icntl(7) == Ordering.AUTO
    assert state.icntl(8) == Scaling.AUTO


def test_singular_matrix():
    a = np.array([[1.0, 2.0], [2.0, 4.0]])
    engine = ScipyEngine()
    state = to_engine_state(a)
    start(engine, state)

    assert run(engine, state, Job.ANALYZE) == 0
    assert run(engine, state, Job.FACTORIZE) == -10

    state.rhs = np.ones(2)
    assert run(engine, state, Job.SOLVE) == -3


def test_not_positive_definite():
    a = np.array([[1.0, 2.0], [2.0, 1.0]])
    engine = ScipyEngine()
    state = to_engine_state(a, sym=1, lower=True)
    start(engine, state)

    run(engine, state, Job.ANALYZE)
    assert run(engine, state, Job.FACTORIZE) == -40


def test_index_out_of_range_is_ignored():
    engine = ScipyEngine()
    state = EngineState(
        n=2,
        nz=3,
        irn=np.array([1, 2, 3], dtype=np.int32),
        jcn=np.array([1, 2, 1], dtype=np.int32),
        a=np.array([2.0, 4.0, 100.0]),
    )
    start(engine, state)

    assert run(engine, state, Job.ANALYZE) == 1
    assert state.infog(2) == 1
    assert state.info(1) == 1

    assert run(engine, state, Job.FACTORIZE) == 0
    state.rhs = np.array([2.0, 4.0])
    assert run(engine, state, Job.SOLVE) == 0
    assert np.allclose(state.rhs, [1.0, 1.0])


def test_dimension_errors():
    engine = ScipyEngine()

    state = EngineState(n=0, nz=0)
    start(engine, state)
    assert run(engine, state, Job.ANALYZE) == -16

    state = EngineState(n=2, nz=-1)
    start(engine, state)
    assert run(engine, state, Job.ANALYZE) == -2

    state = to_engine_state(np.eye(2))
    start(engine, state)
    run(engine, state, Job.ANALYZE)
    run(engine, state, Job.FACTORIZE)
    state.rhs = np.ones(3)
    assert run(engine, state, Job.SOLVE) == -22


def test_jobs_out_of_sequence():
    engine = ScipyEngine()
    state = to_engine_state(np.eye(2))

    assert run(engine, state, Job.ANALYZE) == -3

    start(engine, state)
    assert run(engine, state, Job.FACTORIZE) == -3

    state.job = 99
    engine.run(state)
    assert state.infog(1) == -3

    run(engine, state, Job.TERMINATE)
    assert run(engine, state, Job.ANALYZE) == -3


def test_statistics_are_printed(capsys):
    engine = ScipyEngine()
    state = to_engine_state(np.eye(2))
    start(engine, state)
    state.set_icntl(3, 6)
    state.set_icntl(4, 3)

    run(engine, state, Job.ANALYZE)
    run(engine, state, Job.FACTORIZE)

    out = capsys.readouterr().out
    assert "ENGINE analysis" in out
    assert "ENGINE factorization" in out

    for k in (1, 2, 3, 4):
        state.set_icntl(k, -1)
    run(engine, state, Job.FACTORIZE)
    assert capsys.readouterr().out == ""
