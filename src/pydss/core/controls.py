# Copyright 2024-2025 pydss authors. All rights reserved.

from enum import Enum, IntEnum

from pydss.core.constants import (
    ENGINE_IGNORED,
    ENGINE_PAR_HOST_ALSO_WORKS,
    ICNTL5_ASSEMBLED_MATRIX,
    ICNTL6_PERMUT_AUTO,
    ICNTL18_CENTRALIZED,
    ICNTL28_SEQUENTIAL,
    ICNTL29_IGNORED,
    MESSAGE_LEVEL_STATISTICS,
    SILENT,
    STDOUT_STREAM,
)
from pydss.core.engine import EngineState


class Ordering(IntEnum):
    """Fill-reducing orderings (control slot 7)."""

    AMD = 0
    AMF = 2
    SCOTCH = 3
    PORD = 4
    METIS = 5
    QAMD = 6
    AUTO = 7


class Scaling(IntEnum):
    """Scaling strategies (control slot 8)."""

    NO = 0
    DIAGONAL = 1
    COLUMN = 3
    ROW_COL = 4
    ROW_COL_ITER = 7
    ROW_COL_RIG = 8
    AUTO = 77


class Symmetry(Enum):
    """Storage of the matrix regarding symmetry.

    Triangular variants hold only one triangle of a symmetric matrix; the
    full variants hold both.
    """

    NO = "no"
    GENERAL = "general"
    GENERAL_TRIANGULAR = "general_triangular"
    POS_DEF = "pos_def"
    POS_DEF_TRIANGULAR = "pos_def_triangular"

    @property
    def engine_code(self) -> int:
        """0 = unsymmetric, 1 = positive-definite, 2 = general symmetric."""
        if self in (Symmetry.POS_DEF, Symmetry.POS_DEF_TRIANGULAR):
            return 1
        if self in (Symmetry.GENERAL, Symmetry.GENERAL_TRIANGULAR):
            return 2
        return 0

    @property
    def triangular(self) -> bool:
        return self in (Symmetry.GENERAL_TRIANGULAR, Symmetry.POS_DEF_TRIANGULAR)


def _display_name(enum, code: int) -> str:
    try:
        name = enum(code).name
    except ValueError:
        return "Unknown"
    return "".join(part.capitalize() for part in name.split("_"))


def ordering_name(code: int) -> str:
    return _display_name(Ordering, code)


def scaling_name(code: int) -> str:
    return _display_name(Scaling, code)


def set_verbose(state: EngineState, verbose: bool) -> None:
    """Route the engine messages to stdout or silence them.

    The engine reads these slots on every call, so they are written before
    each job.
    """
    if verbose:
        state.set_icntl(1, STDOUT_STREAM)  # error messages
        state.set_icntl(2, 0)  # diagnostic messages
        state.set_icntl(3, STDOUT_STREAM)  # global information
        state.set_icntl(4, MESSAGE_LEVEL_STATISTICS)
    else:
        for k in (1, 2, 3, 4):
            state.set_icntl(k, SILENT)


def set_parallelism(state: EngineState, symmetry: int) -> None:
    """Fields the engine reads once, during the initialize job."""
    state.comm_fortran = ENGINE_IGNORED
    state.par = ENGINE_PAR_HOST_ALSO_WORKS
    state.sym = symmetry


def encode_controls(
    state: EngineState,
    ordering: int,
    scaling: int,
    pct_inc_workspace: int,
    max_work_memory: int,
    openmp_num_threads: int,
    compute_determinant: bool,
) -> None:
    """Write the control vector after a successful initialize job.

    Requesting the determinant disables scaling, overriding ``scaling``.
    """
    state.set_icntl(5, ICNTL5_ASSEMBLED_MATRIX)
    state.set_icntl(6, ICNTL6_PERMUT_AUTO)
    state.set_icntl(7, ordering)
    state.set_icntl(8, scaling)
    state.set_icntl(14, pct_inc_workspace)
    state.set_icntl(16, openmp_num_threads)
    state.set_icntl(18, ICNTL18_CENTRALIZED)
    state.set_icntl(23, max_work_memory)
    state.set_icntl(28, ICNTL28_SEQUENTIAL)
    state.set_icntl(29, ICNTL29_IGNORED)

    if compute_determinant:
        # det = (RINFOG(12) + i RINFOG(13)) * 2^INFOG(34); RINFOG(13) is 0 for reals.
        state.set_icntl(33, 1)
        state.set_icntl(8, Scaling.NO)
    else:
        state.set_icntl(33, 0)
