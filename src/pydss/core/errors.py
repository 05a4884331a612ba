# Copyright 2024-2025 pydss authors. All rights reserved.

from pydss.core.constants import (
    DIMENSION_ERROR,
    MALLOC_ERROR,
    NULL_POINTER_ERROR,
    STATE_ERROR,
    VERSION_ERROR,
)

_INTERFACE_MESSAGES = {
    NULL_POINTER_ERROR: "Session is not available (null pointer)",
    MALLOC_ERROR: "Cannot allocate the triplet buffers",
    VERSION_ERROR: "Engine library version differs from the interface version",
    STATE_ERROR: "Operation called out of sequence",
    DIMENSION_ERROR: "Dimensions are invalid or inconsistent with the session",
}

_ENGINE_ERRORS = {
    -1: "An error occurred on another processor",
    -2: "NZ is out of range",
    -3: "Engine called with an invalid JOB",
    -4: "Error in user-provided permutation array",
    -5: "Problem of real workspace allocation during analysis",
    -6: "Matrix is singular in structure",
    -7: "Problem of integer workspace allocation during analysis",
    -8: "Integer workarray too small for factorization",
    -9: "Real workarray too small for factorization",
    -10: "Numerically singular matrix",
    -11: "Real workspace too small for solution",
    -12: "Real workspace too small for iterative refinement",
    -13: "Problem of workspace allocation during factorization or solution",
    -14: "Integer workarray too small for solution",
    -15: "Integer workarray too small for iterative refinement",
    -16: "N is out of range",
    -17: "Internal send buffer too small",
    -20: "Internal reception buffer too small",
    -21: "Value of PAR is incompatible with the number of processors",
    -22: "A pointer array has an incompatible size or is not associated",
    -23: "MPI was not initialized",
    -24: "NELT is out of range",
    -25: "Problem with BLACS",
    -26: "LRHS is out of range",
    -27: "NZ_RHS and IRHS_PTR are incompatible",
    -28: "IRHS_PTR(1) is not equal to 1",
    -29: "LSOL_LOC is smaller than INFO(23)",
    -30: "SCHUR_LLD is out of range",
    -31: "Incompatible block cyclic distribution",
    -32: "Incompatible values of NRHS",
    -33: "ICNTL(26) was asked for during the solve phase",
    -34: "LREDRHS is out of range",
    -35: "Expansion phase called without reduction phase",
    -36: "Incompatible values of ICNTL(25) and INFOG(28)",
    -37: "Value of ICNTL(25) incompatible with another parameter",
    -38: "Parallel analysis was set but PT-SCOTCH or ParMetis are not provided",
    -40: "Matrix was indicated positive definite but a negative or null pivot was found",
    -44: "Solve phase cannot be performed because the factors were discarded",
    -90: "Error in out-of-core management",
}

_ENGINE_WARNINGS = {
    1: "Index out of range; the corresponding entries were ignored",
    2: "Estimated condition number is larger than the threshold",
    4: "Not all entries of the matrix were used during error analysis",
    8: "Iterative refinement did not converge",
}


def error_message(code: int) -> str:
    """Describe a status code returned by the session interface."""
    if code == 0:
        return "Success"
    if code in _INTERFACE_MESSAGES:
        return _INTERFACE_MESSAGES[code]
    if code < 0:
        return _ENGINE_ERRORS.get(code, f"Unknown engine error ({code})")
    return _ENGINE_WARNINGS.get(code, f"Unknown engine warning ({code})")


class SolverError(RuntimeError):
    """Raised by the high-level solvers when the engine reports an error."""

    def __init__(self, code: int, phase: str = None) -> None:
        self.code = code
        self.phase = phase
        where = f" during {phase}" if phase is not None else ""
        super().__init__(f"Solver error{where} (code {code}): {error_message(code)}")
