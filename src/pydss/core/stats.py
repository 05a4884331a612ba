# Copyright 2024-2025 pydss authors. All rights reserved.

from pathlib import Path

from pydantic import BaseModel, Field
from tabulate import tabulate

from pydss import ArrayLike, xp
from pydss.utils import add_str_header, format_nanoseconds, get_host_configuration

UNKNOWN = "Unknown"


class VerifyLinSys(BaseModel):
    """Checks the solution of ``A x = rhs`` by computing ``A x``."""

    max_abs_a: float = 0.0
    max_abs_ax: float = 0.0
    max_abs_diff: float = 0.0
    relative_error: float = 0.0

    @classmethod
    def new(cls, A, x: ArrayLike, rhs: ArrayLike) -> "VerifyLinSys":
        """``A`` is a SciPy sparse matrix or a ``SparseTriplet``."""
        x = xp.asarray(x, dtype=xp.float64)
        rhs = xp.asarray(rhs, dtype=xp.float64)

        if hasattr(A, "mat_vec_mul"):
            ax = A.mat_vec_mul(x)
            _, _, values = A.get_triples()
        else:
            ax = xp.asarray(A @ x).ravel()
            values = A.tocoo().data

        max_abs_a = float(xp.max(xp.abs(values))) if values.size > 0 else 0.0
        max_abs_ax = float(xp.max(xp.abs(ax))) if ax.size > 0 else 0.0
        max_abs_diff = float(xp.max(xp.abs(ax - rhs))) if ax.size > 0 else 0.0

        return cls(
            max_abs_a=max_abs_a,
            max_abs_ax=max_abs_ax,
            max_abs_diff=max_abs_diff,
            relative_error=max_abs_diff / (max_abs_a + 1.0),
        )


class StatsLinSolMain(BaseModel):
    platform: str = "pydss"
    host: str = UNKNOWN
    solver: str = UNKNOWN


class StatsLinSolMatrix(BaseModel):
    name: str = UNKNOWN
    nrow: int = 0
    ncol: int = 0
    nnz: int = 0
    symmetry: str = UNKNOWN


class StatsLinSolRequests(BaseModel):
    ordering: str = UNKNOWN
    scaling: str = UNKNOWN
    openmp_num_threads: int = 0


class StatsLinSolOutput(BaseModel):
    effective_ordering: str = UNKNOWN
    effective_scaling: str = UNKNOWN
    openmp_num_threads: int = 0


class StatsLinSolDeterminant(BaseModel):
    # det = mantissa * pow(base, exponent)
    mantissa: float = 0.0
    base: float = 0.0
    exponent: float = 0.0


class StatsLinSolTimeHuman(BaseModel):
    read_matrix: str = ""
    factorize: str = ""
    solve: str = ""
    total_f_and_s: str = ""
    verify: str = ""


class StatsLinSolTimeNanoseconds(BaseModel):
    read_matrix: int = 0
    factorize: int = 0
    solve: int = 0
    total_f_and_s: int = 0
    verify: int = 0


class StatsLinSol(BaseModel):
    """Information about the solution of a linear system."""

    main: StatsLinSolMain = Field(default_factory=StatsLinSolMain)
    matrix: StatsLinSolMatrix = Field(default_factory=StatsLinSolMatrix)
    requests: StatsLinSolRequests = Field(default_factory=StatsLinSolRequests)
    output: StatsLinSolOutput = Field(default_factory=StatsLinSolOutput)
    determinant: StatsLinSolDeterminant = Field(default_factory=StatsLinSolDeterminant)
    verify: VerifyLinSys = Field(default_factory=VerifyLinSys)
    time_human: StatsLinSolTimeHuman = Field(default_factory=StatsLinSolTimeHuman)
    time_nanoseconds: StatsLinSolTimeNanoseconds = Field(
        default_factory=StatsLinSolTimeNanoseconds
    )

    def set_matrix_name_from_path(self, filepath: str) -> None:
        """Sets the matrix name as the stem of a file path."""
        stem = Path(filepath).stem
        self.matrix.name = stem if stem else UNKNOWN

    def get_json(self) -> str:
        """Pretty JSON after refreshing the totals and human readable times."""
        host = get_host_configuration()
        self.main.host = host["host_id"] or UNKNOWN
        self.output.openmp_num_threads = host["num_threads"]

        t = self.time_nanoseconds
        t.total_f_and_s = t.factorize + t.solve
        for name in StatsLinSolTimeHuman.model_fields:
            setattr(self.time_human, name, format_nanoseconds(getattr(t, name)))

        return self.model_dump_json(indent=2)

    def __str__(self) -> str:
        rows = [
            ["Solver", self.main.solver],
            ["Matrix", f"{self.matrix.name} ({self.matrix.nrow}x{self.matrix.ncol})"],
            ["nnz", self.matrix.nnz],
            ["Symmetry", self.matrix.symmetry],
            ["Ordering (requested)", self.requests.ordering],
            ["Ordering (effective)", self.output.effective_ordering],
            ["Scaling (requested)", self.requests.scaling],
            ["Scaling (effective)", self.output.effective_scaling],
            [
                "Determinant",
                f"{self.determinant.mantissa} * {self.determinant.base}"
                f"^{self.determinant.exponent}",
            ],
            ["Relative error", f"{self.verify.relative_error:.3e}"],
            ["Factorize", format_nanoseconds(self.time_nanoseconds.factorize)],
            ["Solve", format_nanoseconds(self.time_nanoseconds.solve)],
        ]
        table = tabulate(rows, tablefmt="fancy_grid")

        return add_str_header("Linear solver statistics", table)
