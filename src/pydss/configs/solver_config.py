# Copyright 2024-2025 pydss authors. All rights reserved.

import tomllib
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator
from typing_extensions import Annotated, Self

from pydss.core.controls import Ordering, Scaling, Symmetry


class SolverConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    symmetry: Literal[
        "no", "general", "general_triangular", "pos_def", "pos_def_triangular"
    ] = "no"

    ordering: Literal["amd", "amf", "scotch", "pord", "metis", "qamd", "auto"] = "auto"
    scaling: Literal[
        "no", "diagonal", "column", "row_col", "row_col_iter", "row_col_rig", "auto"
    ] = "auto"

    # % increase of the estimated workspace
    pct_inc_workspace: Annotated[int, Field(strict=True, ge=0)] = 100
    # MB per process, 0 lets the engine decide
    max_work_memory: Annotated[int, Field(strict=True, ge=0)] = 0
    openmp_num_threads: PositiveInt = 1

    compute_determinant: bool = False
    verbose: bool = False

    @model_validator(mode="after")
    def check_determinant_scaling(self) -> Self:
        # The engine overrides the scaling with "no" when computing the determinant.
        assert not self.compute_determinant or self.scaling in (
            "no",
            "auto",
        ), "An explicit scaling cannot be combined with compute_determinant."
        return self

    def get_symmetry(self) -> Symmetry:
        return Symmetry(self.symmetry)

    def get_ordering(self) -> Ordering:
        return Ordering[self.ordering.upper()]

    def get_scaling(self) -> Scaling:
        return Scaling[self.scaling.upper()]


def parse_config(config: dict | str) -> SolverConfig:
    if isinstance(config, str):
        with open(config, "rb") as f:
            config = tomllib.load(f)

    return SolverConfig(**config)
