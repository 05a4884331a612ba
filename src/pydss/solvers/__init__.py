# Copyright 2024-2025 pydss authors. All rights reserved.

from pydss.solvers.mumps_solver import MumpsSolver

__all__ = ["MumpsSolver"]
