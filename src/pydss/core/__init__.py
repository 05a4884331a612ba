# Copyright 2024-2025 pydss authors. All rights reserved.

from pydss.core.controls import Ordering, Scaling, Symmetry
from pydss.core.engine import Engine, EngineState, Job
from pydss.core.errors import SolverError, error_message
from pydss.core.session import Session
from pydss.core.stats import StatsLinSol, VerifyLinSys
from pydss.core.triplet import SparseTriplet

__all__ = [
    "Engine",
    "EngineState",
    "Job",
    "Ordering",
    "Scaling",
    "Symmetry",
    "Session",
    "SolverError",
    "error_message",
    "SparseTriplet",
    "StatsLinSol",
    "VerifyLinSys",
]
