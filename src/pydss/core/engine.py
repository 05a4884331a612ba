# Copyright 2024-2025 pydss authors. All rights reserved.

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum

from pydss import NDArray, xp
from pydss.core.constants import N_ICNTL, N_INFO, N_INFOG, N_RINFOG


class Job(IntEnum):
    """Job codes understood by the engine entrypoint."""

    INITIALIZE = -1
    TERMINATE = -2
    ANALYZE = 1
    FACTORIZE = 2
    SOLVE = 3


@dataclass
class EngineState:
    """Per-session record consumed and written by the engine.

    The control and status vectors are stored 0-based; use the 1-based
    accessors (``icntl(k)``, ``infog(k)``, ...) to address them the way the
    engine documentation numbers its slots.
    """

    comm_fortran: int = 0
    par: int = 0
    sym: int = 0
    job: int = 0

    n: int = 0
    nz: int = 0
    irn: NDArray = None
    jcn: NDArray = None
    a: NDArray = None
    rhs: NDArray = None

    version_number: str = ""

    icntl_: NDArray = field(default_factory=lambda: xp.zeros(N_ICNTL, dtype=xp.int32))
    info_: NDArray = field(default_factory=lambda: xp.zeros(N_INFO, dtype=xp.int32))
    infog_: NDArray = field(default_factory=lambda: xp.zeros(N_INFOG, dtype=xp.int32))
    rinfog_: NDArray = field(
        default_factory=lambda: xp.zeros(N_RINFOG, dtype=xp.float64)
    )

    def icntl(self, k: int) -> int:
        return int(self.icntl_[k - 1])

    def set_icntl(self, k: int, value: int) -> None:
        self.icntl_[k - 1] = value

    def info(self, k: int) -> int:
        return int(self.info_[k - 1])

    def set_info(self, k: int, value: int) -> None:
        self.info_[k - 1] = value

    def infog(self, k: int) -> int:
        return int(self.infog_[k - 1])

    def set_infog(self, k: int, value: int) -> None:
        self.infog_[k - 1] = value

    def rinfog(self, k: int) -> float:
        return float(self.rinfog_[k - 1])

    def set_rinfog(self, k: int, value: float) -> None:
        self.rinfog_[k - 1] = value

    def set_status(self, code: int, detail: int = 0) -> None:
        """Write the same status to the local and global status vectors."""
        self.info_[0] = code
        self.info_[1] = detail
        self.infog_[0] = code
        self.infog_[1] = detail


class Engine(ABC):
    """Abstract core class for sparse direct solver engines.

    An engine exposes a single entrypoint which dispatches on ``state.job``
    and reports its outcome through ``INFO``/``INFOG`` in the state record.
    """

    @abstractmethod
    def run(self, state: EngineState) -> None:
        """Execute the job currently written in ``state.job``."""
        ...
