# Copyright 2024-2025 pydss authors. All rights reserved.

from abc import ABC, abstractmethod

from pydss import ArrayLike, NDArray
from pydss.configs.solver_config import SolverConfig


class Solver(ABC):
    """Abstract core class for sparse direct solvers."""

    def __init__(
        self,
        config: SolverConfig,
        **kwargs,
    ) -> None:
        """Initializes the solver.

        Parameters
        ----------
        config : SolverConfig
            Configuration object for the solver.
        """
        self.config = config

    @abstractmethod
    def factorize(self, A: ArrayLike, **kwargs) -> None:
        """Compute the factors of the input matrix.

        Parameters
        ----------
        A : ArrayLike
            Input matrix.

        Returns
        -------
        None
        """
        ...

    @abstractmethod
    def solve(self, rhs: NDArray, **kwargs) -> NDArray:
        """Solve linear system using the factors."""
        ...

    @abstractmethod
    def get_determinant(self) -> tuple[float, float, float]:
        """Return ``(mantissa, base, exponent)`` of the determinant."""
        ...

    @abstractmethod
    def logdet(self, **kwargs) -> float:
        """Compute log of the absolute determinant of the factorized matrix."""
        ...
