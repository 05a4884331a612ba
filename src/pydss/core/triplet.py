# Copyright 2024-2025 pydss authors. All rights reserved.

from scipy.sparse import coo_matrix

from pydss import ArrayLike, NDArray, xp
from pydss.core.controls import Symmetry


class SparseTriplet:
    """Holds triples ``(i, j, aij)`` representing a sparse matrix.

    Only the non-zero values are required. Entries with repeated ``(i, j)``
    are allowed and summed when the matrix is assembled, which is convenient
    for finite element assembly. ``max`` bounds the number of entries,
    repeated ones included.

    Indices are 0-based.
    """

    def __init__(
        self,
        nrow: int,
        ncol: int,
        max: int,
        symmetry: Symmetry = Symmetry.NO,
    ) -> None:
        if nrow <= 0 or ncol <= 0 or max <= 0:
            raise ValueError("nrow, ncol, and max must all be greater than zero")

        self.nrow = nrow
        self.ncol = ncol
        self.max = max
        self.symmetry = symmetry
        self.pos: int = 0

        self.indices_i: NDArray = xp.zeros(max, dtype=xp.int32)
        self.indices_j: NDArray = xp.zeros(max, dtype=xp.int32)
        self.values_aij: NDArray = xp.zeros(max, dtype=xp.float64)

    def put(self, i: int, j: int, aij: float) -> None:
        """Puts the next triple ``(i, j, aij)`` into the triplet."""
        if not (0 <= i < self.nrow and 0 <= j < self.ncol):
            raise IndexError(f"({i}, {j}) is outside a {self.nrow}x{self.ncol} matrix")
        if self.pos >= self.max:
            raise ValueError(f"max number of entries ({self.max}) reached")

        self.indices_i[self.pos] = i
        self.indices_j[self.pos] = j
        self.values_aij[self.pos] = aij
        self.pos += 1

    def reset(self) -> None:
        """Forget the entries but keep the allocated capacity."""
        self.pos = 0

    def dims(self) -> tuple[int, int]:
        return self.nrow, self.ncol

    @property
    def nnz(self) -> int:
        return self.pos

    def get_triples(self) -> tuple[NDArray, NDArray, NDArray]:
        """Views on the ``nnz`` stored indices and values."""
        return (
            self.indices_i[: self.pos],
            self.indices_j[: self.pos],
            self.values_aij[: self.pos],
        )

    def to_matrix(self, a: NDArray) -> None:
        """Fill the dense array ``a`` with the triples, up to its shape.

        ``a`` may have fewer rows or columns than the triplet; entries outside
        ``a`` are skipped.
        """
        m, n = a.shape
        if m > self.nrow or n > self.ncol:
            raise ValueError("wrong matrix dimensions")

        a.fill(0.0)
        rows, cols, values = self.get_triples()
        inside = (rows < m) & (cols < n)
        xp.add.at(a, (rows[inside], cols[inside]), values[inside])

    def as_dense(self) -> NDArray:
        a = xp.zeros((self.nrow, self.ncol), dtype=xp.float64)
        self.to_matrix(a)
        return a

    def mat_vec_mul(self, u: ArrayLike) -> NDArray:
        """Compute ``v = a @ u``.

        With triangular storage the missing triangle is mirrored. Not highly
        efficient but useful in verifications.
        """
        u = xp.asarray(u, dtype=xp.float64)
        if u.shape != (self.ncol,):
            raise ValueError("u.ndim must equal a.ncol")

        rows, cols, values = self.get_triples()
        v = xp.zeros(self.nrow, dtype=xp.float64)
        xp.add.at(v, rows, values * u[cols])

        if self.symmetry.triangular:
            off = rows != cols
            xp.add.at(v, cols[off], values[off] * u[rows[off]])

        return v

    def to_scipy(self) -> coo_matrix:
        """COO matrix of the stored triples (triangular storage not mirrored)."""
        rows, cols, values = self.get_triples()
        return coo_matrix(
            (values.copy(), (rows.copy(), cols.copy())), shape=(self.nrow, self.ncol)
        )

    @classmethod
    def from_scipy(
        cls,
        A,
        symmetry: Symmetry = Symmetry.NO,
    ) -> "SparseTriplet":
        A = coo_matrix(A)
        trip = cls(A.shape[0], A.shape[1], max(A.nnz, 1), symmetry)
        trip.indices_i[: A.nnz] = A.row
        trip.indices_j[: A.nnz] = A.col
        trip.values_aij[: A.nnz] = A.data
        trip.pos = A.nnz
        return trip

    def __str__(self) -> str:
        return (
            f'    "nrow": {self.nrow},\n'
            f'    "ncol": {self.ncol},\n'
            f'    "pos": {self.pos},\n'
            f'    "max": {self.max},\n'
            f'    "symmetry": "{self.symmetry.name}"'
        )
