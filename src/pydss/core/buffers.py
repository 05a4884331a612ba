# Copyright 2024-2025 pydss authors. All rights reserved.

from pydss import NDArray, xp


class BufferAllocator:
    """Allocates the triplet buffers of a session and keeps track of them.

    ``n_live`` counts the buffers handed out and not yet released.
    """

    def __init__(self) -> None:
        self.n_allocated: int = 0
        self.n_released: int = 0
        self._live: dict[int, int] = {}

    @property
    def n_live(self) -> int:
        return len(self._live)

    @property
    def live_bytes(self) -> int:
        return sum(self._live.values())

    def allocate(self, size: int, dtype) -> NDArray:
        """Return an uninitialized buffer; raises ``MemoryError`` on failure."""
        buffer = self._empty(size, dtype)
        self._live[id(buffer)] = buffer.nbytes
        self.n_allocated += 1
        return buffer

    def release(self, buffer: NDArray) -> None:
        if buffer is None:
            return
        if self._live.pop(id(buffer), None) is not None:
            self.n_released += 1

    def _empty(self, size: int, dtype) -> NDArray:
        return xp.empty(size, dtype=dtype)


def allocate_triplet_buffers(
    allocator: BufferAllocator,
    nnz: int,
) -> tuple[NDArray, NDArray, NDArray]:
    """Allocate ``(row_idx, col_idx, values)`` of length ``nnz``.

    Either all three buffers are returned or, if one allocation fails, the
    ones already obtained are released and ``MemoryError`` is re-raised.
    """
    row_idx = col_idx = None
    try:
        row_idx = allocator.allocate(nnz, xp.int32)
        col_idx = allocator.allocate(nnz, xp.int32)
        values = allocator.allocate(nnz, xp.float64)
    except MemoryError:
        allocator.release(col_idx)
        allocator.release(row_idx)
        raise

    return row_idx, col_idx, values
