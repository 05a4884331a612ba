# Copyright 2024-2025 pydss authors. All rights reserved.

import numpy as np
import pytest

from pydss.core.buffers import BufferAllocator, allocate_triplet_buffers


def test_allocate_triplet_buffers():
    allocator = BufferAllocator()
    row_idx, col_idx, values = allocate_triplet_buffers(allocator, 5)

    assert row_idx.shape == col_idx.shape == values.shape == (5,)
    assert row_idx.dtype == np.int32
    assert col_idx.dtype == np.int32
    assert values.dtype == np.float64
    assert allocator.n_live == 3
    assert allocator.live_bytes == 5 * (4 + 4 + 8)

    for buffer in (row_idx, col_idx, values):
        allocator.release(buffer)
    assert allocator.n_live == 0
    assert allocator.n_released == 3


def test_release_is_tolerant():
    allocator = BufferAllocator()
    buffer = allocator.allocate(3, np.float64)

    allocator.release(None)
    allocator.release(buffer)
    allocator.release(buffer)

    assert allocator.n_released == 1
    assert allocator.n_live == 0


@pytest.mark.parametrize("fail_at", [1, 2, 3])
def test_partial_failure_releases_everything(make_allocator, fail_at):
    allocator = make_allocator(fail_at=fail_at)

    with pytest.raises(MemoryError):
        allocate_triplet_buffers(allocator, 100)

    assert allocator.n_allocated == fail_at - 1
    assert allocator.n_released == fail_at - 1
    assert allocator.n_live == 0


def test_zero_entries():
    allocator = BufferAllocator()
    buffers = allocate_triplet_buffers(allocator, 0)

    assert all(buffer.size == 0 for buffer in buffers)
