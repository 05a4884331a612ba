# Copyright 2024-2025 pydss authors. All rights reserved.

from dataclasses import dataclass, field

from pydss import NDArray
from pydss.core.buffers import BufferAllocator
from pydss.core.engine import Engine, EngineState


@dataclass(eq=False)
class Session:
    """One association with the engine.

    ``initialized`` is True exactly when the engine owes a terminate job.
    The triplet buffers are either all ``None`` or all of length ``nz``.
    """

    engine: Engine
    allocator: BufferAllocator = field(default_factory=BufferAllocator)
    engine_state: EngineState = field(default_factory=EngineState)

    row_idx: NDArray = None
    col_idx: NDArray = None
    values: NDArray = None

    initialized: bool = False

    det_mantissa: float = 0.0
    det_exponent: float = 0.0

    def __copy__(self):
        raise TypeError("Session objects cannot be copied.")

    def __deepcopy__(self, memo):
        raise TypeError("Session objects cannot be copied.")

    def release_buffers(self) -> None:
        for name in ("row_idx", "col_idx", "values"):
            self.allocator.release(getattr(self, name))
            setattr(self, name, None)

        self.engine_state.irn = None
        self.engine_state.jcn = None
        self.engine_state.a = None
