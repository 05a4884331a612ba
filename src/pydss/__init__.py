# Copyright 2024-2025 pydss authors. All rights reserved.

import os
from typing import Any, TypeAlias, TypeVar

from numpy.typing import ArrayLike

from pydss.__about__ import __version__

backend_flags = {
    "array_module": None,
}

# Allows user to specify the array module via an environment variable.
backend_flags["array_module"] = os.environ.get("ARRAY_MODULE", "numpy")

# The engine works on host memory only.
if backend_flags["array_module"] == "numpy":
    import numpy as xp
    import scipy as sp
else:
    raise ValueError(
        f"Unsupported ARRAY_MODULE '{backend_flags['array_module']}', pydss is host-only."
    )

# Some type aliases for the array module.
_ScalarType = TypeVar("ScalarType", bound=xp.generic, covariant=True)
_DType = xp.dtype[_ScalarType]
NDArray: TypeAlias = xp.ndarray[Any, _DType]


__all__ = [
    "__version__",
    "xp",
    "sp",
    "ArrayLike",
    "NDArray",
    "backend_flags",
]
