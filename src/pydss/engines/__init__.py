# Copyright 2024-2025 pydss authors. All rights reserved.

from pydss.engines.scipy_engine import ScipyEngine

__all__ = ["ScipyEngine"]
