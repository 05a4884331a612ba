# Copyright 2024-2025 pydss authors. All rights reserved.

# --- Return codes of the session interface ------------------------------------
SUCCESSFUL_EXIT = 0
NULL_POINTER_ERROR = -100000
MALLOC_ERROR = -200000
VERSION_ERROR = -300000
STATE_ERROR = -400000
DIMENSION_ERROR = -500000

# --- Engine version the interface is bound to ---------------------------------
ENGINE_VERSION = "5.4.1"

# --- Engine constants ---------------------------------------------------------
ENGINE_IGNORED = -987654  # communicator placeholder
ENGINE_PAR_HOST_ALSO_WORKS = 1

ICNTL5_ASSEMBLED_MATRIX = 0
ICNTL6_PERMUT_AUTO = 7
ICNTL18_CENTRALIZED = 0
ICNTL28_SEQUENTIAL = 1
ICNTL29_IGNORED = 0

STDOUT_STREAM = 6
MESSAGE_LEVEL_STATISTICS = 3
SILENT = -1

# --- Sizes of the engine's control and status vectors -------------------------
N_ICNTL = 60
N_INFO = 80
N_INFOG = 80
N_RINFOG = 40
