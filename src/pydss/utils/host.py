# Copyright 2024-2025 pydss authors. All rights reserved.

import os
import platform


def get_host_configuration() -> dict:
    """
    Get host configuration.

    Returns
    -------
    host_configuration: dict.
        A dictionary containing:
            - num_threads: int. The number of OpenMP threads, 0 if unset.
            - host_id: str. The host id.
            - platform: str. The operating system and machine.
    """
    host_id = os.getenv("HOSTNAME", os.getenv("COMPUTERNAME", platform.node()))
    try:
        num_threads = int(os.getenv("OMP_NUM_THREADS", "0"))
    except ValueError:
        num_threads = 0

    return {
        "num_threads": num_threads,
        "host_id": host_id,
        "platform": f"{platform.system()} {platform.machine()}",
    }
