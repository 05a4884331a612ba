# Copyright 2024-2025 pydss authors. All rights reserved.

from pydss.utils.host import get_host_configuration
from pydss.utils.print_utils import add_str_header, format_nanoseconds, print_msg

__all__ = [
    "get_host_configuration",
    "add_str_header",
    "format_nanoseconds",
    "print_msg",
]
