# Copyright 2024-2025 pydss authors. All rights reserved.


def print_msg(*args, **kwargs):
    """
    Print a message to the standard output.

    Parameters:
    -----------
    *args:
        Variable length argument list.
    **kwargs:
        Arbitrary keyword arguments.
    """
    print(*args, **kwargs)


def add_str_header(
    title: str,
    table: str,
):
    """Add a header to a table."""
    table_width = max(len(line) for line in table.split("\n"))
    title_width = len(title)
    total_width = max(table_width, title_width)
    title_centered = title.center(total_width)
    table = f"{title_centered}\n{table}"

    return table


def format_nanoseconds(ns: int) -> str:
    """Human readable duration, e.g. ``250ns``, ``1.5µs``, ``2ms``, ``1m1s``."""
    if ns < 1_000:
        return f"{ns}ns"
    if ns < 1_000_000:
        return f"{_trim(ns / 1_000)}µs"
    if ns < 1_000_000_000:
        return f"{_trim(ns / 1_000_000)}ms"

    hours, rest = divmod(ns, 3_600_000_000_000)
    minutes, rest = divmod(rest, 60_000_000_000)
    seconds = f"{_trim(rest / 1_000_000_000)}s"
    if hours > 0:
        return f"{hours}h{minutes}m{seconds}"
    if minutes > 0:
        return f"{minutes}m{seconds}"
    return seconds


def _trim(value: float) -> str:
    # at most 9 decimals, no trailing zeros
    return f"{value:.9f}".rstrip("0").rstrip(".")
