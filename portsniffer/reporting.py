"""
Helpers for rendering scan results.
"""

from __future__ import annotations

from typing import Iterable, List


def format_open_port(port: int) -> str:
    return f"{port} is open"


def render_open_ports(ports: Iterable[int]) -> str:
    """
    One ``<port> is open`` line per port, ascending and without duplicates.
    """
    lines: List[str] = [format_open_port(port) for port in sorted(set(ports))]
    return "\n".join(lines)

