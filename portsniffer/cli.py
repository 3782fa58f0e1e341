"""
Command-line interface for the port sniffer.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import List, Optional, Sequence

from . import config as config_module
from .config import ConfigError, HelpRequested
from .logger import setup_logger
from .reporting import render_open_ports
from .scanner import scan

PROG = "portsniffer"
EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_INTERRUPTED = 130


def _progress_dot(_port: int) -> None:
    sys.stdout.write(".")
    sys.stdout.flush()


def _full_argv(argv: Optional[Sequence[str]], prog: Optional[str]) -> List[str]:
    if argv is None:
        return list(sys.argv)
    return [prog or PROG, *argv]


def _program_name(full_argv: Sequence[str]) -> str:
    name = os.path.basename(full_argv[0]) if full_argv else ""
    if not name or name == "__main__.py":
        return PROG
    return name


def main(argv: Optional[Sequence[str]] = None, prog: Optional[str] = None) -> None:
    """
    Run a scan from command-line arguments (excluding the program name).

    Exits 0 after printing help or results, 1 on invalid arguments and 130
    when interrupted.
    """
    setup_logger()
    full_argv = _full_argv(argv, prog)
    program = _program_name(full_argv)

    try:
        scan_config = config_module.resolve(full_argv)
    except HelpRequested:
        print(config_module.usage_text(program), end="")
        sys.exit(EXIT_OK)
    except ConfigError as exc:
        print(f"{program} problem parsing arguments: {exc}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    cancel = threading.Event()
    try:
        open_ports = scan(scan_config, on_open=_progress_dot, cancel=cancel)
    except KeyboardInterrupt:
        print("\n[!] Scan interrupted.", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)

    print()
    report = render_open_ports(open_ports)
    if report:
        print(report)
