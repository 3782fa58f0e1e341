"""
Argument validation for the port sniffer.

``resolve`` turns a raw ``argv`` list into a frozen ``ScanConfig`` or raises
one of the ``ConfigError`` subclasses below.
"""

from __future__ import annotations

import argparse
import ipaddress
import logging
import re
from typing import Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_WORKERS = 4
MAX_PORT = 65535
MAX_CONNECT_TIMEOUT = 86400.0
HELP_FLAGS = ("-h", "--help")
WORKERS_FLAG = "-j"

_DECIMAL = re.compile(r"\+?[0-9]+")

logger = logging.getLogger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class HelpRequested(Exception):
    """Raised when a help flag is present; callers should print usage."""


class ConfigError(ValueError):
    """Base class for every invalid-arguments outcome."""


class ArgumentCountError(ConfigError):
    """Raised when there are too few or too many arguments."""


class ThreadCountParseError(ConfigError):
    """Raised when the value after ``-j`` is not a usable worker count."""


class AddressParseError(ConfigError):
    """Raised when the target is not an IPv4 or IPv6 address."""


class InvalidArgumentsError(ConfigError):
    """Raised for any argument shape that is not recognised."""


class ScanConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_address: IPAddress
    worker_count: int = Field(default=DEFAULT_WORKERS, ge=1, le=MAX_PORT)
    connect_timeout: Optional[float] = Field(
        default=None, gt=0, le=MAX_CONNECT_TIMEOUT, allow_inf_nan=False
    )


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser_obj = argparse.ArgumentParser(
        prog=prog,
        description="Find the open TCP ports of a single host.",
        add_help=False,
    )
    parser_obj.add_argument(
        "-h",
        "--help",
        action="store_true",
        help="Show this help message and exit.",
    )
    parser_obj.add_argument(
        WORKERS_FLAG,
        dest="workers",
        metavar="WORKERS",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"Number of concurrent workers, 1-{MAX_PORT} (default: {DEFAULT_WORKERS}).",
    )
    parser_obj.add_argument("address", help="IPv4 or IPv6 address to scan.")
    return parser_obj


def usage_text(prog: Optional[str] = None) -> str:
    return build_parser(prog).format_help()


def _parse_address(value: str) -> IPAddress:
    try:
        return ipaddress.ip_address(value)
    except ValueError as exc:
        raise AddressParseError(
            f"not a valid IP address: {value!r}; must be IPv4 or IPv6"
        ) from exc


def _parse_worker_count(value: str) -> int:
    if not _DECIMAL.fullmatch(value):
        raise ThreadCountParseError(f"failed to parse worker count: {value!r}")
    count = int(value)
    if not (1 <= count <= MAX_PORT):
        raise ThreadCountParseError(
            f"worker count must be between 1 and {MAX_PORT}, got {count}"
        )
    return count


def resolve(argv: Sequence[str]) -> ScanConfig:
    """
    Validate ``argv`` (program name first) and build a ``ScanConfig``.

    A help flag anywhere wins over every other rule.
    """
    if any(arg in HELP_FLAGS for arg in argv):
        raise HelpRequested()

    if len(argv) < 2:
        raise ArgumentCountError("too few arguments")
    if len(argv) > 4:
        raise ArgumentCountError("too many arguments")

    if argv[1] == WORKERS_FLAG and len(argv) == 4:
        worker_count = _parse_worker_count(argv[2])
        address = _parse_address(argv[3])
    elif len(argv) == 2 and argv[1] != WORKERS_FLAG:
        try:
            address = ipaddress.ip_address(argv[1])
        except ValueError as exc:
            raise InvalidArgumentsError(f"unrecognised argument: {argv[1]!r}") from exc
        worker_count = DEFAULT_WORKERS
    else:
        raise InvalidArgumentsError("invalid arguments")

    config = ScanConfig(target_address=address, worker_count=worker_count)
    logger.debug("Resolved %s", config)
    return config
