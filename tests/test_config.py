from __future__ import annotations

import ipaddress
import math

import pytest
from pydantic import ValidationError

from portsniffer import config
from portsniffer.config import (
    AddressParseError,
    ArgumentCountError,
    ConfigError,
    HelpRequested,
    InvalidArgumentsError,
    ScanConfig,
    ThreadCountParseError,
)


@pytest.mark.parametrize(
    "argv",
    [
        ["prog", "-h"],
        ["prog", "--help"],
        ["prog", "-j", "10", "-h"],
        ["prog", "not-an-ip", "--help"],
        ["prog", "-j", "abc", "x", "y", "-h"],
    ],
)
def test_help_flag_wins_over_everything(argv):
    with pytest.raises(HelpRequested):
        config.resolve(argv)


def test_single_address_uses_default_workers():
    result = config.resolve(["prog", "10.0.0.1"])
    assert result.worker_count == 4
    assert result.target_address == ipaddress.ip_address("10.0.0.1")
    assert result.connect_timeout is None


def test_explicit_worker_count():
    result = config.resolve(["prog", "-j", "50", "10.0.0.1"])
    assert result.worker_count == 50
    assert result.target_address == ipaddress.ip_address("10.0.0.1")


@pytest.mark.parametrize("value,expected", [("65535", 65535), ("+8", 8), ("1", 1)])
def test_worker_count_bounds_and_sign_accepted(value, expected):
    result = config.resolve(["prog", "-j", value, "10.0.0.1"])
    assert result.worker_count == expected


def test_longest_finite_timeout_accepted():
    result = ScanConfig(target_address="127.0.0.1", connect_timeout=config.MAX_CONNECT_TIMEOUT)
    assert result.connect_timeout == config.MAX_CONNECT_TIMEOUT


def test_ipv6_address_accepted():
    result = config.resolve(["prog", "-j", "8", "::1"])
    assert result.target_address == ipaddress.IPv6Address("::1")


@pytest.mark.parametrize("value", ["abc", "0", "65536", "-3", "1.5", ""])
def test_bad_worker_count(value):
    with pytest.raises(ThreadCountParseError):
        config.resolve(["prog", "-j", value, "10.0.0.1"])


def test_bad_address_after_worker_count():
    with pytest.raises(AddressParseError):
        config.resolve(["prog", "-j", "50", "not-an-ip"])


@pytest.mark.parametrize("argv", [["prog"], ["prog", "-j", "1", "10.0.0.1", "extra"]])
def test_argument_count(argv):
    with pytest.raises(ArgumentCountError):
        config.resolve(argv)


@pytest.mark.parametrize(
    "argv",
    [
        ["prog", "not-an-ip"],
        ["prog", "-j"],
        ["prog", "-j", "10"],
        ["prog", "10.0.0.1", "extra"],
        ["prog", "-x", "10", "10.0.0.1"],
    ],
)
def test_unrecognised_shapes(argv):
    with pytest.raises(InvalidArgumentsError):
        config.resolve(argv)


def test_errors_share_a_base_class():
    for cls in (ArgumentCountError, ThreadCountParseError, AddressParseError, InvalidArgumentsError):
        assert issubclass(cls, ConfigError)
    assert not issubclass(HelpRequested, ConfigError)


def test_scan_config_is_frozen():
    result = ScanConfig(target_address="127.0.0.1")
    with pytest.raises(ValidationError):
        result.worker_count = 10


@pytest.mark.parametrize(
    "kwargs",
    [
        {"worker_count": 0},
        {"connect_timeout": 0},
        {"connect_timeout": math.inf},
        {"connect_timeout": math.nan},
        {"connect_timeout": config.MAX_CONNECT_TIMEOUT + 1},
    ],
)
def test_scan_config_rejects_unusable_values(kwargs):
    with pytest.raises(ValidationError):
        ScanConfig(target_address="127.0.0.1", **kwargs)


def test_usage_text_mentions_invocation_forms():
    text = config.usage_text("portsniffer")
    assert "portsniffer" in text
    assert "-j WORKERS" in text
    assert "--help" in text
