"""
Payload Tests
==============
Validates the built-in payloads and registry lookup.
"""

from __future__ import annotations

import pytest

from procsim.core.exceptions import PayloadArgumentError, UnknownCommandError
from procsim.services.payloads import PayloadRegistry


@pytest.fixture
def registry() -> PayloadRegistry:
    return PayloadRegistry.with_defaults()


@pytest.mark.parametrize(
    ("command", "args", "expected"),
    [
        ("echo", ("hello", "world"), "hello world"),
        ("print", (), ""),
        ("sum", ("1", "2", "3"), "6"),
        ("sum", ("-4", "4"), "0"),
        ("gcd", ("12", "18"), "6"),
        ("gcd", ("7", "0", "21"), "7"),
        ("prime", ("1",), "2"),
        ("prime", ("10",), "29"),
        ("fib", ("0",), "0"),
        ("fib", ("10",), "55"),
        ("noop", ("ignored",), ""),
    ],
)
def test_payload_output(registry, command, args, expected):
    assert registry.run(command, args) == expected


@pytest.mark.parametrize(
    ("command", "args"),
    [
        ("sum", ()),
        ("sum", ("one",)),
        ("gcd", ("4",)),
        ("prime", ("0",)),
        ("prime", ("1", "2")),
        ("fib", ("-1",)),
    ],
)
def test_bad_arguments(registry, command, args):
    with pytest.raises(PayloadArgumentError):
        registry.run(command, args)


def test_unknown_command(registry):
    with pytest.raises(UnknownCommandError) as exc_info:
        registry.run("nope", ())
    assert exc_info.value.command == "nope"


def test_register_and_names():
    registry = PayloadRegistry()
    assert registry.names() == []

    registry.register("shout", lambda args: " ".join(args).upper())
    assert "shout" in registry
    assert registry.run("shout", ("hi",)) == "HI"
    assert registry.names() == ["shout"]


def test_defaults_registered(registry):
    assert registry.names() == ["echo", "fib", "gcd", "noop", "prime", "print", "sum"]
