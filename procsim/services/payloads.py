"""
PROCSIM — Toy Payloads
========================
The small functions a work item may run once dispatched: message printing
and a handful of arithmetic utilities.

Each payload takes the raw argument strings and returns its output text.
Bad arguments raise ``PayloadArgumentError``; the scheduler core never sees
these errors.

Usage:
    registry = PayloadRegistry.with_defaults()
    output = registry.run("gcd", ("12", "18"))   # "6"
"""

from __future__ import annotations

import math
from typing import Callable, Sequence

from procsim.core.exceptions import PayloadArgumentError, UnknownCommandError
from procsim.core.logging import get_logger

logger = get_logger(__name__)

PayloadFn = Callable[[Sequence[str]], str]


# ── Argument helpers ────────────────────────────────────────────────────


def _ints(name: str, args: Sequence[str], *, minimum: int = 1) -> list[int]:
    if len(args) < minimum:
        raise PayloadArgumentError(
            f"'{name}' expects at least {minimum} integer argument(s), got {len(args)}."
        )
    try:
        return [int(a) for a in args]
    except ValueError:
        raise PayloadArgumentError(
            f"'{name}' expects integer arguments, got {list(args)!r}."
        ) from None


def _single_non_negative(name: str, args: Sequence[str]) -> int:
    if len(args) != 1:
        raise PayloadArgumentError(f"'{name}' expects exactly one argument.")
    (value,) = _ints(name, args)
    if value < 0:
        raise PayloadArgumentError(f"'{name}' expects a non-negative integer.")
    return value


# ── Payloads ────────────────────────────────────────────────────────────


def echo(args: Sequence[str]) -> str:
    return " ".join(args)


def add(args: Sequence[str]) -> str:
    return str(sum(_ints("sum", args)))


def gcd(args: Sequence[str]) -> str:
    values = _ints("gcd", args, minimum=2)
    return str(math.gcd(*values))


def nth_prime(args: Sequence[str]) -> str:
    """Return the n-th prime (1-based): ``prime 1`` is 2."""
    n = _single_non_negative("prime", args)
    if n == 0:
        raise PayloadArgumentError("'prime' is 1-based; 0 has no prime.")
    count = 0
    candidate = 1
    while count < n:
        candidate += 1
        if all(candidate % d for d in range(2, math.isqrt(candidate) + 1)):
            count += 1
    return str(candidate)


def fibonacci(args: Sequence[str]) -> str:
    n = _single_non_negative("fib", args)
    a, b = 0, 1
    for _ in range(n):
        a, b = b, a + b
    return str(a)


def noop(args: Sequence[str]) -> str:
    return ""


# ── Registry ────────────────────────────────────────────────────────────


class PayloadRegistry:
    """Name → payload function lookup."""

    def __init__(self) -> None:
        self._payloads: dict[str, PayloadFn] = {}

    @classmethod
    def with_defaults(cls) -> PayloadRegistry:
        registry = cls()
        registry.register("echo", echo)
        registry.register("print", echo)
        registry.register("sum", add)
        registry.register("gcd", gcd)
        registry.register("prime", nth_prime)
        registry.register("fib", fibonacci)
        registry.register("noop", noop)
        return registry

    def register(self, name: str, fn: PayloadFn) -> None:
        """Register (or replace) the payload run for ``name``."""
        self._payloads[name] = fn
        logger.debug("payloads.registered", command=name)

    def __contains__(self, name: object) -> bool:
        return name in self._payloads

    def names(self) -> list[str]:
        return sorted(self._payloads)

    def run(self, name: str, args: Sequence[str]) -> str:
        """
        Run the payload registered under ``name``.

        Raises ``UnknownCommandError`` or ``PayloadArgumentError``.
        """
        fn = self._payloads.get(name)
        if fn is None:
            raise UnknownCommandError(name)
        return fn(args)
