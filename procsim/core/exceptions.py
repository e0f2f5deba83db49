"""
PROCSIM — Centralized Exception Taxonomy
=========================================
Category-based exception hierarchy with a severity property.

- Scheduler errors are raised inside ``ReadyStructure`` / ``WaitSet`` and
  converted to result values by ``Scheduler`` before its lock is released.
- Dispatch errors belong to the command/payload collaborators and are
  reported through ``DispatchResult``.

Usage:
    from procsim.core.exceptions import UnknownIdError

    raise UnknownIdError(item_id=7)
"""

from __future__ import annotations

from enum import StrEnum


class ErrorSeverity(StrEnum):
    """Error severity levels: LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProcsimError(Exception):
    """
    Base exception for all procsim-specific errors.

    Subclasses set ``severity`` and ``error_code``; ``item_id`` is carried
    for tracing when the error concerns a single work item.
    """

    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    error_code: str = "PROCSIM_ERROR"

    def __init__(self, message: str, *, item_id: int | None = None) -> None:
        self.item_id = item_id
        super().__init__(message)

    def __repr__(self) -> str:
        parts = [
            f"{self.__class__.__name__}(",
            f"error_code={self.error_code!r}, ",
            f"severity={self.severity.value!r}",
        ]
        if self.item_id is not None:
            parts.append(f", item_id={self.item_id!r}")
        parts.append(")")
        return "".join(parts)


# ── Scheduler Exceptions ──────────────────────────────────────────────────


class SchedulerError(ProcsimError):
    """Errors raised by the ready structure and wait set."""

    error_code = "SCHEDULER_ERROR"


class InvalidDurationError(SchedulerError):
    """Raised when a sleep is requested with a non-positive tick count."""

    severity = ErrorSeverity.LOW
    error_code = "INVALID_DURATION"

    def __init__(self, ticks: object, *, item_id: int | None = None) -> None:
        self.ticks = ticks
        super().__init__(
            f"Sleep duration must be a positive tick count, got {ticks!r}.",
            item_id=item_id,
        )


class UnknownIdError(SchedulerError):
    """Raised when an id is not present in the ready structure."""

    severity = ErrorSeverity.LOW
    error_code = "UNKNOWN_ID"

    def __init__(self, item_id: int) -> None:
        super().__init__(
            f"Work item {item_id} is not in the ready structure.",
            item_id=item_id,
        )


# ── Dispatch Exceptions ───────────────────────────────────────────────────


class DispatchError(ProcsimError):
    """Errors in the command and payload collaborators."""

    error_code = "DISPATCH_ERROR"


class CommandParseError(DispatchError):
    """Raised when a command line cannot be turned into a task request."""

    error_code = "COMMAND_PARSE_ERROR"


class UnknownCommandError(DispatchError):
    """Raised when no payload is registered under a command name."""

    error_code = "UNKNOWN_COMMAND"

    def __init__(self, command: str, *, item_id: int | None = None) -> None:
        self.command = command
        super().__init__(f"Unknown command '{command}'.", item_id=item_id)


class PayloadArgumentError(DispatchError):
    """Raised when a payload receives missing or malformed arguments."""

    error_code = "PAYLOAD_ARGUMENT_ERROR"


# ── Configuration Exceptions ──────────────────────────────────────────────


class ConfigurationError(ProcsimError):
    """Errors in configuration (missing settings, invalid values)."""

    severity = ErrorSeverity.HIGH
    error_code = "CONFIGURATION_ERROR"
