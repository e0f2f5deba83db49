"""
PROCSIM — Command Parser
==========================
Turns shell-like text lines into task requests.

Format (one command per line):
    [&] <command> [arg ...]

- A leading ``&`` (alone or glued to the command, as in ``&sum 1 2``)
  requests background execution; otherwise the request is foreground.
- Blank lines and lines starting with ``#`` are ignored.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from procsim.core.exceptions import CommandParseError
from procsim.scheduler.work_item import ItemClass, Payload

BACKGROUND_MARKER = "&"
COMMENT_MARKER = "#"


@dataclass(frozen=True, slots=True)
class TaskRequest:
    """A parsed command, ready for ``Scheduler.submit``."""

    item_class: ItemClass
    payload: Payload
    line_no: int | None = None


def parse_line(line: str, line_no: int | None = None) -> TaskRequest | None:
    """
    Parse one command line.

    Returns ``None`` for blank and comment lines.
    Raises ``CommandParseError`` when the line has no command name or
    unbalanced quoting.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_MARKER):
        return None

    item_class = ItemClass.FOREGROUND
    if stripped.startswith(BACKGROUND_MARKER):
        item_class = ItemClass.BACKGROUND
        stripped = stripped[len(BACKGROUND_MARKER):].strip()

    try:
        tokens = shlex.split(stripped)
    except ValueError as exc:
        raise CommandParseError(f"line {line_no}: {exc}") from None

    if not tokens:
        raise CommandParseError(
            f"line {line_no}: background marker without a command."
        )

    command, *args = tokens
    return TaskRequest(
        item_class=item_class,
        payload=Payload(command=command, args=tuple(args)),
        line_no=line_no,
    )


def parse_script(text: str) -> list[TaskRequest]:
    """Parse every line of ``text``; the first bad line raises."""
    requests: list[TaskRequest] = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        request = parse_line(line, line_no=line_no)
        if request is not None:
            requests.append(request)
    return requests
