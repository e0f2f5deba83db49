"""
PROCSIM — Work Item State Machine
===================================
Lifecycle of a single work item.

    CREATED → READY → {RUNNING | DETACHED} → DONE
    READY / RUNNING → SLEEPING → READY

Invariants enforced:
- Undefined transitions raise ``InvalidTransitionError``
- DONE is terminal; completed items are discarded, never recycled
"""

from __future__ import annotations

from enum import StrEnum


class ItemState(StrEnum):
    """Work item lifecycle states."""

    CREATED = "CREATED"
    READY = "READY"
    RUNNING = "RUNNING"
    DETACHED = "DETACHED"
    SLEEPING = "SLEEPING"
    DONE = "DONE"


TERMINAL_STATES: frozenset[ItemState] = frozenset({ItemState.DONE})

# Exhaustive forward-transition whitelist.
VALID_TRANSITIONS: dict[ItemState, frozenset[ItemState]] = {
    ItemState.CREATED: frozenset({ItemState.READY}),
    ItemState.READY: frozenset(
        {ItemState.RUNNING, ItemState.DETACHED, ItemState.SLEEPING}
    ),
    ItemState.RUNNING: frozenset({ItemState.SLEEPING, ItemState.DONE}),
    ItemState.DETACHED: frozenset({ItemState.DONE}),
    ItemState.SLEEPING: frozenset({ItemState.READY}),
    ItemState.DONE: frozenset(),
}


class InvalidTransitionError(Exception):
    """Raised when an undefined transition is attempted."""

    def __init__(self, from_state: ItemState, to_state: ItemState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        allowed = VALID_TRANSITIONS.get(from_state, frozenset())
        super().__init__(
            f"Invalid transition {from_state.value} → {to_state.value}. "
            f"Allowed: {sorted(s.value for s in allowed)}."
        )


class ItemStateMachine:
    """Stateless validator for work item transitions."""

    @staticmethod
    def validate_transition(from_state: ItemState, to_state: ItemState) -> bool:
        """
        Return ``True`` if the transition is valid.

        Raises ``InvalidTransitionError`` if the transition is undefined.
        """
        if to_state not in VALID_TRANSITIONS[from_state]:
            raise InvalidTransitionError(from_state, to_state)
        return True

    @staticmethod
    def get_allowed_transitions(state: ItemState) -> frozenset[ItemState]:
        """Return the set of valid next states for the given state."""
        return VALID_TRANSITIONS[state]

    @staticmethod
    def is_terminal(state: ItemState) -> bool:
        return state in TERMINAL_STATES
