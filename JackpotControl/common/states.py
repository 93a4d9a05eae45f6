"""Round state, transition command and scheduler phase enumerations.

This module centralises the enumerations shared by the reader, planner,
executor and scheduler.  It also maps the remote account's Borsh enum tags to
:class:`RoundState` members.
"""

from __future__ import annotations

from enum import Enum


class RoundState(str, Enum):
    """Lifecycle state of the remote round.

    The only valid edges are ``INACTIVE -> ACTIVE -> COOLDOWN -> INACTIVE``.
    """

    INACTIVE = "inactive"
    ACTIVE = "active"
    COOLDOWN = "cooldown"


# Borsh variant index of ``GameState`` in the pot account.
STATE_TAGS: dict[int, RoundState] = {
    0: RoundState.ACTIVE,
    1: RoundState.COOLDOWN,
    2: RoundState.INACTIVE,
}

NEXT_STATE: dict[RoundState, RoundState] = {
    RoundState.INACTIVE: RoundState.ACTIVE,
    RoundState.ACTIVE: RoundState.COOLDOWN,
    RoundState.COOLDOWN: RoundState.INACTIVE,
}


class TransitionCommand(str, Enum):
    """Idempotent state-transition requests understood by the remote program.

    The value is the Anchor instruction name.
    """

    START_ROUND = "start_round"
    END_ROUND = "end_round"
    DISTRIBUTE_REWARDS = "distribute_rewards"
    RESET_IF_NO_WINNER = "reset_if_no_winner"


class SchedulerPhase(str, Enum):
    """Phases of the keeper's own control loop."""

    IDLE = "idle"
    READING = "reading"
    PLANNING = "planning"
    EXECUTING = "executing"
    SLEEPING = "sleeping"


def state_from_tag(tag: int) -> RoundState:
    """Return the :class:`RoundState` for Borsh variant ``tag``.

    Raises
    ------
    KeyError
        If ``tag`` is not a known variant.  Callers translate this into a
        snapshot anomaly rather than guessing a state.
    """

    return STATE_TAGS[tag]


__all__ = [
    "RoundState",
    "TransitionCommand",
    "SchedulerPhase",
    "STATE_TAGS",
    "NEXT_STATE",
    "state_from_tag",
]
