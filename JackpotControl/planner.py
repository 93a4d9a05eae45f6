"""Decide the next transition command from a snapshot.

``plan`` is a pure function of the snapshot, the current time and the two
configured durations.  Elapsed-time comparisons are inclusive, so a command is
due on the exact boundary second.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .common.states import RoundState, TransitionCommand
from .snapshot import RoundSnapshot

logger = logging.getLogger(__name__)

DEFAULT_ACTIVE_DURATION = 120
DEFAULT_COOLDOWN_DURATION = 360


def plan(
    snapshot: RoundSnapshot,
    now: int,
    *,
    active_duration: int = DEFAULT_ACTIVE_DURATION,
    cooldown_duration: int = DEFAULT_COOLDOWN_DURATION,
) -> Optional[TransitionCommand]:
    """Return the command to attempt for ``snapshot`` at ``now``, or ``None`` to wait."""

    state = snapshot.state
    elapsed = snapshot.elapsed(now)

    if state is RoundState.INACTIVE:
        return TransitionCommand.START_ROUND if elapsed >= cooldown_duration else None
    if state is RoundState.ACTIVE:
        return TransitionCommand.END_ROUND if elapsed >= active_duration else None
    if state is RoundState.COOLDOWN:
        if not snapshot.randomness_available:
            return None
        if snapshot.winner is None:
            return TransitionCommand.RESET_IF_NO_WINNER
        return TransitionCommand.DISTRIBUTE_REWARDS

    logger.warning("anomaly: unrecognized round state %r; no command planned", state)
    return None


@dataclass(frozen=True)
class TransitionPlanner:
    """:func:`plan` bound to configured durations."""

    active_duration: int = DEFAULT_ACTIVE_DURATION
    cooldown_duration: int = DEFAULT_COOLDOWN_DURATION

    def plan(self, snapshot: RoundSnapshot, now: int) -> Optional[TransitionCommand]:
        return plan(
            snapshot,
            now,
            active_duration=self.active_duration,
            cooldown_duration=self.cooldown_duration,
        )

    def wait_reason(self, snapshot: RoundSnapshot, now: int) -> str:
        """Human readable reason why no command is due (for logging)."""

        elapsed = snapshot.elapsed(now)
        if snapshot.state is RoundState.INACTIVE:
            return f"cooldown not over ({max(0, self.cooldown_duration - elapsed)}s left)"
        if snapshot.state is RoundState.ACTIVE:
            return f"round active ({max(0, self.active_duration - elapsed)}s left)"
        if snapshot.state is RoundState.COOLDOWN:
            return "waiting for randomness fulfillment"
        return "unrecognized state"


__all__ = ["plan", "TransitionPlanner", "DEFAULT_ACTIVE_DURATION", "DEFAULT_COOLDOWN_DURATION"]
