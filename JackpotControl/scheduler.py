"""The keeper's control loop.

Each cycle runs strictly in sequence::

    IDLE -> READING -> PLANNING -> EXECUTING -> SLEEPING -> IDLE

A cycle finishes completely before the next one starts, so at most one
transition is ever in flight.  Every failure is caught and logged inside the
cycle; only the cancel event ends :meth:`Scheduler.run`, and it is checked at
cycle boundaries only.
"""

from __future__ import annotations

import contextvars
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .common.states import NEXT_STATE, RoundState, SchedulerPhase, TransitionCommand
from .errors import SnapshotAnomaly, Unavailable
from .executor import Outcome, OutcomeKind, TransitionExecutor
from .planner import TransitionPlanner
from .snapshot import RoundSnapshot
from .state_reader import StateReader

logger = logging.getLogger(__name__)

# Current cycle number, read by the log formatter's filter.
current_cycle: contextvars.ContextVar[str] = contextvars.ContextVar("current_cycle", default="-")

DEFAULT_POLL_INTERVAL = 5.0
STREAK_WARNING = 3


@dataclass
class CycleReport:
    """What happened during one cycle (returned for tests and diagnostics)."""

    cycle: int
    snapshot: Optional[RoundSnapshot] = None
    command: Optional[TransitionCommand] = None
    outcome: Optional[Outcome] = None
    error: Optional[str] = None


class Scheduler:
    """Poll, plan and execute in a cancellable loop.

    Parameters
    ----------
    reader, planner, executor:
        The three per-cycle collaborators.
    poll_interval:
        Seconds to sleep between cycles.
    clock:
        Returns the current epoch time in seconds.
    cancel:
        Event that ends :meth:`run` when set.  A fresh one is created when
        omitted.
    wait:
        ``wait(seconds)`` used for the inter-cycle sleep.  Defaults to
        ``cancel.wait`` so that a cancellation wakes the loop immediately.
    """

    def __init__(
        self,
        reader: StateReader,
        planner: TransitionPlanner,
        executor: TransitionExecutor,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.time,
        cancel: Optional[threading.Event] = None,
        wait: Optional[Callable[[float], object]] = None,
    ) -> None:
        self.reader = reader
        self.planner = planner
        self.executor = executor
        self.poll_interval = poll_interval
        self.clock = clock
        self.cancel = cancel or threading.Event()
        self._wait = wait or self.cancel.wait

        self.phase = SchedulerPhase.IDLE
        self.cycles = 0
        self.failure_streak = 0
        self.last_snapshot: Optional[RoundSnapshot] = None

    # ------------------------------------------------------------------ #
    # Loop control
    # ------------------------------------------------------------------ #
    def stop(self) -> None:
        """Request cancellation; the loop exits at the next cycle boundary."""

        self.cancel.set()

    def run(self, max_cycles: Optional[int] = None) -> int:
        """Run cycles until cancelled (or ``max_cycles`` cycles completed).

        Returns the number of cycles completed by this call.
        """

        completed = 0
        logger.info("scheduler started poll_interval=%gs", self.poll_interval)
        while not self.cancel.is_set():
            self.run_cycle()
            completed += 1
            if max_cycles is not None and completed >= max_cycles:
                break
            if self.cancel.is_set():
                break
            self.phase = SchedulerPhase.SLEEPING
            self._wait(self.poll_interval)
            self.phase = SchedulerPhase.IDLE
        self.phase = SchedulerPhase.IDLE
        logger.info("scheduler stopped after %d cycle(s)", completed)
        return completed

    # ------------------------------------------------------------------ #
    # One cycle
    # ------------------------------------------------------------------ #
    def run_cycle(self) -> CycleReport:
        """Run one read -> plan -> execute pass.  Never raises."""

        self.cycles += 1
        report = CycleReport(cycle=self.cycles)
        token = current_cycle.set(str(self.cycles))
        try:
            self._cycle(report)
        except Exception as exc:
            report.error = "unexpected"
            logger.exception("unexpected error in cycle: %s", exc)
        finally:
            current_cycle.reset(token)
            self.phase = SchedulerPhase.IDLE
        return report

    def _cycle(self, report: CycleReport) -> None:
        self.phase = SchedulerPhase.READING
        try:
            snapshot = self.reader.fetch()
        except Unavailable as exc:
            report.error = "unavailable"
            logger.warning("phase=reading result=unavailable reason=%s", exc)
            return
        except SnapshotAnomaly as exc:
            report.error = "anomaly"
            logger.error("anomaly: phase=reading undecodable snapshot: %s", exc)
            return

        report.snapshot = snapshot
        self._check_edge(self.last_snapshot, snapshot)
        self.last_snapshot = snapshot
        now = int(self.clock())
        logger.info("phase=reading %s now=%d elapsed=%d", snapshot.describe(), now, snapshot.elapsed(now))

        self.phase = SchedulerPhase.PLANNING
        command = self.planner.plan(snapshot, now)
        if command is None:
            logger.info("phase=planning decision=wait reason=%s", self.planner.wait_reason(snapshot, now))
            return
        report.command = command
        logger.info("phase=planning decision=%s", command.value)

        self.phase = SchedulerPhase.EXECUTING
        outcome = self.executor.execute(command, snapshot)
        report.outcome = outcome
        self._log_outcome(command, outcome)

    def _check_edge(self, previous: Optional[RoundSnapshot], snapshot: RoundSnapshot) -> None:
        """Warn when consecutive observations skip a state of the round cycle."""

        if previous is None or previous.state is snapshot.state:
            return
        if not isinstance(previous.state, RoundState) or not isinstance(snapshot.state, RoundState):
            return
        expected = NEXT_STATE[previous.state]
        if snapshot.state is not expected:
            logger.warning(
                "phase=reading state moved %s -> %s without observing %s",
                previous.state.value,
                snapshot.state.value,
                expected.value,
            )

    def _log_outcome(self, command: TransitionCommand, outcome: Outcome) -> None:
        message = "phase=executing command=%s %s"
        if outcome.kind is OutcomeKind.CONFIRMED:
            self.failure_streak = 0
            logger.info(message, command.value, outcome.describe())
            return

        self.failure_streak += 1
        if outcome.kind is OutcomeKind.REJECTED and outcome.expected:
            logger.info(message, command.value, outcome.describe())
        else:
            logger.warning(message, command.value, outcome.describe())
        if self.failure_streak >= STREAK_WARNING:
            logger.warning(
                "%d consecutive transitions without confirmation (last: %s %s)",
                self.failure_streak,
                command.value,
                outcome.kind.value,
            )


__all__ = ["Scheduler", "CycleReport", "current_cycle", "DEFAULT_POLL_INTERVAL", "STREAK_WARNING"]
