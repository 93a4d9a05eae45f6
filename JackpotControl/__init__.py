"""JackpotControl package.

Keeper components for the jackpot program: the pot account reader, the
transition planner, the transaction executor and the scheduler loop that ties
them together.  :func:`build_scheduler` wires them from a
:class:`config.settings.Settings` object.
"""

from .common.states import RoundState, SchedulerPhase, TransitionCommand
from .executor import Outcome, OutcomeKind, TransitionExecutor
from .keeper import build_scheduler
from .planner import TransitionPlanner, plan
from .scheduler import Scheduler
from .snapshot import RoundSnapshot
from .state_reader import StateReader

__all__ = [
    "RoundState",
    "SchedulerPhase",
    "TransitionCommand",
    "RoundSnapshot",
    "StateReader",
    "TransitionPlanner",
    "plan",
    "TransitionExecutor",
    "Outcome",
    "OutcomeKind",
    "Scheduler",
    "build_scheduler",
]
