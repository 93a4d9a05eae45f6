"""Shared enumerations."""

from .states import NEXT_STATE, RoundState, SchedulerPhase, TransitionCommand, state_from_tag

__all__ = ["RoundState", "TransitionCommand", "SchedulerPhase", "NEXT_STATE", "state_from_tag"]
