import logging

import pytest

from JackpotControl.common.states import RoundState, TransitionCommand
from JackpotControl.planner import TransitionPlanner, plan
from JackpotControl.snapshot import RoundSnapshot

T = 1_700_000_000
WINNER = "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"


def snap(state, *, randomness=False, winner=None, last=T):
    return RoundSnapshot(state=state, last_transition_time=last, randomness_available=randomness, winner=winner)


@pytest.mark.parametrize("elapsed", [0, 1, 200, 359])
def test_inactive_waits_during_cooldown(elapsed):
    assert plan(snap(RoundState.INACTIVE), T + elapsed) is None


@pytest.mark.parametrize("elapsed", [360, 361, 10_000])
def test_inactive_starts_round_after_cooldown(elapsed):
    assert plan(snap(RoundState.INACTIVE), T + elapsed) is TransitionCommand.START_ROUND


def test_inactive_scenario_exact_boundary():
    assert plan(snap(RoundState.INACTIVE), T + 360) is TransitionCommand.START_ROUND


def test_active_boundary_is_inclusive():
    assert plan(snap(RoundState.ACTIVE), T + 119) is None
    assert plan(snap(RoundState.ACTIVE), T + 120) is TransitionCommand.END_ROUND


@pytest.mark.parametrize("elapsed", [0, 120, 360, 100_000])
def test_cooldown_without_randomness_waits_regardless_of_time(elapsed):
    assert plan(snap(RoundState.COOLDOWN), T + elapsed) is None


def test_cooldown_randomness_without_winner_resets():
    assert plan(snap(RoundState.COOLDOWN, randomness=True), T) is TransitionCommand.RESET_IF_NO_WINNER


def test_cooldown_randomness_with_winner_distributes():
    snapshot = snap(RoundState.COOLDOWN, randomness=True, winner=WINNER)
    assert plan(snapshot, T) is TransitionCommand.DISTRIBUTE_REWARDS


def test_unrecognized_state_logs_anomaly(caplog):
    snapshot = snap("unknown")
    with caplog.at_level(logging.WARNING):
        assert plan(snapshot, T + 10_000) is None
    assert "anomaly" in caplog.text
    assert "'unknown'" in caplog.text


def test_planner_uses_configured_durations():
    planner = TransitionPlanner(active_duration=10, cooldown_duration=20)
    assert planner.plan(snap(RoundState.ACTIVE), T + 10) is TransitionCommand.END_ROUND
    assert planner.plan(snap(RoundState.INACTIVE), T + 19) is None
    assert planner.plan(snap(RoundState.INACTIVE), T + 20) is TransitionCommand.START_ROUND


def test_wait_reason_reports_remaining_time():
    planner = TransitionPlanner()
    assert planner.wait_reason(snap(RoundState.ACTIVE), T + 100) == "round active (20s left)"
    assert planner.wait_reason(snap(RoundState.INACTIVE), T + 60) == "cooldown not over (300s left)"
    assert planner.wait_reason(snap(RoundState.COOLDOWN), T) == "waiting for randomness fulfillment"
