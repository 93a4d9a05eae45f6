#!/usr/bin/env python3
"""Manually start a game round.

Submits ``start_round`` once.  The program rejects it unless the game is
Inactive and the cooldown has passed; the keeper does the same automatically.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import load_settings
from JackpotControl.common.states import TransitionCommand
from JackpotControl.errors import FatalStartupError
from JackpotControl.instructions import build_transition
from JackpotControl.keeper import connect, submit_once


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--env-file", type=Path, default=None, help="Load settings from this .env file.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    settings = load_settings(args.env_file)
    try:
        ctx = connect(settings)
    except FatalStartupError as exc:
        print(f"Game round failed to start: {exc}")
        return 1

    print(f"Pot PDA: {ctx.accounts.pot} | Bump: {ctx.accounts.bump}")
    outcome = submit_once(
        ctx, lambda accounts, signer: build_transition(TransitionCommand.START_ROUND, accounts, signer)
    )
    print(outcome.describe())
    if not outcome.ok:
        print("Game round failed to start")
        return 1
    print("Game round started")
    return 0


if __name__ == "__main__":
    sys.exit(main())
