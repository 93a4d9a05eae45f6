#!/usr/bin/env python3
"""Emergency withdraw of all pot lamports to FEE_ADDRESS.

Admin-only; the program refuses it during an active round.
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
from JackpotControl.errors import FatalStartupError
from JackpotControl.instructions import MissingAccount, admin_withdraw_instruction
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
        print(f"withdrawPot failed: {exc}")
        return 1

    print(f"Pot PDA: {ctx.accounts.pot} | Bump: {ctx.accounts.bump}")
    print(f"Withdrawing all lamports from the pot to {ctx.accounts.fee}...")
    try:
        outcome = submit_once(ctx, admin_withdraw_instruction)
    except MissingAccount as exc:
        print(f"withdrawPot failed: {exc}")
        return 1
    print(outcome.describe())
    if not outcome.ok:
        print("withdrawPot failed")
        return 1
    print("Emergency withdraw successful")
    return 0


if __name__ == "__main__":
    sys.exit(main())
