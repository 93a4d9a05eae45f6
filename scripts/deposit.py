#!/usr/bin/env python3
"""Deposit SOL into the active round's pot.

Only accepted while a round is Active.  The minimum deposit is 0.05 SOL.
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
from JackpotControl.instructions import MIN_DEPOSIT_LAMPORTS, deposit_instruction, sol_to_lamports
from JackpotControl.keeper import connect, submit_once


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--env-file", type=Path, default=None, help="Load settings from this .env file.")
    amount = parser.add_mutually_exclusive_group()
    amount.add_argument("--sol", type=float, default=None, help="Amount in SOL (default 0.05).")
    amount.add_argument("--lamports", type=int, default=None, help="Amount in lamports.")
    args = parser.parse_args(argv)
    if args.lamports is None:
        args.lamports = sol_to_lamports(args.sol if args.sol is not None else 0.05)
    if args.lamports < MIN_DEPOSIT_LAMPORTS:
        parser.error(f"minimum deposit is {MIN_DEPOSIT_LAMPORTS} lamports (0.05 SOL)")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    settings = load_settings(args.env_file)
    try:
        ctx = connect(settings)
    except FatalStartupError as exc:
        print(f"Deposit script failed: {exc}")
        return 1

    print(f"Pot PDA: {ctx.accounts.pot} | Bump: {ctx.accounts.bump}")
    print(f"Depositing {args.lamports} lamports into the pot...")
    outcome = submit_once(ctx, lambda accounts, user: deposit_instruction(accounts, user, args.lamports))
    print(outcome.describe())
    if not outcome.ok:
        print("Deposit script failed")
        return 1
    print("Deposit script completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
