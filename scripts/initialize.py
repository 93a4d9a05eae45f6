#!/usr/bin/env python3
"""Initialize the jackpot pot account.

One-shot admin helper: creates the pot PDA with the game Inactive.  The
configured wallet becomes the pot admin.
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
from JackpotControl.instructions import initialize_instruction
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
        print(f"Initialization failed: {exc}")
        return 1

    print(f"Program ID: {ctx.accounts.program_id}")
    print(f"Pot PDA: {ctx.accounts.pot} | Bump: {ctx.accounts.bump}")
    outcome = submit_once(ctx, initialize_instruction)
    print(outcome.describe())
    if not outcome.ok:
        print("Initialization failed")
        return 1
    print("Initialization complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
