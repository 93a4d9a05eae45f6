#!/usr/bin/env python3
"""Run the jackpot keeper.

Polls the jackpot program's pot account and submits the next round transition
whenever it is due.  Runs until interrupted (SIGINT/SIGTERM), then exits 0.
Exits 1 when the keeper cannot start (bad configuration, unreadable keypair,
unreachable RPC endpoint).
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Optional, Sequence

from concurrent_log_handler import ConcurrentRotatingFileHandler
from pydantic import ValidationError

from config.settings import Settings, load_settings
from JackpotControl.errors import FatalStartupError
from JackpotControl.keeper import build_scheduler
from JackpotControl.scheduler import current_cycle

logger = logging.getLogger("jackpot_keeper")

LOG_FORMAT = "%(asctime)s %(levelname)s [cycle=%(cycle)s] %(name)s: %(message)s"


class CycleFilter(logging.Filter):
    """Attach the scheduler's current cycle number to every record."""

    def filter(self, record):
        record.cycle = current_cycle.get()
        return True


def setup_logging(level: int | str = logging.INFO, log_dir: Optional[Path] = None) -> logging.Handler | None:
    """Configure console and rotating file logging.

    The file handler writes ``keeper.log`` under ``log_dir`` using
    :class:`ConcurrentRotatingFileHandler` so several keeper instances can
    share one log directory.  Returns the file handler (``None`` when
    ``log_dir`` is omitted) so tests can inspect it.
    """

    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)
    cycle_filter = CycleFilter()

    if not any(getattr(h, "_keeper_console", False) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        console.addFilter(cycle_filter)
        console._keeper_console = True  # type: ignore[attr-defined]
        root.addHandler(console)

    if log_dir is None:
        return None

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "keeper.log"
    existing = next(
        (
            h
            for h in root.handlers
            if isinstance(h, ConcurrentRotatingFileHandler)
            and Path(getattr(h, "baseFilename", "")) == log_file.resolve()
        ),
        None,
    )
    if existing is not None:
        return existing

    handler = ConcurrentRotatingFileHandler(
        str(log_file), maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    handler.setFormatter(formatter)
    handler.addFilter(cycle_filter)
    root.addHandler(handler)
    return handler


def install_signal_handlers(cancel: threading.Event) -> None:
    """Set ``cancel`` on SIGINT/SIGTERM."""

    def _handler(signum, _frame):
        logger.info("received %s; stopping after the current cycle", signal.Signals(signum).name)
        cancel.set()

    signal.signal(signal.SIGINT, _handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handler)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--env-file", type=Path, default=None, help="Load settings from this .env file.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, ...).")
    parser.add_argument(
        "--max-cycles",
        type=int,
        default=None,
        help="Stop after this many cycles (for smoke tests; default: run forever).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None, *, settings: Optional[Settings] = None) -> int:
    args = parse_args(argv)

    try:
        settings = settings or load_settings(args.env_file)
    except ValidationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error("invalid configuration:\n%s", exc)
        return 1

    setup_logging((args.log_level or settings.LOG_LEVEL).upper(), settings.logs_dir)

    cancel = threading.Event()
    try:
        scheduler = build_scheduler(settings, cancel=cancel)
    except FatalStartupError as exc:
        logger.error("cannot start keeper: %s", exc)
        return 1

    install_signal_handlers(cancel)
    scheduler.run(max_cycles=args.max_cycles)
    return 0


if __name__ == "__main__":
    sys.exit(main())
