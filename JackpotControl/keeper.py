"""Startup wiring shared by the keeper entry point and the helper scripts.

Everything that can fail permanently (bad addresses, unreadable keypair,
unreachable endpoint) fails here, before the loop starts, as
:class:`~JackpotControl.errors.FatalStartupError`.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from solana.rpc.api import Client
from solders.instruction import Instruction
from solders.pubkey import Pubkey

from config.settings import Settings
from utils.rpc import RpcClient
from utils.signer import KeypairSigner, Signer

from .addresses import ProgramAccounts
from .errors import FatalStartupError, RpcError
from .executor import Outcome, TransitionExecutor
from .planner import TransitionPlanner
from .scheduler import Scheduler
from .state_reader import StateReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeeperContext:
    """Resolved collaborators for one keeper process."""

    settings: Settings
    rpc: RpcClient
    signer: Signer
    accounts: ProgramAccounts


def connect(
    settings: Settings,
    *,
    signer: Optional[Signer] = None,
    client: Optional[Client] = None,
    probe: bool = True,
) -> KeeperContext:
    """Resolve addresses, load the signer and (optionally) probe the endpoint.

    Raises
    ------
    FatalStartupError
        If any of the steps fails.
    """

    accounts = ProgramAccounts.resolve(
        settings.PROGRAM_ID,
        seed=settings.POT_SEED,
        buyback=settings.BUYBACK_ADDRESS,
        fee=settings.FEE_ADDRESS,
    )
    logger.info("pot address %s bump=%d program=%s", accounts.pot, accounts.bump, accounts.program_id)

    if signer is None:
        try:
            signer = KeypairSigner.from_file(settings.ANCHOR_WALLET)
        except ValueError as exc:
            raise FatalStartupError(str(exc)) from exc
    logger.info("signing as %s", signer.pubkey)

    rpc = RpcClient(
        settings.ANCHOR_PROVIDER_URL,
        timeout=settings.RPC_TIMEOUT,
        commitment=settings.COMMITMENT,
        client=client,
    )
    if probe:
        try:
            version = rpc.get_version()
        except RpcError as exc:
            raise FatalStartupError(f"cannot reach {settings.ANCHOR_PROVIDER_URL}: {exc}") from exc
        logger.info("connected to %s (%s)", settings.ANCHOR_PROVIDER_URL, version.get("solana-core", "unknown"))

    if accounts.buyback is None or accounts.fee is None:
        logger.warning("BUYBACK_ADDRESS/FEE_ADDRESS not configured; distribute_rewards will be rejected locally")

    return KeeperContext(settings=settings, rpc=rpc, signer=signer, accounts=accounts)


def build_scheduler(
    settings: Settings,
    *,
    context: Optional[KeeperContext] = None,
    cancel: Optional[threading.Event] = None,
) -> Scheduler:
    """Construct a :class:`Scheduler` from ``settings``."""

    ctx = context or connect(settings)
    return Scheduler(
        StateReader(ctx.rpc, ctx.accounts.pot),
        TransitionPlanner(
            active_duration=settings.ACTIVE_DURATION,
            cooldown_duration=settings.COOLDOWN_DURATION,
        ),
        TransitionExecutor(
            ctx.rpc,
            ctx.signer,
            ctx.accounts,
            confirm_timeout=settings.CONFIRM_TIMEOUT,
        ),
        poll_interval=settings.POLL_INTERVAL,
        cancel=cancel,
    )


def submit_once(
    context: KeeperContext,
    build: Callable[[ProgramAccounts, Pubkey], Instruction],
) -> Outcome:
    """Build one instruction with ``build(accounts, signer)`` and submit it.

    Used by the one-shot helper scripts; shares the executor's signing,
    submission and classification path.
    """

    executor = TransitionExecutor(
        context.rpc,
        context.signer,
        context.accounts,
        confirm_timeout=context.settings.CONFIRM_TIMEOUT,
    )
    return executor.submit(build(context.accounts, context.signer.pubkey))


__all__ = ["KeeperContext", "connect", "build_scheduler", "submit_once"]
