"""Anchor instruction builders for the jackpot program.

Anchor identifies an instruction by the first eight bytes of
``sha256("global:<name>")`` followed by the Borsh-encoded arguments.  Account
order mirrors the program's ``#[derive(Accounts)]`` structs.
"""

from __future__ import annotations

import hashlib
import struct
from typing import Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from .addresses import ProgramAccounts
from .common.states import TransitionCommand
from .snapshot import RoundSnapshot

LAMPORTS_PER_SOL = 1_000_000_000
MIN_DEPOSIT_LAMPORTS = 50_000_000


class MissingAccount(ValueError):
    """An instruction needs an address that is neither configured nor observed."""


def discriminator(name: str, namespace: str = "global") -> bytes:
    """Return the 8-byte Anchor discriminator for ``namespace:name``."""

    return hashlib.sha256(f"{namespace}:{name}".encode("utf-8")).digest()[:8]


def _meta(pubkey: Pubkey, *, signer: bool = False, writable: bool = False) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=signer, is_writable=writable)


def _signed_call(name: str, accounts: ProgramAccounts, signer: Pubkey, data: bytes = b"") -> Instruction:
    """Instruction shaped ``pot (w), <signer> (s, w), system program``."""

    return Instruction(
        accounts.program_id,
        discriminator(name) + data,
        [
            _meta(accounts.pot, writable=True),
            _meta(signer, signer=True, writable=True),
            _meta(SYSTEM_PROGRAM_ID),
        ],
    )


def distribute_rewards_instruction(accounts: ProgramAccounts, snapshot: RoundSnapshot) -> Instruction:
    """Build ``distribute_rewards`` with every payout recipient as a writable account.

    Raises
    ------
    MissingAccount
        If the winner, end-game caller or a configured payout address is absent.
    """

    recipients: list[tuple[str, Optional[Pubkey]]] = [
        ("winner", Pubkey.from_string(snapshot.winner) if snapshot.winner else None),
        ("buyback", accounts.buyback),
        ("fee", accounts.fee),
        ("end game caller", Pubkey.from_string(snapshot.end_game_caller) if snapshot.end_game_caller else None),
    ]
    metas = [_meta(accounts.pot, writable=True), _meta(SYSTEM_PROGRAM_ID)]
    for label, key in recipients:
        if key is None:
            raise MissingAccount(f"distribute_rewards needs the {label} address")
        metas.append(_meta(key, writable=True))
    return Instruction(accounts.program_id, discriminator("distribute_rewards"), metas)


def build_transition(
    command: TransitionCommand,
    accounts: ProgramAccounts,
    signer: Pubkey,
    snapshot: Optional[RoundSnapshot] = None,
) -> Instruction:
    """Return the instruction implementing ``command``."""

    if command is TransitionCommand.DISTRIBUTE_REWARDS:
        if snapshot is None:
            raise MissingAccount("distribute_rewards needs the observed snapshot")
        return distribute_rewards_instruction(accounts, snapshot)
    return _signed_call(command.value, accounts, signer)


# ---------------------------------------------------------------------------
# One-shot helper instructions (used by scripts/)
# ---------------------------------------------------------------------------


def initialize_instruction(accounts: ProgramAccounts, admin: Pubkey) -> Instruction:
    return _signed_call("initialize", accounts, admin)


def deposit_instruction(accounts: ProgramAccounts, user: Pubkey, lamports: int) -> Instruction:
    if lamports < MIN_DEPOSIT_LAMPORTS:
        raise ValueError(f"minimum deposit is {MIN_DEPOSIT_LAMPORTS} lamports, got {lamports}")
    return _signed_call("deposit", accounts, user, struct.pack("<Q", lamports))


def admin_withdraw_instruction(accounts: ProgramAccounts, admin: Pubkey) -> Instruction:
    if accounts.fee is None:
        raise MissingAccount("admin_withdraw needs FEE_ADDRESS")
    return Instruction(
        accounts.program_id,
        discriminator("admin_withdraw"),
        [
            _meta(accounts.pot, writable=True),
            _meta(admin, signer=True, writable=True),
            _meta(accounts.fee, writable=True),
            _meta(SYSTEM_PROGRAM_ID),
        ],
    )


def sol_to_lamports(sol: float) -> int:
    return int(round(sol * LAMPORTS_PER_SOL))


__all__ = [
    "LAMPORTS_PER_SOL",
    "MIN_DEPOSIT_LAMPORTS",
    "MissingAccount",
    "discriminator",
    "build_transition",
    "distribute_rewards_instruction",
    "initialize_instruction",
    "deposit_instruction",
    "admin_withdraw_instruction",
    "sol_to_lamports",
]
