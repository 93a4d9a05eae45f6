"""Shared fakes for the keeper tests.

:class:`FakeJackpotProgram` models the remote program closely enough to
enforce the real preconditions, and :class:`FakeRpc` exposes it through the
same methods as :class:`utils.rpc.RpcClient`.  Transactions are real
``solders`` transactions so the executor's build/sign path is exercised.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from typing import Optional

from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from JackpotControl.common.states import RoundState
from JackpotControl.errors import RpcResponseError, RpcTransportError
from JackpotControl.instructions import discriminator
from JackpotControl.snapshot import POT_DISCRIMINATOR

TAGS = {RoundState.ACTIVE: 0, RoundState.COOLDOWN: 1, RoundState.INACTIVE: 2}

ERROR_CODES = {
    "GameInactive": 6000,
    "MinDeposit": 6001,
    "InvalidState": 6002,
    "CooldownActive": 6003,
    "NoDeposits": 6004,
    "RandomnessNotAvailable": 6005,
}


def new_address() -> str:
    return str(Keypair().pubkey())


def encode_pot(
    state: RoundState | None = RoundState.INACTIVE,
    last_reset: int = 0,
    *,
    deposits: list[tuple[str, int, int]] | None = None,
    randomness: Optional[bytes] = None,
    end_game_caller: Optional[str] = None,
    admin: Optional[str] = None,
    total_amount: Optional[int] = None,
    tag: Optional[int] = None,
    padding: int = 0,
) -> bytes:
    """Serialize a pot account the way Anchor lays it out."""

    deposits = deposits or []
    admin_key = Pubkey.from_string(admin) if admin else Pubkey.default()
    if total_amount is None:
        total_amount = sum(amount for _, amount, _ in deposits)

    out = bytearray(POT_DISCRIMINATOR)
    out += bytes(admin_key)
    out += bytes([255])
    out += struct.pack("<Q", total_amount)
    out += struct.pack("<I", len(deposits))
    for depositor, amount, ts in deposits:
        out += bytes(Pubkey.from_string(depositor))
        out += struct.pack("<Qq", amount, ts)
    out += bytes([TAGS[state] if tag is None else tag])
    out += struct.pack("<q", last_reset)
    if randomness is None:
        out += b"\x00"
    else:
        out += b"\x01" + bytes(randomness)
    if end_game_caller is None:
        out += b"\x00"
    else:
        out += b"\x01" + bytes(Pubkey.from_string(end_game_caller))
    out += bytes(padding)
    return bytes(out)


class FakeClock:
    """Epoch clock advanced explicitly by the test."""

    def __init__(self, now: int = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return float(self.now)

    def advance(self, seconds: float) -> None:
        self.now += int(seconds)


@dataclass
class FakeJackpotProgram:
    """In-memory jackpot program enforcing the on-chain preconditions."""

    clock: FakeClock
    state: RoundState = RoundState.INACTIVE
    last_reset: int = 0
    deposits: list[tuple[str, int, int]] = field(default_factory=list)
    randomness: Optional[bytes] = None
    end_game_caller: Optional[str] = None
    auto_randomness: bool = True
    active_duration: int = 120
    cooldown_duration: int = 360
    applied: list[str] = field(default_factory=list)

    def account_data(self) -> bytes:
        return encode_pot(
            self.state,
            self.last_reset,
            deposits=self.deposits,
            randomness=self.randomness,
            end_game_caller=self.end_game_caller,
            padding=64,
        )

    def deposit(self, depositor: str, amount: int = 50_000_000) -> None:
        self.deposits.append((depositor, amount, self.clock.now))

    def apply(self, name: str, signer: str) -> Optional[str]:
        """Run instruction ``name``; return an error name or ``None`` on success."""

        now = self.clock.now
        if name == "start_round":
            if self.state is not RoundState.INACTIVE:
                return "InvalidState"
            if now - self.last_reset < self.cooldown_duration:
                return "CooldownActive"
            self.state = RoundState.ACTIVE
            self.last_reset = now
        elif name == "end_round":
            if self.state is not RoundState.ACTIVE:
                return "InvalidState"
            if now - self.last_reset < self.active_duration:
                return "CooldownActive"
            if self.auto_randomness:
                self.randomness = hashlib.sha256(str(now).encode()).digest()
            self.end_game_caller = signer
            self.state = RoundState.COOLDOWN
        elif name == "distribute_rewards":
            if self.state is not RoundState.COOLDOWN:
                return "InvalidState"
            if self.randomness is None:
                return "RandomnessNotAvailable"
            if not self.deposits:
                return "NoDeposits"
            self._reset(now)
        elif name == "reset_if_no_winner":
            if self.state is not RoundState.COOLDOWN:
                return "InvalidState"
            if self.randomness is None:
                return "RandomnessNotAvailable"
            if self.deposits:
                return "InvalidState"
            self._reset(now)
        else:
            raise AssertionError(f"unexpected instruction {name}")
        self.applied.append(name)
        return None

    def _reset(self, now: int) -> None:
        self.state = RoundState.INACTIVE
        self.deposits.clear()
        self.randomness = None
        self.end_game_caller = None
        self.last_reset = now


INSTRUCTION_NAMES = {
    discriminator(name): name
    for name in ("start_round", "end_round", "distribute_rewards", "reset_if_no_winner")
}


class FakeRpc:
    """Duck-typed stand-in for :class:`utils.rpc.RpcClient`."""

    def __init__(self, program: Optional[FakeJackpotProgram] = None) -> None:
        self.program = program
        self.sent: list[str] = []
        self.transactions: list[Transaction] = []
        self.account: Optional[bytes] = None
        self.read_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.status: Optional[dict] = {"confirmationStatus": "confirmed", "err": None}
        self.reads = 0

    def get_version(self) -> dict:
        return {"solana-core": "1.18.0"}

    def get_account_data(self, address: str) -> Optional[bytes]:
        self.reads += 1
        if self.read_error is not None:
            raise self.read_error
        if self.program is not None:
            return self.program.account_data()
        return self.account

    def get_latest_blockhash(self) -> str:
        return str(Hash.new_unique())

    def send_transaction(self, raw: bytes) -> str:
        tx = Transaction.from_bytes(raw)
        self.transactions.append(tx)
        name = INSTRUCTION_NAMES.get(bytes(tx.message.instructions[0].data[:8]), "unknown")
        self.sent.append(name)
        if self.send_error is not None:
            raise self.send_error
        if self.program is not None:
            error = self.program.apply(name, str(tx.message.account_keys[0]))
            if error is not None:
                raise RpcResponseError(
                    -32002,
                    "Transaction simulation failed: Error processing Instruction 0",
                    {"err": {"InstructionError": [0, {"Custom": ERROR_CODES[error]}]}, "logs": []},
                )
        return str(tx.signatures[0])

    def get_signature_status(self, signature: str) -> Optional[dict]:
        return self.status


def transport_error() -> RpcTransportError:
    return RpcTransportError("getAccountInfo failed: connection refused")
