"""Round snapshot model and the pot account decoder.

The decoder is closed: it accepts exactly the Anchor ``Pot``
layout and raises :class:`~JackpotControl.errors.SnapshotAnomaly` for anything
else (wrong discriminator, unknown state tag, truncated data).
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass
from typing import Optional

from solders.pubkey import Pubkey

from .common.states import RoundState, state_from_tag
from .errors import SnapshotAnomaly

POT_DISCRIMINATOR = hashlib.sha256(b"account:Pot").digest()[:8]

_PUBKEY_LEN = 32
_DEPOSIT_RECORD_LEN = _PUBKEY_LEN + 8 + 8


@dataclass(frozen=True)
class RoundSnapshot:
    """Point-in-time view of the remote round.

    Only ``state``, ``last_transition_time``, ``randomness_available`` and
    ``winner`` drive decisions.  The remaining fields are carried for logging
    and for wiring the payout accounts of ``distribute_rewards``.
    """

    state: RoundState
    last_transition_time: int
    randomness_available: bool = False
    winner: Optional[str] = None
    total_amount: int = 0
    deposit_count: int = 0
    end_game_caller: Optional[str] = None
    admin: Optional[str] = None

    def elapsed(self, now: int) -> int:
        """Seconds spent in the current state as of ``now``."""

        return int(now) - int(self.last_transition_time)

    def describe(self) -> str:
        state = self.state.value if isinstance(self.state, RoundState) else repr(self.state)
        return (
            f"state={state} last_transition={self.last_transition_time} "
            f"randomness={'yes' if self.randomness_available else 'no'} "
            f"winner={self.winner or '-'} deposits={self.deposit_count} pot={self.total_amount}"
        )


class _Cursor:
    """Sequential little-endian reader over account bytes."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def take(self, size: int, what: str) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise SnapshotAnomaly(
                f"pot account truncated reading {what}: need {end} bytes, have {len(self.data)}"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u8(self, what: str) -> int:
        return self.take(1, what)[0]

    def u32(self, what: str) -> int:
        return struct.unpack("<I", self.take(4, what))[0]

    def u64(self, what: str) -> int:
        return struct.unpack("<Q", self.take(8, what))[0]

    def i64(self, what: str) -> int:
        return struct.unpack("<q", self.take(8, what))[0]

    def pubkey(self, what: str) -> str:
        return str(Pubkey.from_bytes(self.take(_PUBKEY_LEN, what)))

    def option_tag(self, what: str) -> bool:
        tag = self.u8(what)
        if tag not in (0, 1):
            raise SnapshotAnomaly(f"invalid option tag {tag} for {what}")
        return tag == 1


def pick_winner(randomness: Optional[bytes], depositors: list[str]) -> Optional[str]:
    """Return the depositor selected by ``randomness``.

    The first randomness byte modulo the number of deposits indexes the
    winning deposit.  No randomness or no deposits means no winner.
    """

    if not randomness or not depositors:
        return None
    return depositors[randomness[0] % len(depositors)]


def decode_pot_account(data: bytes) -> RoundSnapshot:
    """Decode raw pot account ``data`` into a :class:`RoundSnapshot`.

    Raises
    ------
    SnapshotAnomaly
        If the data is not a well-formed pot account.
    """

    cursor = _Cursor(bytes(data))
    if cursor.take(8, "discriminator") != POT_DISCRIMINATOR:
        raise SnapshotAnomaly("account discriminator does not match Pot")

    admin = cursor.pubkey("admin")
    cursor.u8("bump")
    total_amount = cursor.u64("total_amount")

    count = cursor.u32("deposits length")
    if count * _DEPOSIT_RECORD_LEN > len(cursor.data) - cursor.offset:
        raise SnapshotAnomaly(f"deposit count {count} exceeds account size")
    depositors: list[str] = []
    for index in range(count):
        depositors.append(cursor.pubkey(f"deposits[{index}].depositor"))
        cursor.u64(f"deposits[{index}].amount")
        cursor.i64(f"deposits[{index}].timestamp")

    tag = cursor.u8("game_state")
    try:
        state = state_from_tag(tag)
    except KeyError:
        raise SnapshotAnomaly(f"unknown game_state tag {tag}") from None

    last_reset = cursor.i64("last_reset")
    randomness = cursor.take(32, "randomness") if cursor.option_tag("randomness") else None
    end_game_caller = cursor.pubkey("end_game_caller") if cursor.option_tag("end_game_caller") else None

    return RoundSnapshot(
        state=state,
        last_transition_time=last_reset,
        randomness_available=randomness is not None,
        winner=pick_winner(randomness, depositors),
        total_amount=total_amount,
        deposit_count=count,
        end_game_caller=end_game_caller,
        admin=admin,
    )


__all__ = ["RoundSnapshot", "POT_DISCRIMINATOR", "decode_pot_account", "pick_winner"]
