"""Address helpers for the jackpot program.

The round's shared account ("pot") is a program-derived address: it depends
only on a fixed namespace tag and the program id, so every keeper instance
resolves the same account without coordination.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from solders.pubkey import Pubkey

from .errors import FatalStartupError

POT_SEED = "pot"


def parse_pubkey(value: str, *, name: str = "address") -> Pubkey:
    """Parse a base58 ``value`` or raise :class:`FatalStartupError`."""

    try:
        return Pubkey.from_string(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise FatalStartupError(f"invalid {name}: {value!r}") from exc


def find_pot_address(program_id: Pubkey, seed: str = POT_SEED) -> tuple[Pubkey, int]:
    """Return the pot PDA and its bump seed for ``program_id``."""

    return Pubkey.find_program_address([seed.encode("utf-8")], program_id)


@dataclass(frozen=True)
class ProgramAccounts:
    """Resolved addresses the keeper needs for every command.

    Parameters
    ----------
    program_id:
        The jackpot program.
    pot:
        The pot PDA derived from ``program_id``.
    bump:
        Bump seed of ``pot``.
    buyback:
        Recipient of the buyback share, when configured.
    fee:
        Recipient of the fee share and admin withdrawals, when configured.
    """

    program_id: Pubkey
    pot: Pubkey
    bump: int
    buyback: Optional[Pubkey] = None
    fee: Optional[Pubkey] = None

    @classmethod
    def resolve(
        cls,
        program_id: str,
        *,
        seed: str = POT_SEED,
        buyback: Optional[str] = None,
        fee: Optional[str] = None,
    ) -> "ProgramAccounts":
        """Resolve all addresses from configuration strings.

        Raises
        ------
        FatalStartupError
            If any address is malformed.
        """

        program = parse_pubkey(program_id, name="PROGRAM_ID")
        pot, bump = find_pot_address(program, seed)
        return cls(
            program_id=program,
            pot=pot,
            bump=bump,
            buyback=parse_pubkey(buyback, name="BUYBACK_ADDRESS") if buyback else None,
            fee=parse_pubkey(fee, name="FEE_ADDRESS") if fee else None,
        )


__all__ = ["POT_SEED", "ProgramAccounts", "find_pot_address", "parse_pubkey"]
