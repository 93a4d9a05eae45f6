"""Signer capability injected into the transition executor.

The keeper never manages keys.  It loads an existing Solana CLI keypair file
(a JSON array of 64 byte values) and uses it to sign the transactions it
submits.  Anything exposing ``pubkey`` and ``sign`` can stand in for
:class:`KeypairSigner`, e.g. a remote signing service.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol, Sequence

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction


class Signer(Protocol):
    """Fee payer and signer of keeper transactions."""

    @property
    def pubkey(self) -> Pubkey: ...

    def sign(self, instructions: Sequence[Instruction], blockhash: str) -> Transaction: ...


class KeypairSigner:
    """:class:`Signer` backed by an in-memory :class:`~solders.keypair.Keypair`."""

    def __init__(self, keypair: Keypair) -> None:
        self._keypair = keypair

    @classmethod
    def from_file(cls, path: Path | str) -> "KeypairSigner":
        """Load a Solana CLI keypair file.

        Raises
        ------
        ValueError
            If the file is unreadable or does not hold 64 byte values.
        """

        path = Path(path).expanduser()
        try:
            raw = json.loads(path.read_text())
        except (OSError, ValueError) as exc:
            raise ValueError(f"cannot read keypair file {path}: {exc}") from exc
        if not isinstance(raw, list) or len(raw) != 64:
            raise ValueError(f"keypair file {path} must hold a JSON array of 64 bytes")
        try:
            return cls(Keypair.from_bytes(bytes(raw)))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"keypair file {path} is invalid: {exc}") from exc

    @property
    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()

    def sign(self, instructions: Sequence[Instruction], blockhash: str) -> Transaction:
        recent = Hash.from_string(blockhash)
        message = Message.new_with_blockhash(list(instructions), self.pubkey, recent)
        return Transaction([self._keypair], message, recent)


__all__ = ["Signer", "KeypairSigner"]
