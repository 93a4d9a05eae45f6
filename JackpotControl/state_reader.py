"""Fetch the current round snapshot from the remote program."""

from __future__ import annotations

import logging

from solders.pubkey import Pubkey

from utils.rpc import RpcClient

from .errors import RpcError, Unavailable
from .snapshot import RoundSnapshot, decode_pot_account

logger = logging.getLogger(__name__)


class StateReader:
    """Pure read of the pot account; nothing is cached between calls."""

    def __init__(self, rpc: RpcClient, pot: Pubkey) -> None:
        self.rpc = rpc
        self.pot = pot

    def fetch(self) -> RoundSnapshot:
        """Return a freshly decoded snapshot.

        Raises
        ------
        Unavailable
            The account could not be read or does not exist yet.
        SnapshotAnomaly
            The account exists but could not be decoded.
        """

        try:
            data = self.rpc.get_account_data(str(self.pot))
        except RpcError as exc:
            raise Unavailable(f"reading pot {self.pot} failed: {exc}") from exc
        if data is None:
            raise Unavailable(f"pot account {self.pot} not found (not initialized?)")
        return decode_pot_account(data)


__all__ = ["StateReader"]
