"""Transport and signing helpers used by :mod:`JackpotControl`."""

from __future__ import annotations

from .backoff import poll_until
from .rpc import RpcClient
from .signer import KeypairSigner, Signer

__all__ = ["RpcClient", "KeypairSigner", "Signer", "poll_until"]
