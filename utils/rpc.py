"""Thin adapter over solana-py's synchronous :class:`solana.rpc.api.Client`.

The keeper only needs five RPC methods.  This module narrows them to plain
Python values (``bytes``, ``str``, ``dict``) and folds every failure solana-py
can produce into two exception types:

* :class:`RpcTransportError`: no usable reply (connection, timeout, HTTP
  status, a reply that does not parse or lacks its ``value``).
* :class:`RpcResponseError`: the node answered with a JSON-RPC error object.

Every call is a single request bounded by ``timeout``; there are no retries
here.  The scheduler re-plans on the next cycle.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException, RPCNoResultException
from solana.rpc.types import TxOpts
from solders.errors import SerdeJSONError
from solders.pubkey import Pubkey
from solders.signature import Signature

# JSON-RPC error codes reported by Solana nodes.
TRANSACTION_SIGNATURE_VERIFICATION_FAILURE = -32003
BLOCK_NOT_AVAILABLE = -32004
NODE_UNHEALTHY = -32005

_MISSING = object()


class RpcError(Exception):
    """Base class for JSON-RPC failures."""


class RpcTransportError(RpcError):
    """The request never produced a usable JSON-RPC reply (network, timeout, HTTP status, malformed body)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RpcResponseError(RpcError):
    """The node answered with a JSON-RPC ``error`` object."""

    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"RPC error {code}: {message}")


def _as_fields(obj: Any) -> Any:
    """Return the JSON form of a solders RPC object (or ``obj`` if it has none)."""

    if isinstance(obj, (dict, list, str, int, float, bool)) or obj is None:
        return obj
    to_json = getattr(obj, "to_json", None)
    if to_json is None:
        return str(obj)
    try:
        return json.loads(to_json())
    except (TypeError, ValueError):
        return str(obj)


def _response_error(err: Any) -> RpcResponseError:
    fields = _as_fields(err)
    if not isinstance(fields, dict):
        fields = {"message": str(fields)}
    code = fields.get("code", getattr(err, "code", 0))
    message = fields.get("message", getattr(err, "message", str(err)))
    data = fields.get("data")
    if data is None and getattr(err, "data", None) is not None:
        data = _as_fields(err.data)
    return RpcResponseError(code if isinstance(code, int) else 0, str(message), data)


def _transport_error(method: str, exc: SolanaRpcException, timeout: float) -> RpcTransportError:
    cause = exc.__cause__
    if isinstance(cause, httpx.TimeoutException):
        return RpcTransportError(f"{method} timed out after {timeout}s")
    if isinstance(cause, httpx.HTTPStatusError):
        status = cause.response.status_code
        return RpcTransportError(f"{method} returned HTTP {status}", status_code=status)
    return RpcTransportError(f"{method} failed: {cause or exc}")


class RpcClient:
    """Blocking Solana RPC client.

    Parameters
    ----------
    url:
        HTTP(S) endpoint of the Solana node.
    timeout:
        Per-request timeout in seconds.
    commitment:
        Commitment level used for reads and preflight simulation.
    client:
        Optional pre-built :class:`solana.rpc.api.Client`; tests inject one
        backed by a mock transport.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        commitment: str = "confirmed",
        client: Optional[Client] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.commitment = Commitment(commitment)
        self.client = client or Client(url, commitment=self.commitment, timeout=timeout)

    def _value(self, method: str, call: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run ``call`` and return the ``value`` of its parsed response."""

        try:
            resp = call(*args, **kwargs)
        except SolanaRpcException as exc:
            raise _transport_error(method, exc, self.timeout) from exc
        except RPCException as exc:
            raise _response_error(exc.args[0] if exc.args else exc) from exc
        except RPCNoResultException as exc:
            raise RpcTransportError(f"{method} response has neither result nor error") from exc
        except (SerdeJSONError, ValueError, TypeError) as exc:
            raise RpcTransportError(f"{method} returned a malformed response: {exc}") from exc

        value = getattr(resp, "value", _MISSING)
        if value is _MISSING:
            # solders parsed the reply as an error object instead of raising.
            raise _response_error(resp)
        return value

    def get_version(self) -> Dict[str, Any]:
        value = self._value("getVersion", self.client.get_version)
        if value is None:
            raise RpcTransportError("getVersion returned no value")
        return {"solana-core": value.solana_core, "feature-set": value.feature_set}

    def get_account_data(self, address: str) -> Optional[bytes]:
        """Return the raw data of ``address`` or ``None`` if it doesn't exist."""

        value = self._value(
            "getAccountInfo",
            self.client.get_account_info,
            Pubkey.from_string(address),
            commitment=self.commitment,
            encoding="base64",
        )
        if value is None:
            return None
        data = getattr(value, "data", None)
        if not isinstance(data, (bytes, bytearray)):
            raise RpcTransportError(f"unexpected account data for {address}")
        return bytes(data)

    def get_latest_blockhash(self) -> str:
        value = self._value("getLatestBlockhash", self.client.get_latest_blockhash, commitment=self.commitment)
        blockhash = getattr(value, "blockhash", None)
        if blockhash is None:
            raise RpcTransportError("getLatestBlockhash returned no blockhash")
        return str(blockhash)

    def send_transaction(self, raw: bytes) -> str:
        """Submit a signed, serialized transaction and return its signature."""

        opts = TxOpts(
            skip_confirmation=True,
            preflight_commitment=self.commitment,
            # The next cycle re-plans rather than the node rebroadcasting.
            max_retries=0,
        )
        value = self._value("sendTransaction", self.client.send_raw_transaction, bytes(raw), opts=opts)
        if value is None:
            raise RpcTransportError("sendTransaction returned no signature")
        return str(value)

    def get_signature_status(self, signature: str) -> Optional[Dict[str, Any]]:
        """Return the status record for ``signature`` or ``None`` if unknown yet."""

        value = self._value(
            "getSignatureStatuses",
            self.client.get_signature_statuses,
            [Signature.from_string(signature)],
            search_transaction_history=False,
        )
        if not value:
            return None
        status = _as_fields(value[0])
        if status is None:
            return None
        if not isinstance(status, dict):
            raise RpcTransportError(f"unexpected signature status for {signature}")
        return status


__all__ = [
    "RpcClient",
    "RpcError",
    "RpcTransportError",
    "RpcResponseError",
    "NODE_UNHEALTHY",
    "BLOCK_NOT_AVAILABLE",
    "TRANSACTION_SIGNATURE_VERIFICATION_FAILURE",
]
