"""Submit transition commands and classify their outcome.

Every call to :meth:`TransitionExecutor.execute` submits at most one
transaction and never resubmits.  The outcome is one of:

* ``CONFIRMED``: the transaction landed; the receipt is its signature.
* ``REJECTED``: the program refused it.  Precondition failures are the
  expected result of racing another keeper and are logged quietly.
* ``TRANSIENT``: nothing conclusive happened (network trouble, expired
  blockhash, no confirmation in time).  The next cycle re-plans from a fresh
  read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from utils.backoff import poll_until
from utils.rpc import (
    BLOCK_NOT_AVAILABLE,
    NODE_UNHEALTHY,
    TRANSACTION_SIGNATURE_VERIFICATION_FAILURE,
    RpcClient,
)
from utils.signer import Signer

from .addresses import ProgramAccounts
from .common.states import TransitionCommand
from .errors import RpcResponseError, RpcTransportError
from .instructions import MissingAccount, build_transition
from .snapshot import RoundSnapshot

logger = logging.getLogger(__name__)

# Custom error codes of the jackpot program (Anchor numbers them from 6000).
PROGRAM_ERRORS: dict[int, str] = {
    6000: "GameInactive",
    6001: "MinDeposit",
    6002: "InvalidState",
    6003: "CooldownActive",
    6004: "NoDeposits",
    6005: "RandomnessNotAvailable",
}

# Refusals caused by another actor having already moved the round.
PRECONDITION_ERRORS = frozenset({"GameInactive", "InvalidState", "CooldownActive", "RandomnessNotAvailable"})

# Transaction-level errors that go away on their own.
TRANSIENT_TX_ERRORS = frozenset({"BlockhashNotFound", "WouldExceedMaxBlockCostLimit", "ClusterMaintenance"})

CONFIRMED_LEVELS = frozenset({"confirmed", "finalized"})


class OutcomeKind(str, Enum):
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class Outcome:
    """Result of one submission attempt."""

    kind: OutcomeKind
    receipt: Optional[str] = None
    reason: Optional[str] = None
    expected: bool = False
    """``True`` for rejections that are a normal race outcome."""

    @classmethod
    def confirmed(cls, receipt: str) -> "Outcome":
        return cls(OutcomeKind.CONFIRMED, receipt=receipt)

    @classmethod
    def rejected(cls, reason: str, *, expected: bool = False, receipt: Optional[str] = None) -> "Outcome":
        return cls(OutcomeKind.REJECTED, receipt=receipt, reason=reason, expected=expected)

    @classmethod
    def transient(cls, reason: str, *, receipt: Optional[str] = None) -> "Outcome":
        return cls(OutcomeKind.TRANSIENT, receipt=receipt, reason=reason)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.CONFIRMED

    def describe(self) -> str:
        parts = [f"outcome={self.kind.value}"]
        if self.receipt:
            parts.append(f"signature={self.receipt}")
        if self.reason:
            parts.append(f"reason={self.reason}")
        return " ".join(parts)


def classify_transaction_error(err: Any, *, receipt: Optional[str] = None) -> Outcome:
    """Map a Solana ``TransactionError`` value to an :class:`Outcome`.

    ``err`` is either a bare string (``"BlockhashNotFound"``) or a mapping such
    as ``{"InstructionError": [0, {"Custom": 6002}]}``.
    """

    if isinstance(err, str):
        if err in TRANSIENT_TX_ERRORS:
            return Outcome.transient(err, receipt=receipt)
        # AlreadyProcessed: an identical transaction already landed.
        return Outcome.rejected(err, expected=err == "AlreadyProcessed", receipt=receipt)

    if isinstance(err, dict) and "InstructionError" in err:
        detail = err["InstructionError"]
        inner = detail[1] if isinstance(detail, (list, tuple)) and len(detail) > 1 else detail
        if isinstance(inner, dict) and "Custom" in inner:
            code = int(inner["Custom"])
            name = PROGRAM_ERRORS.get(code, f"Custom({code})")
            return Outcome.rejected(name, expected=name in PRECONDITION_ERRORS, receipt=receipt)
        return Outcome.rejected(f"InstructionError({inner})", receipt=receipt)

    return Outcome.rejected(f"TransactionError({err})", receipt=receipt)


def classify_rpc_error(exc: RpcResponseError) -> Outcome:
    """Classify a JSON-RPC error returned by ``sendTransaction``."""

    data = exc.data if isinstance(exc.data, dict) else {}
    err = data.get("err")
    if err is not None:
        return classify_transaction_error(err)
    if exc.code == TRANSACTION_SIGNATURE_VERIFICATION_FAILURE:
        return Outcome.rejected(f"signature verification failed: {exc.message}")
    if exc.code in (NODE_UNHEALTHY, BLOCK_NOT_AVAILABLE):
        return Outcome.transient(f"node not ready: {exc.message}")
    return Outcome.transient(f"rpc error {exc.code}: {exc.message}")


class TransitionExecutor:
    """Build, sign, submit and confirm a single transition command.

    Parameters
    ----------
    rpc:
        JSON-RPC client.
    signer:
        Fee payer and signer of every transaction.
    accounts:
        Resolved program addresses.
    confirm_timeout:
        Seconds to wait for ``confirmed`` status before reporting
        ``TRANSIENT``.
    """

    def __init__(
        self,
        rpc: RpcClient,
        signer: Signer,
        accounts: ProgramAccounts,
        *,
        confirm_timeout: float = 30.0,
        poll=poll_until,
    ) -> None:
        self.rpc = rpc
        self.signer = signer
        self.accounts = accounts
        self.confirm_timeout = confirm_timeout
        self._poll = poll

    def execute(self, command: TransitionCommand, snapshot: Optional[RoundSnapshot] = None) -> Outcome:
        """Submit ``command`` once and return its classified outcome.

        ``snapshot`` supplies the winner and end-game caller accounts for
        ``DISTRIBUTE_REWARDS``.
        """

        try:
            instruction = build_transition(command, self.accounts, self.signer.pubkey, snapshot)
        except MissingAccount as exc:
            return Outcome.rejected(str(exc))
        return self.submit(instruction)

    def submit(self, instruction) -> Outcome:
        """Sign and send ``instruction`` in its own transaction, then confirm it."""

        try:
            blockhash = self.rpc.get_latest_blockhash()
            transaction = self.signer.sign([instruction], blockhash)
            signature = self.rpc.send_transaction(bytes(transaction))
        except RpcTransportError as exc:
            return Outcome.transient(str(exc))
        except RpcResponseError as exc:
            return classify_rpc_error(exc)

        return self._confirm(signature)

    def _confirm(self, signature: str) -> Outcome:
        def _status() -> Optional[dict]:
            status = self.rpc.get_signature_status(signature)
            if status is None:
                return None
            if status.get("err") is not None or status.get("confirmationStatus") in CONFIRMED_LEVELS:
                return status
            return None

        try:
            status = self._poll(_status, timeout=self.confirm_timeout, logger=logger)
        except (RpcTransportError, RpcResponseError) as exc:
            return Outcome.transient(f"confirmation check failed: {exc}", receipt=signature)

        if status is None:
            return Outcome.transient(
                f"not confirmed within {self.confirm_timeout:g}s", receipt=signature
            )
        if status.get("err") is not None:
            return classify_transaction_error(status["err"], receipt=signature)
        return Outcome.confirmed(signature)


__all__ = [
    "Outcome",
    "OutcomeKind",
    "TransitionExecutor",
    "PROGRAM_ERRORS",
    "PRECONDITION_ERRORS",
    "classify_rpc_error",
    "classify_transaction_error",
]
