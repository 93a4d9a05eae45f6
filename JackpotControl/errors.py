"""Exception classes for the jackpot keeper.

Every failure the control loop can recover from has its own class so the
scheduler can log each class distinctly.  Only :class:`FatalStartupError`
stops the process.  The JSON-RPC errors live in :mod:`utils.rpc` and are
re-exported here.
"""

from __future__ import annotations

from utils.rpc import RpcError, RpcResponseError, RpcTransportError


class JackpotControlError(Exception):
    """Base class for all keeper errors."""


class Unavailable(JackpotControlError):
    """The round snapshot could not be read (transport failure, missing account)."""


class SnapshotAnomaly(JackpotControlError):
    """The pot account had an unrecognised shape or state value."""


class FatalStartupError(JackpotControlError):
    """The keeper cannot be constructed; the loop must not start."""


__all__ = [
    "JackpotControlError",
    "Unavailable",
    "SnapshotAnomaly",
    "FatalStartupError",
    "RpcError",
    "RpcTransportError",
    "RpcResponseError",
]
