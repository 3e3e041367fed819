"""Plasma - Plain rollup state used to cross-check witnesses."""

from plasma.state import AccountUpdate, CollectedFee, OpError, PlasmaState

__all__ = [
    "PlasmaState",
    "CollectedFee",
    "AccountUpdate",
    "OpError",
]
