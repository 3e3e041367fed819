"""Withdraw transaction and operation.

Canonical message layout (big-endian, fixed order):

    tx_type:1 | account_id:4 | from:20 | to:20 | token:2 |
    packed_amount:5 | packed_fee:2 | nonce:4 | valid_from:8 | valid_until:8

Equal transactions always serialize to identical bytes.
"""

from dataclasses import dataclass, replace
from typing import Optional

from models.params import (
    ADDRESS_WIDTH,
    TIMESTAMP_BIT_WIDTH,
    WITHDRAW_TX_TYPE,
)
from primitives.packing import PackedAmount, pack_amount, pack_fee

SIGNATURE_WIDTH = 64
PUBKEY_WIDTH = 32


@dataclass(frozen=True)
class TimeRange:
    """Validity window [valid_from, valid_until] in seconds."""
    valid_from: int = 0
    valid_until: int = (1 << TIMESTAMP_BIT_WIDTH) - 1

    def to_bytes(self) -> bytes:
        return self.valid_from.to_bytes(8, "big") + self.valid_until.to_bytes(8, "big")

    def contains(self, timestamp: int) -> bool:
        return self.valid_from <= timestamp <= self.valid_until


@dataclass(frozen=True)
class TxSignature:
    """Ed25519 signature with the signer's public key.

    Attributes:
        pub_key: 32-byte encoded public key
        signature: 64 bytes, R (32) || S (32, little-endian scalar)
    """
    pub_key: bytes
    signature: bytes

    def __post_init__(self):
        if len(self.pub_key) != PUBKEY_WIDTH:
            raise ValueError(f"pub_key must be {PUBKEY_WIDTH} bytes, got {len(self.pub_key)}")
        if len(self.signature) != SIGNATURE_WIDTH:
            raise ValueError(
                f"signature must be {SIGNATURE_WIDTH} bytes, got {len(self.signature)}"
            )

    @property
    def r(self) -> bytes:
        return self.signature[:32]

    @property
    def s(self) -> int:
        return int.from_bytes(self.signature[32:], "little")


def withdraw_message(
    account_id: int,
    from_address: bytes,
    to_address: bytes,
    token: int,
    packed_amount: PackedAmount,
    packed_fee: PackedAmount,
    nonce: int,
    time_range: Optional[TimeRange] = None,
) -> bytes:
    """Serialize withdraw fields in the canonical signed layout.

    Shared by `WithdrawTx.message` and the constraint evaluator, which
    rebuilds the message from witness fields.

    Raises:
        OverflowError: If an integer field does not fit its width
    """
    time_range = time_range if time_range is not None else TimeRange()
    return b"".join([
        WITHDRAW_TX_TYPE.to_bytes(1, "big"),
        account_id.to_bytes(4, "big"),
        from_address,
        to_address,
        token.to_bytes(2, "big"),
        packed_amount.to_bytes(),
        packed_fee.to_bytes(),
        nonce.to_bytes(4, "big"),
        time_range.to_bytes(),
    ])


@dataclass(frozen=True)
class WithdrawTx:
    """Withdraw of `amount` of `token` from L2 account `account_id` to L1 `to_address`."""
    account_id: int
    from_address: bytes
    to_address: bytes
    token: int
    amount: int
    fee: int
    nonce: int
    time_range: Optional[TimeRange] = None
    signature: Optional[TxSignature] = None

    def __post_init__(self):
        for name in ('from_address', 'to_address'):
            value = getattr(self, name)
            if len(value) != ADDRESS_WIDTH:
                raise ValueError(f"{name} must be {ADDRESS_WIDTH} bytes, got {len(value)}")

    def packed_amount(self) -> PackedAmount:
        return pack_amount(self.amount)

    def packed_fee(self) -> PackedAmount:
        return pack_fee(self.fee)

    def message(self) -> bytes:
        """Canonical bytes that get signed.

        Raises:
            UnpackableAmount: If amount or fee has no exact packed form
        """
        return withdraw_message(
            account_id=self.account_id,
            from_address=self.from_address,
            to_address=self.to_address,
            token=self.token,
            packed_amount=self.packed_amount(),
            packed_fee=self.packed_fee(),
            nonce=self.nonce,
            time_range=self.time_range,
        )

    def with_signature(self, signature: TxSignature) -> 'WithdrawTx':
        return replace(self, signature=signature)


@dataclass(frozen=True)
class WithdrawOp:
    """A withdraw transaction placed at an account slot of the tree."""
    tx: WithdrawTx
    account_id: int
