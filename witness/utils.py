"""Signature input assembly for operation witnesses.

SigDataInput holds the signature-related values the circuit consumes: the
signature point R, the scalar S, the signed message and the signer's public
key. It is built once per transaction and never changes; negative tests get
copies with exactly one field corrupted via `corrupted_variations`.
"""

import hashlib
from dataclasses import dataclass, replace
from typing import List

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from models.params import PUBKEY_HASH_WIDTH
from models.tx import WithdrawOp, WithdrawTx

SCALAR_MODULUS = 1 << 256


def pub_key_hash(pub_key: bytes) -> bytes:
    """20-byte public key hash stored in account leaves."""
    return hashlib.sha256(pub_key).digest()[:PUBKEY_HASH_WIDTH]


def _flip_first_byte(data: bytes) -> bytes:
    return bytes([data[0] ^ 0xFF]) + data[1:]


@dataclass(frozen=True)
class SigDataInput:
    """Signature data for a single operation.

    Attributes:
        signature_r: Encoded point R (32 bytes)
        signature_s: Scalar S as an integer
        message: Canonical transaction bytes that were signed
        pub_key: Encoded signer public key (32 bytes)
    """
    signature_r: bytes
    signature_s: int
    message: bytes
    pub_key: bytes

    @classmethod
    def build(cls, tx: WithdrawTx) -> 'SigDataInput':
        """Assemble signature data from a signed transaction.

        Raises:
            UnpackableAmount: If amount or fee cannot be packed exactly
            ValueError: If the transaction carries no signature
        """
        message = tx.message()
        if tx.signature is None:
            raise ValueError("transaction is not signed")
        return cls(
            signature_r=tx.signature.r,
            signature_s=tx.signature.s,
            message=message,
            pub_key=tx.signature.pub_key,
        )

    @classmethod
    def from_withdraw_op(cls, op: WithdrawOp) -> 'SigDataInput':
        return cls.build(op.tx)

    @property
    def signature(self) -> bytes:
        """Re-assembled 64-byte signature R || S."""
        s_bytes = (self.signature_s % SCALAR_MODULUS).to_bytes(32, "little")
        return self.signature_r + s_bytes

    def corrupted_variations(self) -> List['SigDataInput']:
        """Copies of this input with exactly one field corrupted.

        Order is fixed: R, S, message, public key.
        """
        return [
            replace(self, signature_r=_flip_first_byte(self.signature_r)),
            replace(self, signature_s=(self.signature_s + 1) % SCALAR_MODULUS),
            replace(self, message=_flip_first_byte(self.message)),
            replace(self, pub_key=_flip_first_byte(self.pub_key)),
        ]


def verify_signature(sig_input: SigDataInput) -> bool:
    """Ed25519 verification of `sig_input.message`.

    Malformed keys or signatures count as invalid; nothing is raised.
    """
    try:
        key = Ed25519PublicKey.from_public_bytes(sig_input.pub_key)
        key.verify(sig_input.signature, sig_input.message)
    except (InvalidSignature, ValueError):
        return False
    return True
