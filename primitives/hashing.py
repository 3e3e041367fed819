"""Field-valued hashing for account and balance trees.

SHA-256 over fixed-width (32-byte big-endian) field encodings, reduced into
the BN254 scalar field. A one-byte domain tag separates leaves from internal
nodes so a leaf can never be confused with a node:

    leaf = SHA256(0x00 || v_0 || v_1 || ...) mod p
    node = SHA256(0x01 || left || right) mod p

Stands in for the in-circuit algebraic hash. Deterministic across runs.
"""

import hashlib
from typing import List

from primitives.field import BN254_PRIME, fe_to_bytes

LEAF_TAG = b"\x00"
NODE_TAG = b"\x01"


def _digest_to_field(tag: bytes, values: List[int]) -> int:
    h = hashlib.sha256(tag)
    for v in values:
        h.update(fe_to_bytes(v))
    return int.from_bytes(h.digest(), "big") % BN254_PRIME


def hash_leaf(values: List[int]) -> int:
    """Hash a leaf made of one or more field elements."""
    return _digest_to_field(LEAF_TAG, values)


def hash_node(left: int, right: int) -> int:
    """Parent hash for a binary Merkle tree."""
    return _digest_to_field(NODE_TAG, [left, right])


__all__ = [
    'hash_leaf',
    'hash_node',
    'LEAF_TAG',
    'NODE_TAG',
]
