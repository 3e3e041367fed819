"""Primitives - Low-level field, hashing, packing and Merkle building blocks."""

from primitives.field import (
    BN254_PRIME,
    FF,
    fe,
    fe_to_int,
    fits_bits,
    from_bits_le,
    to_bits_le,
)
from primitives.hashing import hash_leaf, hash_node
from primitives.merkle_tree import (
    MerklePath,
    MerkleProof,
    MerkleRoot,
    SparseMerkleTree,
)
from primitives.merkle_verifier import root_from_path, verify_path, verify_proof
from primitives.packing import (
    PackedAmount,
    UnpackableAmount,
    closest_packable_amount,
    closest_packable_fee,
    is_amount_packable,
    is_fee_packable,
    pack_amount,
    pack_fee,
    unpack,
)

__all__ = [
    # Field
    "FF",
    "BN254_PRIME",
    "fe",
    "fe_to_int",
    "to_bits_le",
    "from_bits_le",
    "fits_bits",
    # Hashing
    "hash_leaf",
    "hash_node",
    # Merkle Tree
    "SparseMerkleTree",
    "MerkleProof",
    "MerkleRoot",
    "MerklePath",
    "root_from_path",
    "verify_path",
    "verify_proof",
    # Packing
    "PackedAmount",
    "UnpackableAmount",
    "pack_amount",
    "pack_fee",
    "unpack",
    "is_amount_packable",
    "is_fee_packable",
    "closest_packable_amount",
    "closest_packable_fee",
]
