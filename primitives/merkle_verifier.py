"""Merkle path verification.

Recomputes a root from a leaf hash, its index and the sibling path. This is
the same walk the circuit performs for every account and balance branch: at
level i, bit i of the index decides whether the running hash is the left or
the right child.
"""

from typing import Sequence

from primitives.hashing import hash_node
from primitives.merkle_tree import MerkleProof

# --- Type Aliases ---
MerkleRoot = int
SiblingHash = int


def root_from_path(leaf: int, index: int, path: Sequence[SiblingHash]) -> MerkleRoot:
    """Fold `path` over `leaf` and return the implied root.

    Args:
        leaf: Leaf hash
        index: Leaf index; only the lowest len(path) bits are used
        path: Sibling hashes, leaf level first

    Returns:
        Root hash implied by the path
    """
    cur = leaf
    for level, sibling in enumerate(path):
        if (index >> level) & 1:
            cur = hash_node(sibling, cur)
        else:
            cur = hash_node(cur, sibling)
    return cur


def verify_path(root: MerkleRoot, leaf: int, index: int, path: Sequence[SiblingHash]) -> bool:
    """True if `path` authenticates `leaf` at `index` under `root`."""
    if index >> len(path):
        return False
    return root_from_path(leaf, index, path) == root


def verify_proof(root: MerkleRoot, proof: MerkleProof) -> bool:
    return verify_path(root, proof.leaf, proof.index, proof.path)
