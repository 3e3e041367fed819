"""Sparse binary Merkle tree over field-valued leaf hashes."""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from primitives.hashing import hash_node

# --- Type Aliases ---

MerkleRoot = int
LeafHash = int
MerklePath = List[int]


# --- Data Classes ---


@dataclass
class MerkleProof:
    """Authentication path for a single leaf.

    Attributes:
        index: Leaf index (bit i selects left/right at level i)
        leaf: Leaf hash
        path: Sibling hashes from leaf level up to (excluding) the root
    """
    index: int
    leaf: LeafHash
    path: MerklePath = field(default_factory=list)


# --- Merkle Tree ---


class SparseMerkleTree:
    """Fixed-depth binary Merkle tree where absent leaves hold a default hash.

    Only non-default nodes are stored. Empty subtree hashes are precomputed
    per level, so a tree of depth 24 costs nothing until leaves are inserted.
    """

    def __init__(self, depth: int, empty_leaf: LeafHash):
        if depth < 1:
            raise ValueError(f"depth must be positive, got {depth}")

        self.depth = depth
        self.empty_leaf = empty_leaf

        # _defaults[level] is the hash of an empty subtree rooted at `level`
        self._defaults: List[int] = [empty_leaf]
        for _ in range(depth):
            prev = self._defaults[-1]
            self._defaults.append(hash_node(prev, prev))

        # (level, index) -> hash, level 0 = leaves
        self._nodes: Dict[Tuple[int, int], int] = {}

    @property
    def capacity(self) -> int:
        return 1 << self.depth

    # --- Core Operations ---

    def insert(self, index: int, leaf: LeafHash) -> None:
        """Set the leaf at `index` and rehash the path up to the root."""
        self._check_index(index)
        self._nodes[(0, index)] = leaf
        self._rehash_from(index)

    def remove(self, index: int) -> None:
        """Reset the leaf at `index` to the empty leaf."""
        self._check_index(index)
        self._nodes.pop((0, index), None)
        self._rehash_from(index)

    def get_leaf(self, index: int) -> LeafHash:
        self._check_index(index)
        return self._node(0, index)

    def get_root(self) -> MerkleRoot:
        """Return the Merkle root."""
        return self._node(self.depth, 0)

    def get_path(self, index: int) -> MerklePath:
        """Sibling hashes for leaf `index`, ordered leaf level first."""
        self._check_index(index)
        path = []
        idx = index
        for level in range(self.depth):
            path.append(self._node(level, idx ^ 1))
            idx >>= 1
        return path

    def get_proof(self, index: int) -> MerkleProof:
        return MerkleProof(index=index, leaf=self.get_leaf(index), path=self.get_path(index))

    def copy(self) -> 'SparseMerkleTree':
        clone = SparseMerkleTree.__new__(SparseMerkleTree)
        clone.depth = self.depth
        clone.empty_leaf = self.empty_leaf
        clone._defaults = self._defaults
        clone._nodes = dict(self._nodes)
        return clone

    # --- Internals ---

    def _node(self, level: int, index: int) -> int:
        return self._nodes.get((level, index), self._defaults[level])

    def _rehash_from(self, index: int) -> None:
        idx = index
        for level in range(self.depth):
            parent = idx >> 1
            left = self._node(level, parent << 1)
            right = self._node(level, (parent << 1) | 1)
            parent_hash = hash_node(left, right)
            if parent_hash == self._defaults[level + 1]:
                self._nodes.pop((level + 1, parent), None)
            else:
                self._nodes[(level + 1, parent)] = parent_hash
            idx = parent

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= self.capacity:
            raise ValueError(f"Leaf index {index} out of range [0, {self.capacity})")
