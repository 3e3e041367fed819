"""Rollup account record and its leaf hashing.

An account leaf commits to (nonce, pub_key_hash, address, balance_root),
where balance_root is the root of a per-account sparse tree keyed by token id.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from models.params import (
    ADDRESS_WIDTH,
    BALANCE_BIT_WIDTH,
    NONCE_BIT_WIDTH,
    PUBKEY_HASH_WIDTH,
    TreeConfig,
)
from primitives.field import fits_bits
from primitives.hashing import hash_leaf
from primitives.merkle_tree import SparseMerkleTree

ZERO_ADDRESS = bytes(ADDRESS_WIDTH)
ZERO_PUBKEY_HASH = bytes(PUBKEY_HASH_WIDTH)


def balance_leaf_hash(balance: int) -> int:
    return hash_leaf([balance])


def account_leaf_hash(nonce: int, pub_key_hash: bytes, address: bytes, balance_root: int) -> int:
    return hash_leaf([
        nonce,
        int.from_bytes(pub_key_hash, "big"),
        int.from_bytes(address, "big"),
        balance_root,
    ])


@dataclass(frozen=True)
class Account:
    """Account state. Updates return new instances.

    Attributes:
        address: 20-byte L1 address
        pub_key_hash: 20-byte hash of the signing public key
        nonce: Number of operations executed by this account
        balances: Token id -> balance; absent tokens hold zero
    """
    address: bytes = ZERO_ADDRESS
    pub_key_hash: bytes = ZERO_PUBKEY_HASH
    nonce: int = 0
    balances: Dict[int, int] = field(default_factory=dict)

    def get_balance(self, token: int) -> int:
        return self.balances.get(token, 0)

    def with_balance(self, token: int, balance: int) -> 'Account':
        balances = dict(self.balances)
        balances[token] = balance
        return replace(self, balances=balances)

    def with_nonce(self, nonce: int) -> 'Account':
        return replace(self, nonce=nonce)

    def validate(self) -> None:
        """Check the logical-state invariants.

        Raises:
            ValueError: If a balance is negative or wider than BALANCE_BIT_WIDTH,
                the nonce is out of range, or a hash/address has the wrong width
        """
        if len(self.address) != ADDRESS_WIDTH:
            raise ValueError(f"address must be {ADDRESS_WIDTH} bytes, got {len(self.address)}")
        if len(self.pub_key_hash) != PUBKEY_HASH_WIDTH:
            raise ValueError(
                f"pub_key_hash must be {PUBKEY_HASH_WIDTH} bytes, got {len(self.pub_key_hash)}"
            )
        if self.nonce < 0 or not fits_bits(self.nonce, NONCE_BIT_WIDTH):
            raise ValueError(f"nonce {self.nonce} does not fit {NONCE_BIT_WIDTH} bits")
        for token, balance in self.balances.items():
            if balance < 0 or not fits_bits(balance, BALANCE_BIT_WIDTH):
                raise ValueError(f"balance {balance} of token {token} is not a valid balance")

    # --- Hashing ---

    def balance_tree(self, config: Optional[TreeConfig] = None) -> SparseMerkleTree:
        config = config or TreeConfig.default()
        tree = SparseMerkleTree(config.balance_tree_depth, balance_leaf_hash(0))
        for token, balance in sorted(self.balances.items()):
            if balance != 0:
                tree.insert(token, balance_leaf_hash(balance))
        return tree

    def leaf_hash(self, config: Optional[TreeConfig] = None) -> int:
        balance_root = self.balance_tree(config).get_root()
        return account_leaf_hash(self.nonce, self.pub_key_hash, self.address, balance_root)
