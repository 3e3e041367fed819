"""Base class for operation witness generation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Tuple

from models.account import account_leaf_hash, balance_leaf_hash
from models.account_tree import AccountTree
from models.params import FEE_ACCOUNT_ID
from primitives.merkle_verifier import root_from_path


@dataclass(frozen=True)
class OperationBranch:
    """One account leaf and one of its balances, with both Merkle paths.

    Enough to recompute the account tree root without the tree itself:
    balance -> balance root (via balance_path) -> account leaf -> root
    (via account_path).
    """
    account_id: int
    token: int
    nonce: int
    pub_key_hash: bytes
    address: bytes
    balance: int
    balance_path: Tuple[int, ...]
    account_path: Tuple[int, ...]

    def balance_root(self) -> int:
        return root_from_path(balance_leaf_hash(self.balance), self.token, self.balance_path)

    def leaf_hash(self) -> int:
        return account_leaf_hash(self.nonce, self.pub_key_hash, self.address, self.balance_root())

    def root(self) -> int:
        return root_from_path(self.leaf_hash(), self.account_id, self.account_path)


class WitnessModule(ABC):
    """Per-operation witness generation. Used by the prover only.

    Each operation type has its own witness module that reads the affected
    branches of the account tree, applies the operation the way the circuit
    does, and packages every intermediate value. Judging whether the values
    are valid is left to the matching ConstraintModule.
    """

    def __init__(self, fee_account_id: int = FEE_ACCOUNT_ID):
        self.fee_account_id = fee_account_id

    @abstractmethod
    def generate(self, tree: AccountTree, op: Any, sig_input: Any) -> Any:
        """Produce the witness for `op` against the `tree` snapshot.

        Args:
            tree: Pre-operation account tree; must not be mutated
            op: Operation placed at an account slot
            sig_input: Signature data for the operation's transaction

        Returns:
            Immutable witness record
        """
        pass

    def _read_branch(self, tree: AccountTree, account_id: int, token: int) -> OperationBranch:
        """Snapshot one (account, token) branch of `tree`."""
        account = tree.get(account_id)
        return OperationBranch(
            account_id=account_id,
            token=token,
            nonce=account.nonce,
            pub_key_hash=account.pub_key_hash,
            address=account.address,
            balance=account.get_balance(token),
            balance_path=tuple(tree.balance_path(account_id, token)),
            account_path=tuple(tree.account_path(account_id)),
        )
