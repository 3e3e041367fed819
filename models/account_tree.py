"""Account tree: account id -> Account, committed by a sparse Merkle tree."""

from typing import Dict, Iterable, Iterator, Optional, Tuple

from models.account import Account, balance_leaf_hash
from models.params import TreeConfig
from primitives.merkle_tree import MerklePath, MerkleRoot, SparseMerkleTree


class UnknownAccount(LookupError):
    """Raised when an account id has no leaf in the tree."""

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"account {account_id} does not exist in the account tree")


class AccountTree:
    """Accounts plus their Merkle commitment.

    Usage:
        tree = AccountTree.from_accounts([(1, account)])
        root = tree.root_hash()
        path = tree.account_path(1)
        balance_path = tree.balance_path(1, token=0)
    """

    def __init__(self, config: Optional[TreeConfig] = None):
        self.config = config or TreeConfig.default()
        self._accounts: Dict[int, Account] = {}
        self._tree = SparseMerkleTree(
            self.config.account_tree_depth,
            Account().leaf_hash(self.config),
        )

    @classmethod
    def from_accounts(
        cls, accounts: Iterable[Tuple[int, Account]], config: Optional[TreeConfig] = None
    ) -> 'AccountTree':
        tree = cls(config)
        for account_id, account in accounts:
            tree.insert(account_id, account)
        return tree

    # --- Mutation ---

    def insert(self, account_id: int, account: Account) -> None:
        """Insert or replace a validated account."""
        account.validate()
        self.update(account_id, account)

    def update(self, account_id: int, account: Account) -> None:
        """Write a leaf as-is.

        No range checks: the circuit copy of the tree records whatever field
        values the operation produced, including underflowed balances.
        """
        if account_id > self.config.max_account_id:
            raise ValueError(f"account id {account_id} exceeds {self.config.max_account_id}")
        self._accounts[account_id] = account
        self._tree.insert(account_id, account.leaf_hash(self.config))

    def remove(self, account_id: int) -> None:
        if account_id not in self._accounts:
            raise UnknownAccount(account_id)
        del self._accounts[account_id]
        self._tree.remove(account_id)

    # --- Queries ---

    def get(self, account_id: int) -> Account:
        try:
            return self._accounts[account_id]
        except KeyError:
            raise UnknownAccount(account_id) from None

    def __contains__(self, account_id: int) -> bool:
        return account_id in self._accounts

    def __iter__(self) -> Iterator[Tuple[int, Account]]:
        return iter(sorted(self._accounts.items()))

    def __len__(self) -> int:
        return len(self._accounts)

    def root_hash(self) -> MerkleRoot:
        return self._tree.get_root()

    def account_path(self, account_id: int) -> MerklePath:
        """Sibling path of the account leaf. The account must exist."""
        self.get(account_id)
        return self._tree.get_path(account_id)

    def balance_path(self, account_id: int, token: int) -> MerklePath:
        """Sibling path of `token` inside the account's balance tree."""
        account = self.get(account_id)
        if token > self.config.max_token_id:
            raise ValueError(f"token {token} exceeds {self.config.max_token_id}")
        return account.balance_tree(self.config).get_path(token)

    def balance_leaf(self, account_id: int, token: int) -> int:
        return balance_leaf_hash(self.get(account_id).get_balance(token))

    def copy(self) -> 'AccountTree':
        """Independent copy; accounts are immutable so they are shared."""
        clone = AccountTree.__new__(AccountTree)
        clone.config = self.config
        clone._accounts = dict(self._accounts)
        clone._tree = self._tree.copy()
        return clone
