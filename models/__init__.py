"""Models - Accounts, account tree, transactions and circuit parameters."""

from models.account import Account, account_leaf_hash, balance_leaf_hash
from models.account_tree import AccountTree, UnknownAccount
from models.params import FEE_ACCOUNT_ID, TreeConfig
from models.tx import TimeRange, TxSignature, WithdrawOp, WithdrawTx, withdraw_message

__all__ = [
    "Account",
    "AccountTree",
    "UnknownAccount",
    "TreeConfig",
    "FEE_ACCOUNT_ID",
    "TimeRange",
    "TxSignature",
    "WithdrawTx",
    "WithdrawOp",
    "withdraw_message",
    "account_leaf_hash",
    "balance_leaf_hash",
]
