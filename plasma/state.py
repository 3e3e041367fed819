"""Plain (non-circuit) rollup state and operation application.

PlasmaState is the independent source of truth the witness is checked
against. It applies operations with ordinary integer arithmetic, rejects
invalid ones with OpError, and never leaves a half-applied operation behind.
Fees are returned to the caller as CollectedFee records and credited to the
fee account explicitly with `collect_fee`.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from models.account import Account
from models.account_tree import AccountTree, UnknownAccount
from models.params import FEE_ACCOUNT_ID, MAX_BALANCE, TreeConfig
from models.tx import WithdrawOp
from primitives.packing import UnpackableAmount, pack_amount, pack_fee
from witness.utils import pub_key_hash

logger = logging.getLogger(__name__)


class OpError(Exception):
    """Raised when an operation cannot be applied to the plain state."""


@dataclass(frozen=True)
class CollectedFee:
    """Fee amount of `token` destined for the fee account."""
    token: int
    amount: int


@dataclass(frozen=True)
class AccountUpdate:
    """Balance/nonce change of one account caused by an operation."""
    account_id: int
    token: int
    old_balance: int
    new_balance: int
    old_nonce: int
    new_nonce: int


class PlasmaState:
    """Logical account state backed by an AccountTree.

    Usage:
        state = PlasmaState([(0, fee_account), (1, account)])
        fee, updates = state.apply_withdraw_op(op)
        state.collect_fee([fee], fee_account_id=0)
        root = state.root_hash()
    """

    def __init__(
        self,
        accounts: Optional[Iterable[Tuple[int, Account]]] = None,
        tree_config: Optional[TreeConfig] = None,
    ):
        self._tree = AccountTree.from_accounts(accounts or [], tree_config)

    # --- Queries ---

    def get_account(self, account_id: int) -> Optional[Account]:
        if account_id not in self._tree:
            return None
        return self._tree.get(account_id)

    def accounts(self) -> Dict[int, Account]:
        return dict(iter(self._tree))

    def root_hash(self) -> int:
        return self._tree.root_hash()

    @property
    def tree(self) -> AccountTree:
        """Copy of the underlying account tree (snapshot for witness generation)."""
        return self._tree.copy()

    # --- Mutation ---

    def insert_account(self, account_id: int, account: Account) -> None:
        self._tree.insert(account_id, account)

    def apply_withdraw_op(self, op: WithdrawOp) -> Tuple[CollectedFee, List[AccountUpdate]]:
        """Debit amount + fee from the `from` account and bump its nonce.

        Returns:
            The collected fee and the account updates performed

        Raises:
            OpError: If the operation is invalid; the state is left unchanged
        """
        tx = op.tx
        try:
            account = self._tree.get(op.account_id)
        except UnknownAccount as e:
            raise OpError(str(e)) from e

        try:
            pack_amount(tx.amount)
            pack_fee(tx.fee)
        except UnpackableAmount as e:
            raise OpError(str(e)) from e

        if tx.account_id != op.account_id:
            raise OpError(f"tx account id {tx.account_id} does not match slot {op.account_id}")
        if tx.signature is None or pub_key_hash(tx.signature.pub_key) != account.pub_key_hash:
            raise OpError(f"account {op.account_id} is not controlled by the signer")
        if tx.nonce != account.nonce:
            raise OpError(f"nonce mismatch: tx {tx.nonce}, account {account.nonce}")

        old_balance = account.get_balance(tx.token)
        new_balance = old_balance - tx.amount - tx.fee
        if new_balance < 0:
            raise OpError(
                f"insufficient balance: {old_balance} < {tx.amount} + {tx.fee}"
            )

        updated = account.with_balance(tx.token, new_balance).with_nonce(account.nonce + 1)
        self._tree.insert(op.account_id, updated)

        logger.debug(
            "applied withdraw: account=%d token=%d balance %d -> %d",
            op.account_id, tx.token, old_balance, new_balance,
        )

        update = AccountUpdate(
            account_id=op.account_id,
            token=tx.token,
            old_balance=old_balance,
            new_balance=new_balance,
            old_nonce=account.nonce,
            new_nonce=updated.nonce,
        )
        return CollectedFee(token=tx.token, amount=tx.fee), [update]

    def collect_fee(
        self, fees: Iterable[CollectedFee], fee_account_id: int = FEE_ACCOUNT_ID
    ) -> List[AccountUpdate]:
        """Credit collected fees to the fee account.

        Raises:
            OpError: If the fee account is missing or a credit would push its
                balance past MAX_BALANCE; the state is left unchanged
        """
        try:
            account = self._tree.get(fee_account_id)
        except UnknownAccount as e:
            raise OpError(str(e)) from e

        updates = []
        for fee in fees:
            old_balance = account.get_balance(fee.token)
            if old_balance + fee.amount > MAX_BALANCE:
                raise OpError(
                    f"fee account {fee_account_id} balance of token {fee.token} "
                    f"would overflow: {old_balance} + {fee.amount}"
                )
            account = account.with_balance(fee.token, old_balance + fee.amount)
            updates.append(AccountUpdate(
                account_id=fee_account_id,
                token=fee.token,
                old_balance=old_balance,
                new_balance=old_balance + fee.amount,
                old_nonce=account.nonce,
                new_nonce=account.nonce,
            ))
        self._tree.insert(fee_account_id, account)
        return updates
