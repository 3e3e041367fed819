"""Withdraw operation witness generation.

A withdraw touches two leaves of the account tree:

1. The `from` account: balance of `token` decreases by amount + fee,
   nonce increases by one.
2. The fee account: balance of `token` increases by fee.

Both updates are applied in that order to a private copy of the snapshot, so
the fee branch is read from the intermediate tree. When the fee account is the
`from` account itself, its "before" branch already reflects the withdrawal.

The subtraction is done in the field and is not guarded. An insufficient
balance wraps around to a value near p and is recorded as such; the
`balance_sufficient` gate is what rejects it.

The fee credit is not range checked either. A fee balance pushed past
MAX_BALANCE is recorded as is; PlasmaState.collect_fee refuses such a credit
with OpError, so the witness of that operation has no matching plain state.

Witness field layout (stable, consumed by the circuit encoder):

    operation   account_id, tx_account_id, token, amount, fee,
                packed_amount, packed_fee, from_address, to_address,
                tx_nonce, time_range, fee_account_id
    branches    from_before, from_after, fee_before, fee_after
    roots       root_before, root_intermediate, root_after
    arithmetic  balance_minus_amount, balance_after
    signature   sig_input, tx_message, signer_pub_key_hash
    flags       is_sig_valid, is_account_bound, is_nonce_correct
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from models.account_tree import AccountTree
from models.params import (
    CHUNK_BYTES,
    FEE_ACCOUNT_ID,
    WITHDRAW_CHUNKS,
    WITHDRAW_TX_TYPE,
)
from models.tx import TimeRange, WithdrawOp
from primitives.field import fe, fe_to_int
from primitives.packing import PackedAmount, pack_amount, pack_fee
from .base import OperationBranch, WitnessModule
from .utils import SigDataInput, pub_key_hash, verify_signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WithdrawWitness:
    """Every intermediate value the withdraw circuit needs.

    Produced once per `generate` call and never mutated.
    """
    # operation
    account_id: int
    tx_account_id: int
    token: int
    amount: int
    fee: int
    packed_amount: PackedAmount
    packed_fee: PackedAmount
    from_address: bytes
    to_address: bytes
    tx_nonce: int
    time_range: Optional[TimeRange]
    fee_account_id: int

    # branches
    from_before: OperationBranch
    from_after: OperationBranch
    fee_before: OperationBranch
    fee_after: OperationBranch

    # roots
    root_before: int
    root_intermediate: int
    root_after: int

    # arithmetic, as canonical field representatives
    balance_minus_amount: int
    balance_after: int

    # signature
    sig_input: SigDataInput
    tx_message: bytes
    signer_pub_key_hash: bytes

    # flags
    is_sig_valid: bool
    is_account_bound: bool
    is_nonce_correct: bool

    def pubdata(self) -> bytes:
        """Public data committed for the operation, padded to whole chunks.

        Layout: tx_type:1 | account_id:3 | token:2 | packed_amount:5 | packed_fee:2 | to:20
        """
        data = b"".join([
            WITHDRAW_TX_TYPE.to_bytes(1, "big"),
            self.account_id.to_bytes(3, "big"),
            self.token.to_bytes(2, "big"),
            self.packed_amount.to_bytes(),
            self.packed_fee.to_bytes(),
            self.to_address,
        ])
        return data.ljust(WITHDRAW_CHUNKS * CHUNK_BYTES, b"\x00")

    def pubdata_chunks(self) -> List[bytes]:
        data = self.pubdata()
        return [data[i:i + CHUNK_BYTES] for i in range(0, len(data), CHUNK_BYTES)]


class WithdrawWitnessGenerator(WitnessModule):
    """Witness generation for the withdraw operation."""

    def generate(
        self, tree: AccountTree, op: WithdrawOp, sig_input: SigDataInput
    ) -> WithdrawWitness:
        """Apply `op` to a copy of `tree` and record the witness.

        Raises:
            UnknownAccount: If the `from` or fee account has no leaf
            UnpackableAmount: If amount or fee cannot be packed exactly
        """
        tx = op.tx
        from_account = tree.get(op.account_id)
        tree.get(self.fee_account_id)

        packed_amount = pack_amount(tx.amount)
        packed_fee = pack_fee(tx.fee)
        tx_message = tx.message()

        circuit_tree = tree.copy()
        root_before = circuit_tree.root_hash()

        # --- From Account ---
        from_before = self._read_branch(circuit_tree, op.account_id, tx.token)

        balance_minus_amount = fe(from_before.balance) - fe(tx.amount)
        balance_after = balance_minus_amount - fe(tx.fee)
        new_nonce = fe_to_int(fe(from_account.nonce) + fe(1))

        circuit_tree.update(
            op.account_id,
            from_account.with_balance(tx.token, fe_to_int(balance_after)).with_nonce(new_nonce),
        )
        root_intermediate = circuit_tree.root_hash()
        from_after = self._read_branch(circuit_tree, op.account_id, tx.token)

        # --- Fee Account ---
        fee_before = self._read_branch(circuit_tree, self.fee_account_id, tx.token)
        fee_account = circuit_tree.get(self.fee_account_id)
        fee_balance_after = fe(fee_before.balance) + fe(tx.fee)

        circuit_tree.update(
            self.fee_account_id,
            fee_account.with_balance(tx.token, fe_to_int(fee_balance_after)),
        )
        root_after = circuit_tree.root_hash()
        fee_after = self._read_branch(circuit_tree, self.fee_account_id, tx.token)

        # --- Flags ---
        signer_pub_key_hash = pub_key_hash(sig_input.pub_key)
        is_sig_valid = sig_input.message == tx_message and verify_signature(sig_input)
        is_account_bound = (
            tx.account_id == op.account_id
            and from_before.pub_key_hash == signer_pub_key_hash
            and from_before.address == tx.from_address
        )
        is_nonce_correct = tx.nonce == from_before.nonce

        logger.debug(
            "withdraw witness: account=%d token=%d amount=%d fee=%d root %x -> %x",
            op.account_id, tx.token, tx.amount, tx.fee, root_before, root_after,
        )

        return WithdrawWitness(
            account_id=op.account_id,
            tx_account_id=tx.account_id,
            token=tx.token,
            amount=tx.amount,
            fee=tx.fee,
            packed_amount=packed_amount,
            packed_fee=packed_fee,
            from_address=tx.from_address,
            to_address=tx.to_address,
            tx_nonce=tx.nonce,
            time_range=tx.time_range,
            fee_account_id=self.fee_account_id,
            from_before=from_before,
            from_after=from_after,
            fee_before=fee_before,
            fee_after=fee_after,
            root_before=root_before,
            root_intermediate=root_intermediate,
            root_after=root_after,
            balance_minus_amount=fe_to_int(balance_minus_amount),
            balance_after=fe_to_int(balance_after),
            sig_input=sig_input,
            tx_message=tx_message,
            signer_pub_key_hash=signer_pub_key_hash,
            is_sig_valid=is_sig_valid,
            is_account_bound=is_account_bound,
            is_nonce_correct=is_nonce_correct,
        )


def generate(
    tree: AccountTree,
    op: WithdrawOp,
    sig_input: SigDataInput,
    fee_account_id: int = FEE_ACCOUNT_ID,
) -> WithdrawWitness:
    """Generate a withdraw witness. See WithdrawWitnessGenerator.generate."""
    return WithdrawWitnessGenerator(fee_account_id).generate(tree, op, sig_input)
