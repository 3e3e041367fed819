"""Withdraw operation constraint evaluation.

Gates, in order:

1. signature_valid      amount and fee carry their canonical packed form,
                        the message rebuilt from the witness operation
                        fields is the signed one, and the Ed25519
                        signature verifies under the embedded key
2. account_id_matches   tx account id equals the slot, and the slot's leaf
                        carries the signer's pub key hash and the tx `from`
                        address
3. nonce_matches        tx nonce equals the account nonce
4. balance_sufficient   balance - amount and balance - amount - fee both
                        decompose into BALANCE_BIT_WIDTH bits
5. merkle_consistency   after-branches are the before-branches with the
                        operation applied, every branch hashes to its root,
                        and the final root matches the applier's, if given
"""

from typing import Callable, List, Optional

from models.params import BALANCE_BIT_WIDTH
from models.tx import withdraw_message
from primitives.field import fe, fe_to_int, fits_bits
from primitives.packing import PackedAmount, UnpackableAmount, pack_amount, pack_fee
from witness.base import OperationBranch
from witness.utils import pub_key_hash, verify_signature
from witness.withdraw import WithdrawWitness
from .base import ConstraintModule, ConstraintName, Gate, ValidationResult


def _is_canonical_packing(
    packed: PackedAmount, value: int, pack: Callable[[int], PackedAmount]
) -> bool:
    try:
        return packed == pack(value)
    except UnpackableAmount:
        return False


def _same_leaf_position(before: OperationBranch, after: OperationBranch) -> bool:
    return (
        before.account_id == after.account_id
        and before.token == after.token
        and before.balance_path == after.balance_path
        and before.account_path == after.account_path
        and before.pub_key_hash == after.pub_key_hash
        and before.address == after.address
    )


class WithdrawConstraints(ConstraintModule):
    """Constraint evaluation for the withdraw operation."""

    def gates(
        self, witness: WithdrawWitness, expected_root_after: Optional[int] = None
    ) -> List[Gate]:
        return [
            (ConstraintName.SIGNATURE_VALID, lambda: self.signature_valid(witness)),
            (ConstraintName.ACCOUNT_ID_MATCHES, lambda: self.account_id_matches(witness)),
            (ConstraintName.NONCE_MATCHES, lambda: self.nonce_matches(witness)),
            (ConstraintName.BALANCE_SUFFICIENT, lambda: self.balance_sufficient(witness)),
            (
                ConstraintName.MERKLE_CONSISTENCY,
                lambda: self.merkle_consistency(witness, expected_root_after),
            ),
        ]

    # --- Gates ---

    @staticmethod
    def signature_valid(w: WithdrawWitness) -> bool:
        if not _is_canonical_packing(w.packed_amount, w.amount, pack_amount):
            return False
        if not _is_canonical_packing(w.packed_fee, w.fee, pack_fee):
            return False
        try:
            message = withdraw_message(
                account_id=w.tx_account_id,
                from_address=w.from_address,
                to_address=w.to_address,
                token=w.token,
                packed_amount=w.packed_amount,
                packed_fee=w.packed_fee,
                nonce=w.tx_nonce,
                time_range=w.time_range,
            )
        except OverflowError:
            return False
        if message != w.tx_message or w.sig_input.message != message:
            return False
        return verify_signature(w.sig_input)

    @staticmethod
    def account_id_matches(w: WithdrawWitness) -> bool:
        return (
            w.tx_account_id == w.account_id
            and w.from_before.account_id == w.account_id
            and w.from_before.pub_key_hash == pub_key_hash(w.sig_input.pub_key)
            and w.from_before.address == w.from_address
        )

    @staticmethod
    def nonce_matches(w: WithdrawWitness) -> bool:
        return w.tx_nonce == w.from_before.nonce

    @staticmethod
    def balance_sufficient(w: WithdrawWitness) -> bool:
        balance_minus_amount = fe(w.from_before.balance) - fe(w.amount)
        balance_after = balance_minus_amount - fe(w.fee)
        if fe_to_int(balance_minus_amount) != w.balance_minus_amount:
            return False
        if fe_to_int(balance_after) != w.balance_after:
            return False
        # balance-amount bits, then balance-fee bits
        return (
            fits_bits(w.balance_minus_amount, BALANCE_BIT_WIDTH)
            and fits_bits(w.balance_after, BALANCE_BIT_WIDTH)
        )

    @staticmethod
    def merkle_consistency(w: WithdrawWitness, expected_root_after: Optional[int] = None) -> bool:
        # from leaf: balance debited, nonce bumped, nothing else touched
        if not _same_leaf_position(w.from_before, w.from_after):
            return False
        if w.from_after.balance != w.balance_after:
            return False
        if w.from_after.nonce != fe_to_int(fe(w.from_before.nonce) + fe(1)):
            return False

        # fee leaf: balance credited, nothing else touched
        if w.fee_before.account_id != w.fee_account_id or w.fee_before.token != w.token:
            return False
        if not _same_leaf_position(w.fee_before, w.fee_after):
            return False
        if w.fee_after.balance != fe_to_int(fe(w.fee_before.balance) + fe(w.fee)):
            return False
        if w.fee_after.nonce != w.fee_before.nonce:
            return False

        # root chain: before -> intermediate -> after
        if w.from_before.root() != w.root_before:
            return False
        if w.from_after.root() != w.root_intermediate:
            return False
        if w.fee_before.root() != w.root_intermediate:
            return False
        if w.fee_after.root() != w.root_after:
            return False

        return expected_root_after is None or expected_root_after == w.root_after


def evaluate(witness: WithdrawWitness, expected_root_after: Optional[int] = None) -> ValidationResult:
    """Evaluate the withdraw gates. See WithdrawConstraints."""
    return WithdrawConstraints().evaluate(witness, expected_root_after)
